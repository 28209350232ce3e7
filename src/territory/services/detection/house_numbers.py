"""Odd/even house-number breakdown for detected buildings."""

from __future__ import annotations

from typing import Iterable, Optional

from ...models.domain import DetectedBuilding


def categorize_house_numbers(numbers: Iterable[Optional[int]]) -> dict[str, list[int]]:
    valid = [number for number in numbers if number is not None and number > 0]
    return {
        "odd": [number for number in valid if number % 2 == 1],
        "even": [number for number in valid if number % 2 == 0],
    }


def house_number_stats(categorized: dict[str, list[int]]) -> dict:
    odd = categorized.get("odd", [])
    even = categorized.get("even", [])
    stats: dict = {
        "total": len(odd) + len(even),
        "odd_count": len(odd),
        "even_count": len(even),
    }
    if odd:
        stats["odd_range"] = {"min": min(odd), "max": max(odd)}
    if even:
        stats["even_range"] = {"min": min(even), "max": max(even)}
    return stats


def summarize_house_numbers(buildings: Iterable[DetectedBuilding]) -> dict:
    """Street-side summary used by canvassers to split a block between agents."""
    categorized = categorize_house_numbers(building.building_number for building in buildings)
    return {**categorized, **house_number_stats(categorized)}
