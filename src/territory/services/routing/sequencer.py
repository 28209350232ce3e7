"""Greedy nearest-neighbour visit ordering for canvassing routes.

This is a construction heuristic, not a TSP solver: each step walks to the
closest unvisited property by great-circle distance. Runs in O(n^2), which
is fine for the capped stop counts a single agent walks in a day.
"""

from __future__ import annotations

import math
from typing import Any, Optional, Sequence

from ...config import settings as app_settings
from ..geospatial import haversine_miles
from .models import OptimizedStop, RouteStopCandidate, RouteSummary, SequencerSettings, StopStatus


def usable_coordinates(coordinates: Any) -> Optional[tuple[float, float]]:
    """Return ``coordinates`` as a ``(lng, lat)`` float pair, or None if unusable."""
    if not isinstance(coordinates, (list, tuple)) or len(coordinates) < 2:
        return None
    lng, lat = coordinates[0], coordinates[1]
    for value in (lng, lat):
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            return None
    return float(lng), float(lat)


def _validate_settings(settings: SequencerSettings) -> None:
    ceiling = app_settings.route_max_stops_ceiling
    if settings.max_stops < 1 or settings.max_stops > ceiling:
        raise ValueError(f"max_stops must be between 1 and {ceiling}, got {settings.max_stops}.")
    if settings.estimated_duration_per_stop_minutes < 0:
        raise ValueError("estimated_duration_per_stop_minutes must not be negative.")


def sequence_stops(
    candidates: Sequence[RouteStopCandidate],
    start_location: Optional[Sequence[float]] = None,
    end_location: Optional[Sequence[float]] = None,
    settings: SequencerSettings | None = None,
) -> list[OptimizedStop]:
    """Order ``candidates`` by repeatedly visiting the nearest remaining one.

    ``end_location`` is accepted for interface parity with the route request
    but does not influence the order. Candidates without usable coordinates
    are skipped and do not count against ``max_stops``. Ties keep the earlier
    candidate, so the same input always yields the same order.
    """
    settings = settings or SequencerSettings()
    _validate_settings(settings)

    pool: list[tuple[RouteStopCandidate, tuple[float, float]]] = []
    for candidate in candidates:
        coordinates = usable_coordinates(candidate.coordinates)
        if coordinates is not None:
            pool.append((candidate, coordinates))

    start = usable_coordinates(start_location) if start_location is not None else None
    if start is not None:
        current = start
    elif pool:
        current = pool[0][1]
    else:
        current = (0.0, 0.0)

    stops: list[OptimizedStop] = []
    while pool and len(stops) < settings.max_stops:
        nearest_index = 0
        min_distance = haversine_miles(current, pool[0][1])
        for index in range(1, len(pool)):
            distance = haversine_miles(current, pool[index][1])
            if distance < min_distance:
                min_distance = distance
                nearest_index = index

        candidate, coordinates = pool.pop(nearest_index)
        stops.append(
            OptimizedStop(
                property_ref=candidate.property_ref,
                order=len(stops) + 1,
                estimated_duration_minutes=settings.estimated_duration_per_stop_minutes,
                status=StopStatus.PENDING,
                coordinates=coordinates,
            )
        )
        current = coordinates

    return stops


def total_distance_miles(stops: Sequence[OptimizedStop]) -> float:
    """Sum of leg distances between consecutive stops, rounded to 2 decimals.

    Uses the coordinates each stop was sequenced at. Start and end anchors
    are not part of the total.
    """
    total = 0.0
    for current, following in zip(stops, stops[1:]):
        if current.coordinates is not None and following.coordinates is not None:
            total += haversine_miles(current.coordinates, following.coordinates)
    return round(total, 2)


def summarize_route(
    candidates: Sequence[RouteStopCandidate],
    start_location: Optional[Sequence[float]] = None,
    end_location: Optional[Sequence[float]] = None,
    settings: SequencerSettings | None = None,
) -> RouteSummary:
    settings = settings or SequencerSettings()
    stops = sequence_stops(candidates, start_location, end_location, settings)
    return RouteSummary(
        stops=stops,
        total_distance_miles=total_distance_miles(stops),
        total_duration_minutes=len(stops) * settings.estimated_duration_per_stop_minutes,
    )
