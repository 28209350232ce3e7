"""Routing domain models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional


class StopStatus(str, Enum):
    PENDING = "PENDING"


@dataclass(frozen=True, slots=True)
class RouteStopCandidate:
    """A property to visit. Coordinates follow the GeoJSON (lng, lat) order."""

    property_ref: Any
    coordinates: Optional[tuple[float, float]]


@dataclass(slots=True)
class OptimizedStop:
    property_ref: Any
    order: int
    estimated_duration_minutes: int
    status: StopStatus = StopStatus.PENDING
    # (lng, lat) the stop was sequenced at; not part of the API response.
    coordinates: Optional[tuple[float, float]] = None


@dataclass(frozen=True, slots=True)
class SequencerSettings:
    max_stops: int = 50
    estimated_duration_per_stop_minutes: int = 15


@dataclass(slots=True)
class RouteSummary:
    stops: List[OptimizedStop]
    total_distance_miles: float
    total_duration_minutes: int
