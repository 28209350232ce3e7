"""Domain models for building detection inside territory polygons."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


@dataclass(frozen=True, slots=True)
class PolygonPoint:
    """A polygon vertex or test point in decimal degrees."""

    latitude: float
    longitude: float


@dataclass(frozen=True, slots=True)
class BoundingBox:
    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float

    @property
    def is_empty(self) -> bool:
        """True when no finite point contributed to the box."""
        return self.min_lat > self.max_lat or self.min_lng > self.max_lng


class BuildingSource(str, Enum):
    LIVE = "osm"
    SIMULATED = "simulated"


@dataclass(slots=True)
class DetectedBuilding:
    """A building found inside (or simulated for) an agent-drawn polygon."""

    id: str
    latitude: float
    longitude: float
    address: str
    source: BuildingSource
    building_number: Optional[int] = None


@dataclass(slots=True)
class BuildingDetectionResult:
    buildings: List[DetectedBuilding] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    target_count: int = 0
    area_sq_m: float = 0.0

    def warn(self, message: str) -> None:
        if message not in self.warnings:
            self.warnings.append(message)


@dataclass(frozen=True, slots=True)
class FootprintFeature:
    """Representative point of a building feature returned by the footprint registry."""

    feature_id: str
    latitude: float
    longitude: float


@dataclass(frozen=True, slots=True)
class GeocodeResult:
    address: str
    building_number: Optional[int] = None
    warning: Optional[str] = None

