"""Routing request/response schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from ..config import settings


class OptimizationSettings(BaseModel):
    max_stops: Optional[int] = Field(None, ge=1, description="Upper bound on stops in the optimised route.")
    estimated_duration_per_stop: Optional[int] = Field(
        None, ge=0, description="Minutes budgeted for each visit."
    )

    @field_validator("max_stops")
    @classmethod
    def validate_max_stops(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value > settings.route_max_stops_ceiling:
            raise ValueError(f"max_stops must be <= {settings.route_max_stops_ceiling}")
        return value


class RouteCandidate(BaseModel):
    property_id: str
    coordinates: Optional[tuple[float, float]] = Field(
        default=None, description="Property location as [longitude, latitude]."
    )


class RouteOptimizationRequest(BaseModel):
    candidates: List[RouteCandidate] = Field(..., description="Properties to visit.")
    start_location: Optional[tuple[float, float]] = Field(
        default=None, description="Where the agent starts, as [longitude, latitude]."
    )
    end_location: Optional[tuple[float, float]] = Field(
        default=None, description="Where the agent finishes, as [longitude, latitude]."
    )
    settings: Optional[OptimizationSettings] = None


class OptimizedStopModel(BaseModel):
    property_id: str
    order: int
    estimated_duration: int
    status: str


class EffectiveSettings(BaseModel):
    max_stops: int
    estimated_duration_per_stop: int


class RouteOptimizationResponse(BaseModel):
    stops: List[OptimizedStopModel]
    total_stops: int
    total_distance_miles: float
    total_duration_minutes: int
    start_location: Optional[tuple[float, float]] = None
    end_location: Optional[tuple[float, float]] = None
    settings: EffectiveSettings
