"""Pydantic request/response models for building detection endpoints."""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field


class DetectBuildingsRequest(BaseModel):
    polygon: Optional[list[Any]] = Field(
        default=None,
        description="Polygon vertices as [lng, lat] pairs or {latitude, longitude} objects.",
    )
    boundary: Optional[dict[str, Any]] = Field(
        default=None,
        description="GeoJSON Polygon geometry; used when 'polygon' is not supplied.",
    )


class DetectedBuildingModel(BaseModel):
    id: str
    latitude: float
    longitude: float
    address: str
    building_number: Optional[int] = None
    source: Literal["osm", "simulated"]


class DetectBuildingsResponse(BaseModel):
    buildings: list[DetectedBuildingModel]
    warnings: list[str]
    target_count: int
    area_sq_m: float
    house_numbers: dict
