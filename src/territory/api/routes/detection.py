"""Building detection endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from ...schemas.detection import DetectBuildingsRequest, DetectBuildingsResponse
from ...services.detection.service import process_detection_request

router = APIRouter(prefix="/zones", tags=["zones"])


@router.post("/detect-buildings", response_model=DetectBuildingsResponse, status_code=status.HTTP_200_OK)
def detect_buildings(payload: DetectBuildingsRequest) -> DetectBuildingsResponse:
    """Buildings inside an agent-drawn polygon, with simulated fill-ins when live data is thin."""
    try:
        return process_detection_request(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error detecting buildings: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to detect buildings for the provided polygon."
        ) from exc
