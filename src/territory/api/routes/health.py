"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...config import settings

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


def _get_footprint_health_check():
    """Lazy import to avoid startup failures."""
    from ...services.detection.footprints import check_health as footprint_health_check
    return footprint_health_check


@router.get("/health/footprints", status_code=status.HTTP_200_OK)
def health_footprints() -> dict:
    """Check that the building footprint registry answers queries."""
    try:
        footprint_health_check = _get_footprint_health_check()
        status_flag = footprint_health_check()
        return {"service": "overpass", "healthy": status_flag}
    except Exception as e:
        return {"service": "overpass", "healthy": False, "error": str(e)}


@router.get("/health/geocoding", status_code=status.HTTP_200_OK)
def health_geocoding() -> dict:
    """Report whether reverse geocoding is configured."""
    configured = bool(settings.google_maps_api_key)
    return {
        "service": "google_geocoding",
        "configured": configured,
        "message": "Google Maps API key configured."
        if configured
        else "Set TERRITORY_GOOGLE_MAPS_API_KEY to resolve street addresses.",
    }
