"""Building detection services."""

from .service import InvalidPolygonError, compute_target_count, detect_buildings_within_polygon

__all__ = ["InvalidPolygonError", "compute_target_count", "detect_buildings_within_polygon"]
