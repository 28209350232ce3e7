"""Geospatial helper functions."""

from __future__ import annotations

import math
import sys
from typing import Any, Iterable, Mapping, Sequence

from shapely.geometry import Polygon

from ..models.domain import BoundingBox, PolygonPoint

EARTH_RADIUS_MILES = 3959.0
# WGS84 equatorial radius, used for the local planar projection.
EARTH_RADIUS_METERS = 6_378_137.0


def _is_finite_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def haversine_miles(origin: Sequence[float], destination: Sequence[float]) -> float:
    """Great-circle distance in miles between two ``(lng, lat)`` pairs.

    The pair order is longitude first, matching GeoJSON coordinates.
    """

    lng1, lat1 = origin[0], origin[1]
    lng2, lat2 = destination[0], destination[1]
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    # Rounding can push ``a`` a hair above 1 for antipodal points.
    a = min(1.0, a)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_MILES * c


def bounding_box(polygon: Iterable[PolygonPoint]) -> BoundingBox:
    """Return the latitude/longitude extent of ``polygon``.

    Points with non-finite coordinates are skipped. When nothing usable is
    found the box comes back inverted (min > max); see ``BoundingBox.is_empty``.
    """

    min_lat = math.inf
    max_lat = -math.inf
    min_lng = math.inf
    max_lng = -math.inf

    for point in polygon:
        if point is None:
            continue
        if not (_is_finite_number(point.latitude) and _is_finite_number(point.longitude)):
            continue
        min_lat = min(min_lat, point.latitude)
        max_lat = max(max_lat, point.latitude)
        min_lng = min(min_lng, point.longitude)
        max_lng = max(max_lng, point.longitude)

    return BoundingBox(min_lat=min_lat, max_lat=max_lat, min_lng=min_lng, max_lng=max_lng)


def point_in_polygon(point: PolygonPoint, polygon: Sequence[PolygonPoint]) -> bool:
    """Even-odd ray casting test with longitude as x and latitude as y.

    Edges are half-open in latitude and the crossing comparison is strict, so
    points on the western or southern side of a ring count as inside while
    points on the eastern or northern side count as outside.
    """

    count = len(polygon)
    if count < 3:
        return False

    inside = False
    j = count - 1
    for i in range(count):
        current = polygon[i]
        previous = polygon[j]
        j = i
        if current is None or previous is None:
            continue
        xi, yi = current.longitude, current.latitude
        xj, yj = previous.longitude, previous.latitude

        if (yi > point.latitude) != (yj > point.latitude):
            # Epsilon keeps horizontal edges from dividing by zero.
            crossing = (xj - xi) * (point.latitude - yi) / (yj - yi + sys.float_info.epsilon) + xi
            if point.longitude < crossing:
                inside = not inside
    return inside


def _project_equirectangular(point: PolygonPoint, reference_latitude: float) -> tuple[float, float]:
    x = math.radians(point.longitude) * EARTH_RADIUS_METERS * math.cos(math.radians(reference_latitude))
    y = math.radians(point.latitude) * EARTH_RADIUS_METERS
    return x, y


def polygon_area(polygon: Sequence[PolygonPoint]) -> float:
    """Approximate polygon area in square meters.

    Vertices are projected onto a plane centred on the mean latitude before
    the shoelace area is taken. Good for city-block sized shapes only.
    Vertices with non-finite coordinates are skipped, as in ``bounding_box``.
    """

    finite = [
        point
        for point in polygon
        if point is not None and _is_finite_number(point.latitude) and _is_finite_number(point.longitude)
    ]
    if len(finite) < 3:
        return 0.0
    reference_latitude = sum(point.latitude for point in finite) / len(finite)
    projected = [_project_equirectangular(point, reference_latitude) for point in finite]
    return float(Polygon(projected).area)


def _coerce_float(value: Any) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def normalize_polygon(raw_points: Any) -> list[PolygonPoint]:
    """Turn loosely shaped client input into polygon points.

    Accepts ``[lng, lat]`` pairs (GeoJSON order) and mappings carrying
    ``latitude``/``longitude``, ``lat``/``lng`` or a ``coordinates`` pair.
    Entries without two finite numbers are dropped.
    """

    if not isinstance(raw_points, (list, tuple)):
        return []

    normalized: list[PolygonPoint] = []
    for raw in raw_points:
        latitude: float | None = None
        longitude: float | None = None

        if isinstance(raw, (list, tuple)) and len(raw) >= 2:
            longitude = _coerce_float(raw[0])
            latitude = _coerce_float(raw[1])
        elif isinstance(raw, PolygonPoint):
            latitude = _coerce_float(raw.latitude)
            longitude = _coerce_float(raw.longitude)
        elif isinstance(raw, Mapping):
            coordinates = raw.get("coordinates")
            pair = coordinates if isinstance(coordinates, (list, tuple)) and len(coordinates) >= 2 else None
            if "latitude" in raw:
                latitude = _coerce_float(raw["latitude"])
            elif "lat" in raw:
                latitude = _coerce_float(raw["lat"])
            elif pair is not None:
                latitude = _coerce_float(pair[1])
            if "longitude" in raw:
                longitude = _coerce_float(raw["longitude"])
            elif "lng" in raw:
                longitude = _coerce_float(raw["lng"])
            elif pair is not None:
                longitude = _coerce_float(pair[0])

        if latitude is not None and longitude is not None:
            normalized.append(PolygonPoint(latitude=latitude, longitude=longitude))
    return normalized


def polygon_from_geojson(boundary: Mapping[str, Any] | None) -> list[PolygonPoint]:
    """Extract the outer ring of a GeoJSON ``Polygon`` geometry."""

    if not boundary:
        return []
    coordinates = boundary.get("coordinates")
    if (
        isinstance(coordinates, (list, tuple))
        and coordinates
        and isinstance(coordinates[0], (list, tuple))
        and coordinates[0]
        and isinstance(coordinates[0][0], (list, tuple))
    ):
        return normalize_polygon(list(coordinates[0]))
    return []
