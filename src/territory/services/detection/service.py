"""Building detection inside agent-drawn polygons.

Live footprints come from the footprint registry and are labelled through
reverse geocoding. Whenever either service under-delivers, the result is
topped up with simulated buildings so the agent still sees an approximate
building density for the area. Only malformed polygons raise.
"""

from __future__ import annotations

import logging
import math
import random
import threading
import time
import uuid
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterator, Sequence

from ...config import settings
from ...models.domain import (
    BoundingBox,
    BuildingDetectionResult,
    BuildingSource,
    DetectedBuilding,
    FootprintFeature,
    GeocodeResult,
    PolygonPoint,
)
from ...schemas.detection import DetectBuildingsRequest, DetectBuildingsResponse, DetectedBuildingModel
from ..geospatial import (
    bounding_box,
    normalize_polygon,
    point_in_polygon,
    polygon_area,
    polygon_from_geojson,
)
from ..retry import with_retries
from .footprints import FootprintService, OverpassFootprintClient
from .geocoding import GoogleReverseGeocoder, ReverseGeocoder, reverse_geocode
from .house_numbers import summarize_house_numbers

LIVE_DATA_UNAVAILABLE_WARNING = (
    "Unable to fetch live building data right now. Using simulated points for this area."
)
SIMULATED_BUILDINGS_WARNING = (
    "Limited real building data available. Added simulated buildings to approximate the area."
)
CANCELLED_WARNING = "Building detection was cancelled; results are partial."

logger = logging.getLogger(__name__)


class InvalidPolygonError(ValueError):
    """Raised when a polygon has fewer than three points."""


def compute_target_count(
    area_sq_m: float,
    *,
    square_meters_per_lot: float | None = None,
    minimum: int | None = None,
    maximum: int | None = None,
) -> int:
    """Number of buildings to aim for, assuming one residential lot per ``square_meters_per_lot``."""
    lot = square_meters_per_lot or settings.square_meters_per_lot
    lower = minimum if minimum is not None else settings.min_target_buildings
    upper = maximum if maximum is not None else settings.max_target_buildings
    if not math.isfinite(area_sq_m) or area_sq_m <= 0:
        return lower
    # Half-up rounding; round() would round halves to even.
    estimate = math.floor(area_sq_m / lot + 0.5)
    return max(lower, min(upper, estimate))


def _is_cancelled(cancel_event: threading.Event | None) -> bool:
    return cancel_event is not None and cancel_event.is_set()


def _contained_features(
    features: Sequence[FootprintFeature], polygon: Sequence[PolygonPoint]
) -> list[FootprintFeature]:
    contained: list[FootprintFeature] = []
    for feature in features:
        if not (math.isfinite(feature.latitude) and math.isfinite(feature.longitude)):
            continue
        if point_in_polygon(PolygonPoint(latitude=feature.latitude, longitude=feature.longitude), polygon):
            contained.append(feature)
    return contained


def _geocode_in_order(
    features: Sequence[FootprintFeature],
    geocoder: ReverseGeocoder,
    *,
    max_workers: int,
    sleep: Callable[[float], None],
    cancel_event: threading.Event | None,
) -> Iterator[tuple[FootprintFeature, GeocodeResult]]:
    """Yield geocoded features in discovery order.

    With more than one worker, lookups run ahead in a bounded pool but are
    still handed back in the order the features were discovered.
    """
    if max_workers <= 1 or len(features) <= 1:
        for feature in features:
            if _is_cancelled(cancel_event):
                return
            yield feature, reverse_geocode(feature.latitude, feature.longitude, geocoder, sleep=sleep)
        return

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [
            executor.submit(reverse_geocode, feature.latitude, feature.longitude, geocoder, sleep=sleep)
            for feature in features
        ]
        try:
            for feature, future in zip(features, futures):
                if _is_cancelled(cancel_event):
                    return
                yield feature, future.result()
        finally:
            for future in futures:
                future.cancel()


def random_point_in_polygon(
    polygon: Sequence[PolygonPoint],
    box: BoundingBox,
    rng: random.Random,
    *,
    max_attempts: int | None = None,
) -> PolygonPoint | None:
    """Rejection-sample a point inside ``polygon``; None after ``max_attempts`` misses."""
    if box.is_empty:
        return None
    attempts = max_attempts or settings.simulation_max_attempts
    for _ in range(attempts):
        point = PolygonPoint(
            latitude=box.min_lat + rng.random() * (box.max_lat - box.min_lat),
            longitude=box.min_lng + rng.random() * (box.max_lng - box.min_lng),
        )
        if point_in_polygon(point, polygon):
            return point
    return None


def detect_buildings_within_polygon(
    polygon: Sequence[PolygonPoint],
    *,
    footprints: FootprintService | None = None,
    geocoder: ReverseGeocoder | None = None,
    rng: random.Random | None = None,
    cancel_event: threading.Event | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> BuildingDetectionResult:
    points = list(polygon)
    if len(points) < 3:
        raise InvalidPolygonError("Polygon must contain at least three points")

    logger.info(f"Starting building detection for polygon with {len(points)} points")

    footprints = footprints if footprints is not None else OverpassFootprintClient()
    geocoder = geocoder if geocoder is not None else GoogleReverseGeocoder()
    rng = rng or random.Random()

    area = polygon_area(points)
    target_count = compute_target_count(area)
    box = bounding_box(points)
    result = BuildingDetectionResult(target_count=target_count, area_sq_m=area)

    logger.info(f"Polygon metrics: area={area:.1f} m2, target_count={target_count}, bbox={box}")

    features: list[FootprintFeature] = []
    if not _is_cancelled(cancel_event):
        try:
            features = with_retries(
                lambda: footprints.fetch(box),
                attempts=settings.footprint_max_attempts,
                initial_delay=settings.footprint_backoff_seconds,
                sleep=sleep,
                description="Footprint query",
            )
        except Exception as exc:
            logger.error(f"Failed to fetch building footprints: {exc}")
            result.warn(LIVE_DATA_UNAVAILABLE_WARNING)

    contained = _contained_features(features, points)[:target_count]
    logger.info(f"{len(contained)} of {len(features)} footprint candidates fall inside the polygon")

    for feature, geocoded in _geocode_in_order(
        contained,
        geocoder,
        max_workers=settings.geocode_max_workers,
        sleep=sleep,
        cancel_event=cancel_event,
    ):
        if geocoded.warning:
            result.warn(geocoded.warning)
        result.buildings.append(
            DetectedBuilding(
                id=f"{BuildingSource.LIVE.value}-{feature.feature_id}",
                latitude=feature.latitude,
                longitude=feature.longitude,
                address=geocoded.address,
                building_number=geocoded.building_number,
                source=BuildingSource.LIVE,
            )
        )

    missing = target_count - len(result.buildings)
    if missing > 0 and not _is_cancelled(cancel_event):
        logger.info(f"Adding up to {missing} simulated buildings")
        run_token = uuid.uuid4().hex[:8]
        for index in range(missing):
            if _is_cancelled(cancel_event):
                break
            point = random_point_in_polygon(points, box, rng)
            if point is None:
                logger.warning(f"No interior point found after sampling; stopping with {index} simulated buildings")
                break
            result.buildings.append(
                DetectedBuilding(
                    id=f"sim-{run_token}-{index}",
                    latitude=point.latitude,
                    longitude=point.longitude,
                    address=f"Simulated building near {point.latitude:.6f}, {point.longitude:.6f}",
                    source=BuildingSource.SIMULATED,
                )
            )
        result.warn(SIMULATED_BUILDINGS_WARNING)

    if _is_cancelled(cancel_event):
        result.warn(CANCELLED_WARNING)

    logger.info(
        f"Building detection finished: {len(result.buildings)} buildings, {len(result.warnings)} warnings"
    )
    return result


def process_detection_request(payload: DetectBuildingsRequest) -> DetectBuildingsResponse:
    """Normalise client polygon input and run detection for the HTTP layer."""
    if payload.polygon is not None:
        polygon = normalize_polygon(payload.polygon)
    else:
        polygon = polygon_from_geojson(payload.boundary)

    if len(polygon) < 3:
        raise InvalidPolygonError(
            "A polygon with at least three coordinates is required to detect buildings."
        )

    detection = detect_buildings_within_polygon(polygon)
    return DetectBuildingsResponse(
        buildings=[
            DetectedBuildingModel(
                id=building.id,
                latitude=building.latitude,
                longitude=building.longitude,
                address=building.address,
                building_number=building.building_number,
                source=building.source.value,
            )
            for building in detection.buildings
        ],
        warnings=list(detection.warnings),
        target_count=detection.target_count,
        area_sq_m=round(detection.area_sq_m, 2),
        house_numbers=summarize_house_numbers(detection.buildings),
    )
