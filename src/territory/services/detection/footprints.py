"""HTTP client for the OpenStreetMap Overpass building footprint registry."""

from __future__ import annotations

import logging
import math
from typing import Any, Protocol

import httpx

from ...config import settings
from ...models.domain import BoundingBox, FootprintFeature

logger = logging.getLogger(__name__)


class FootprintService(Protocol):
    def fetch(self, box: BoundingBox) -> list[FootprintFeature]:
        ...


def build_overpass_query(box: BoundingBox) -> str:
    """Overpass QL selecting every building-tagged element inside ``box``."""
    bbox = f"{box.min_lat},{box.min_lng},{box.max_lat},{box.max_lng}"
    return (
        "[out:json];\n"
        "(\n"
        f'  way["building"]({bbox});\n'
        f'  relation["building"]({bbox});\n'
        f'  node["building"]({bbox});\n'
        ");\n"
        "out center;\n"
    )


def _finite_pair(lat: Any, lon: Any) -> tuple[float, float] | None:
    for value in (lat, lon):
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            return None
    return float(lat), float(lon)


def element_coordinates(element: dict) -> tuple[float, float] | None:
    """Pick a representative (lat, lon) for an Overpass element.

    Nodes carry ``lat``/``lon`` directly, ways and relations get a ``center``
    from ``out center``; the first ``geometry`` vertex is the last resort.
    """
    pair = _finite_pair(element.get("lat"), element.get("lon"))
    if pair:
        return pair
    center = element.get("center")
    if isinstance(center, dict):
        pair = _finite_pair(center.get("lat"), center.get("lon"))
        if pair:
            return pair
    geometry = element.get("geometry")
    if isinstance(geometry, list) and geometry and isinstance(geometry[0], dict):
        return _finite_pair(geometry[0].get("lat"), geometry[0].get("lon"))
    return None


def parse_overpass_elements(data: Any) -> list[FootprintFeature]:
    elements = data.get("elements") if isinstance(data, dict) else None
    if not isinstance(elements, list):
        logger.warning("Overpass response missing elements")
        return []

    features: list[FootprintFeature] = []
    for element in elements:
        if not isinstance(element, dict):
            continue
        pair = element_coordinates(element)
        if pair is None:
            continue
        latitude, longitude = pair
        # OSM ids are only unique per element type.
        element_type = element.get("type")
        feature_id = f"{element_type}-{element.get('id')}" if element_type else str(element.get("id"))
        features.append(FootprintFeature(feature_id=feature_id, latitude=latitude, longitude=longitude))
    return features


class OverpassFootprintClient:
    """Fetch building footprints inside a bounding box.

    Each call performs exactly one request; retries are the caller's concern.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self.base_url = base_url or settings.overpass_url
        self.timeout = timeout if timeout is not None else settings.overpass_timeout_seconds
        self._client = client

    def _get_client(self) -> httpx.Client:
        if self._client is not None:
            return self._client
        return httpx.Client(timeout=httpx.Timeout(self.timeout, connect=10.0))

    def fetch(self, box: BoundingBox) -> list[FootprintFeature]:
        if box.is_empty:
            return []

        logger.info(
            f"Fetching building footprints in bbox "
            f"({box.min_lat:.6f},{box.min_lng:.6f})-({box.max_lat:.6f},{box.max_lng:.6f})"
        )
        client = self._get_client()
        try:
            response = client.get(self.base_url, params={"data": build_overpass_query(box)})
            response.raise_for_status()
            features = parse_overpass_elements(response.json())
        finally:
            if client is not self._client:
                client.close()

        logger.info(f"Overpass returned {len(features)} building candidates")
        return features


def check_health(base_url: str | None = None) -> bool:
    """Probe the Overpass endpoint with a trivial status query."""
    base = base_url or settings.overpass_url
    if not base:
        return False
    try:
        response = httpx.get(base, params={"data": "[out:json];out;"}, timeout=5.0)
        response.raise_for_status()
        return isinstance(response.json(), dict)
    except httpx.HTTPError:
        return False
    except ValueError:
        # Body was not JSON
        return False
