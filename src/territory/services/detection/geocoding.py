"""Reverse geocoding of detected buildings."""

from __future__ import annotations

import logging
import re
import time
from typing import Callable, Optional, Protocol

import httpx

from ...config import settings
from ...models.domain import GeocodeResult
from ..retry import with_retries

MISSING_KEY_WARNING = "Google Maps API key not configured. Using coordinates as addresses."
LOOKUP_FAILED_WARNING = "Reverse geocoding failed for some buildings. Using coordinates as addresses."

_LEADING_NUMBER = re.compile(r"^(\d+)")

logger = logging.getLogger(__name__)


class ReverseGeocoder(Protocol):
    @property
    def available(self) -> bool:
        ...

    def reverse(self, latitude: float, longitude: float) -> Optional[str]:
        ...


def fallback_address(latitude: float, longitude: float) -> str:
    return f"Building at {latitude:.6f}, {longitude:.6f}"


def extract_building_number(address: str) -> Optional[int]:
    """Leading street number of ``address``, e.g. 123 for "123 Main St"."""
    match = _LEADING_NUMBER.match(address.strip()) if address else None
    if not match:
        return None
    return int(match.group(1))


class GoogleReverseGeocoder:
    """Google Geocoding API client for latitude/longitude lookups."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.google_maps_api_key
        self.base_url = base_url or settings.google_geocode_url
        self.timeout = timeout if timeout is not None else settings.geocode_timeout_seconds
        self._client = client

    @property
    def available(self) -> bool:
        return bool(self.api_key)

    def _get_client(self) -> httpx.Client:
        if self._client is not None:
            return self._client
        return httpx.Client(timeout=self.timeout)

    def reverse(self, latitude: float, longitude: float) -> Optional[str]:
        """Formatted address for the coordinate, or None when Google has no match.

        Transport errors and non-2xx responses raise ``httpx.HTTPError``.
        """
        if not self.available:
            raise RuntimeError("Google Maps API key is not configured.")

        client = self._get_client()
        try:
            response = client.get(
                self.base_url,
                params={"latlng": f"{latitude},{longitude}", "key": self.api_key},
            )
            response.raise_for_status()
            data = response.json()
        finally:
            if client is not self._client:
                client.close()

        if not isinstance(data, dict):
            return None
        results = data.get("results")
        if data.get("status") != "OK" or not isinstance(results, list) or not results:
            logger.debug(f"Reverse geocode returned status {data.get('status')!r} for {latitude},{longitude}")
            return None
        formatted = results[0].get("formatted_address") if isinstance(results[0], dict) else None
        return formatted or None


def reverse_geocode(
    latitude: float,
    longitude: float,
    geocoder: ReverseGeocoder,
    *,
    attempts: int | None = None,
    backoff_seconds: float | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> GeocodeResult:
    """Resolve an address for one building, never raising.

    Falls back to a coordinate label and reports why through ``warning``.
    """
    if not geocoder.available:
        return GeocodeResult(address=fallback_address(latitude, longitude), warning=MISSING_KEY_WARNING)

    try:
        address = with_retries(
            lambda: geocoder.reverse(latitude, longitude),
            attempts=attempts if attempts is not None else settings.geocode_max_attempts,
            initial_delay=backoff_seconds if backoff_seconds is not None else settings.geocode_backoff_seconds,
            sleep=sleep,
            description="Reverse geocode",
        )
    except Exception as exc:
        logger.warning(f"Reverse geocode failed for {latitude:.6f},{longitude:.6f}: {exc}")
        return GeocodeResult(address=fallback_address(latitude, longitude), warning=LOOKUP_FAILED_WARNING)

    if not address:
        return GeocodeResult(address=fallback_address(latitude, longitude), warning=LOOKUP_FAILED_WARNING)
    return GeocodeResult(address=address, building_number=extract_building_number(address))
