"""Routing orchestration service."""

from __future__ import annotations

import logging

from ...config import settings
from ...schemas.routing import (
    EffectiveSettings,
    OptimizedStopModel,
    RouteOptimizationRequest,
    RouteOptimizationResponse,
)
from .models import RouteStopCandidate, SequencerSettings
from .sequencer import summarize_route, usable_coordinates

logger = logging.getLogger(__name__)


def _build_settings(payload: RouteOptimizationRequest) -> SequencerSettings:
    overrides = payload.settings
    return SequencerSettings(
        max_stops=overrides.max_stops
        if overrides and overrides.max_stops is not None
        else settings.route_default_max_stops,
        estimated_duration_per_stop_minutes=overrides.estimated_duration_per_stop
        if overrides and overrides.estimated_duration_per_stop is not None
        else settings.route_default_minutes_per_stop,
    )


def optimize_route(payload: RouteOptimizationRequest) -> RouteOptimizationResponse:
    if not payload.candidates:
        raise ValueError("At least one property is required to optimize a route.")

    candidates = [
        RouteStopCandidate(property_ref=candidate.property_id, coordinates=candidate.coordinates)
        for candidate in payload.candidates
    ]
    usable = sum(1 for candidate in candidates if usable_coordinates(candidate.coordinates) is not None)
    if usable == 0:
        raise ValueError("No properties with valid location data found.")
    if usable < len(candidates):
        logger.info(f"Skipping {len(candidates) - usable} properties without usable coordinates")

    sequencer_settings = _build_settings(payload)
    summary = summarize_route(
        candidates,
        start_location=payload.start_location,
        end_location=payload.end_location,
        settings=sequencer_settings,
    )
    logger.info(
        f"Optimized route with {len(summary.stops)} stops, "
        f"{summary.total_distance_miles:.2f} mi, {summary.total_duration_minutes} min"
    )

    return RouteOptimizationResponse(
        stops=[
            OptimizedStopModel(
                property_id=str(stop.property_ref),
                order=stop.order,
                estimated_duration=stop.estimated_duration_minutes,
                status=stop.status.value,
            )
            for stop in summary.stops
        ],
        total_stops=len(summary.stops),
        total_distance_miles=summary.total_distance_miles,
        total_duration_minutes=summary.total_duration_minutes,
        start_location=payload.start_location,
        end_location=payload.end_location,
        settings=EffectiveSettings(
            max_stops=sequencer_settings.max_stops,
            estimated_duration_per_stop=sequencer_settings.estimated_duration_per_stop_minutes,
        ),
    )
