from __future__ import annotations

# Nearby-hazard query: the repository supplies a cheap candidate superset, and this
# module measures each candidate against the query point, drops the ones beyond
# the radius and shapes the survivors into `NearbyHazard` rows.
#
# `find_nearby` never raises for expected failures; it returns a `ProximityError`
# and lets the boundary (API/CLI) choose the status code.

import logging
import math
from dataclasses import dataclass
from typing import Literal

from hazardradar.core.geo import GeoPoint, format_distance_km, haversine_km
from hazardradar.domain.models import HazardReport, NearbyHazard
from hazardradar.storage.repository import ReportRepository

logger = logging.getLogger(__name__)

NEARBY_DEFAULT_RADIUS_KM = 2.0


@dataclass(frozen=True)
class ProximityError:
    """Failed nearby query. `message` is safe to show to clients."""

    kind: Literal["invalid_input", "internal"]
    message: str


def _is_number(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def select_candidates(repository: ReportRepository, center: GeoPoint, radius_km: float) -> list[HazardReport]:
    """Ask the repository for reports that may lie within `radius_km` of `center`."""
    candidates = repository.find_within_radius(center.lat, center.lon, radius_km)
    located = [r for r in candidates if r.coordinates() is not None]
    if len(located) != len(candidates):
        logger.debug("Dropped %d candidates without coordinates", len(candidates) - len(located))
    return located


def to_nearby_hazard(report: HazardReport, distance_km: float) -> NearbyHazard:
    return NearbyHazard(
        id=report.id,
        title=report.title,
        severity=report.severity,
        description=report.description,
        latitude=report.latitude,
        longitude=report.longitude,
        location=report.location,
        status=report.status,
        distance=format_distance_km(distance_km),
        submitted_at=report.submitted_at,
    )


def find_nearby(
    repository: ReportRepository,
    center: GeoPoint,
    radius_km: float = NEARBY_DEFAULT_RADIUS_KM,
) -> list[NearbyHazard] | ProximityError:
    """Return reports within `radius_km` of `center`, annotated with their distance.

    Results keep the repository's candidate order. Any failure yields a
    `ProximityError` and no partial results.
    """
    if not (_is_number(center.lat) and _is_number(center.lon)):
        return ProximityError("invalid_input", "lat and lng must be finite numbers")
    if not _is_number(radius_km) or radius_km < 0:
        return ProximityError("invalid_input", "radius must be a finite, non-negative number")

    try:
        results: list[NearbyHazard] = []
        for report in select_candidates(repository, center, radius_km):
            distance_km = haversine_km(center, report.coordinates())
            if distance_km <= radius_km:
                results.append(to_nearby_hazard(report, distance_km))
    except Exception:
        logger.exception("Nearby query failed (lat=%.5f lng=%.5f radius=%.3f)", center.lat, center.lon, radius_km)
        return ProximityError("internal", "Internal server error")

    logger.debug("Nearby query lat=%.5f lng=%.5f radius=%.3f -> %d hits", center.lat, center.lon, radius_km, len(results))
    return results
