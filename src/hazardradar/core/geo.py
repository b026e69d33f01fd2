from __future__ import annotations
from dataclasses import dataclass
from math import asin, atan2, cos, degrees, radians, sin, sqrt

"""
Geospatial helpers.

We keep a tiny geometry layer here so the proximity engine and the repository can
do distance calculations without pulling in heavier GIS dependencies.
"""

EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True)
class GeoPoint:
    """A latitude/longitude pair in decimal degrees."""

    lat: float
    lon: float


@dataclass(frozen=True)
class BoundingBox:
    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float

    def contains(self, lat: float, lon: float) -> bool:
        return self.min_lat <= lat <= self.max_lat and self.min_lon <= lon <= self.max_lon


WHOLE_GLOBE = BoundingBox(-90.0, 90.0, -180.0, 180.0)


def in_valid_range(lat: float, lon: float) -> bool:
    return -90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0


def haversine_km(a: GeoPoint, b: GeoPoint) -> float:
    """Compute great-circle distance in kilometers between two points."""
    dlat = radians(b.lat - a.lat)
    dlon = radians(b.lon - a.lon)

    h = sin(dlat / 2) ** 2 + cos(radians(a.lat)) * cos(radians(b.lat)) * sin(dlon / 2) ** 2
    # Rounding can push h just outside [0, 1] (antipodes, out-of-range latitudes).
    h = min(1.0, max(0.0, h))
    c = 2 * atan2(sqrt(h), sqrt(1 - h))
    return EARTH_RADIUS_KM * c


def format_distance_km(distance_km: float) -> str:
    """Render a distance the way clients display it, e.g. `14.1 km`."""
    return f"{distance_km:.1f} km"


def bounding_box(center: GeoPoint, radius_km: float) -> BoundingBox:
    """Return a lat/lon box that fully contains the circle around `center`.

    The box is a superset of the circle: callers still have to check the true
    distance. Near the poles (or when the circle crosses them) longitude is left
    unbounded; antimeridian wrap-around is handled by the same fallback.
    A centre outside the WGS-84 ranges gets the whole globe.
    """
    if not in_valid_range(center.lat, center.lon):
        return WHOLE_GLOBE
    r = max(float(radius_km), 0.0)
    # Padded so points sitting exactly on the circle survive float rounding.
    angular = r / EARTH_RADIUS_KM * (1 + 1e-9)
    dlat = degrees(angular)
    min_lat = center.lat - dlat
    max_lat = center.lat + dlat
    if min_lat <= -90 or max_lat >= 90:
        return BoundingBox(max(min_lat, -90.0), min(max_lat, 90.0), -180.0, 180.0)

    # Angular radius projected onto the parallel at the box's widest latitude.
    widest = max(abs(min_lat), abs(max_lat))
    ratio = sin(angular) / cos(radians(widest))
    if ratio >= 1:
        return BoundingBox(min_lat, max_lat, -180.0, 180.0)
    dlon = degrees(asin(ratio))
    min_lon = center.lon - dlon
    max_lon = center.lon + dlon
    if min_lon < -180 or max_lon > 180:
        return BoundingBox(min_lat, max_lat, -180.0, 180.0)
    return BoundingBox(min_lat, max_lat, min_lon, max_lon)
