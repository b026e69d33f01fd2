"""
Lightweight spatial indexing (grid bucket) for lat/lon points.

Used to avoid O(N) scans when the report store grows to thousands of hazards.
Queries return a candidate superset (bounding-box match); exact distance checks
are left to the caller.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

from hazardradar.core.geo import GeoPoint, bounding_box, in_valid_range

T = TypeVar("T")


@dataclass(frozen=True)
class _Entry(Generic[T]):
    seq: int
    item: T
    lat: float
    lon: float


class SpatialGridIndex(Generic[T]):
    def __init__(
        self,
        items: list[T],
        *,
        get_latlon: Callable[[T], tuple[float, float] | None],
        cell_size_deg: float = 0.05,
    ):
        if float(cell_size_deg) <= 0:
            raise ValueError("cell_size_deg must be > 0")
        self._cell_size_deg = float(cell_size_deg)
        self._cells: dict[tuple[int, int], list[_Entry[T]]] = {}
        # Out-of-range points have no meaningful cell; every query returns them.
        self._outliers: list[_Entry[T]] = []
        self._size = 0

        for it in items:
            latlon = get_latlon(it)
            if latlon is None:
                continue
            lat_f = float(latlon[0])
            lon_f = float(latlon[1])
            if not (math.isfinite(lat_f) and math.isfinite(lon_f)):
                continue
            e = _Entry(seq=self._size, item=it, lat=lat_f, lon=lon_f)
            self._size += 1
            if in_valid_range(lat_f, lon_f):
                self._cells.setdefault(self._cell_key(lat_f, lon_f), []).append(e)
            else:
                self._outliers.append(e)

    def __len__(self) -> int:
        return self._size

    def _cell_key(self, lat: float, lon: float) -> tuple[int, int]:
        return (int(math.floor(lat / self._cell_size_deg)), int(math.floor(lon / self._cell_size_deg)))

    def query_candidates(self, *, lat: float, lon: float, radius_km: float) -> list[T]:
        """Return items inside the bounding box of the circle (plus out-of-range items), in insertion order."""
        r = float(radius_km)
        if r < 0:
            return []
        box = bounding_box(GeoPoint(lat=float(lat), lon=float(lon)), r)
        lat_lo, lon_lo = self._cell_key(box.min_lat, box.min_lon)
        lat_hi, lon_hi = self._cell_key(box.max_lat, box.max_lon)

        # Wide boxes (polar caps, huge radii) cover more cells than we have occupied.
        span = (lat_hi - lat_lo + 1) * (lon_hi - lon_lo + 1)
        if span > len(self._cells):
            keys = [
                k for k in self._cells if lat_lo <= k[0] <= lat_hi and lon_lo <= k[1] <= lon_hi
            ]
        else:
            keys = [(i, j) for i in range(lat_lo, lat_hi + 1) for j in range(lon_lo, lon_hi + 1)]

        hits: list[_Entry[T]] = list(self._outliers)
        for key in keys:
            cell = self._cells.get(key)
            if not cell:
                continue
            for e in cell:
                if box.contains(e.lat, e.lon):
                    hits.append(e)
        hits.sort(key=lambda e: e.seq)
        return [e.item for e in hits]
