"""
Report repository.

`ReportRepository` is the persistence contract the API and the proximity engine
depend on. `InMemoryReportRepository` is the implementation shipped here: reports
live in process memory (nothing is durable) and radius queries go through a grid
spatial index that is rebuilt lazily after writes.
"""

from __future__ import annotations

import logging
import threading
from typing import Iterable, Protocol

from hazardradar.config.settings import Settings
from hazardradar.core.spatial_index import SpatialGridIndex
from hazardradar.core.time import now
from hazardradar.domain.models import CreateReportRequest, HazardReport
from hazardradar.storage.loader import load_reports

logger = logging.getLogger(__name__)


class ReportNotFoundError(KeyError):
    """Raised when a report id is unknown."""

    def __init__(self, report_id: int):
        super().__init__(report_id)
        self.report_id = report_id


class ReportRepository(Protocol):
    def find_all(self) -> list[HazardReport]: ...

    def find_by_user_email(self, email: str) -> list[HazardReport]: ...

    def find_by_id(self, report_id: int) -> HazardReport | None: ...

    def create(self, request: CreateReportRequest) -> HazardReport: ...

    def update_status(self, report_id: int, status: str) -> HazardReport: ...

    def find_within_radius(self, lat: float, lng: float, radius_km: float) -> list[HazardReport]:
        """Candidate superset for a radius query.

        Never drops a report that lies within `radius_km`; may return some outside it.
        Reports without coordinates are never returned.
        """
        ...


def _report_latlon(report: HazardReport) -> tuple[float, float] | None:
    point = report.coordinates()
    return None if point is None else (point.lat, point.lon)


class InMemoryReportRepository:
    """Thread-safe in-memory store keyed by report id (ids assigned sequentially)."""

    def __init__(
        self,
        reports: Iterable[HazardReport] = (),
        *,
        timezone: str = "UTC",
        index_cell_size_deg: float = 0.05,
    ):
        self._timezone = timezone
        self._cell_size_deg = float(index_cell_size_deg)
        self._lock = threading.Lock()
        self._reports: dict[int, HazardReport] = {}
        for r in reports:
            if r.id in self._reports:
                raise ValueError(f"duplicate report id {r.id}")
            self._reports[r.id] = r
        self._next_id = max(self._reports, default=0) + 1
        self._index: SpatialGridIndex[HazardReport] | None = None

    def find_all(self) -> list[HazardReport]:
        with self._lock:
            return list(self._reports.values())

    def find_by_user_email(self, email: str) -> list[HazardReport]:
        with self._lock:
            return [r for r in self._reports.values() if r.user_email == email]

    def find_by_id(self, report_id: int) -> HazardReport | None:
        with self._lock:
            return self._reports.get(report_id)

    def create(self, request: CreateReportRequest) -> HazardReport:
        latitude = longitude = None
        if request.latitude is not None and request.longitude is not None:
            latitude, longitude = request.latitude, request.longitude

        with self._lock:
            report = HazardReport(
                id=self._next_id,
                title=request.title,
                severity=request.severity,
                description=request.description,
                location=request.location,
                status=request.status,
                latitude=latitude,
                longitude=longitude,
                submitted_at=now(self._timezone),
                user_email=request.user_email,
                photos=list(request.photos),
            )
            self._reports[report.id] = report
            self._next_id += 1
            self._index = None
        logger.info("Created report id=%s title=%r", report.id, report.title)
        return report

    def update_status(self, report_id: int, status: str) -> HazardReport:
        with self._lock:
            current = self._reports.get(report_id)
            if current is None:
                raise ReportNotFoundError(report_id)
            updated = current.model_copy(update={"status": status})
            self._reports[report_id] = updated
            self._index = None
        logger.info("Report id=%s status -> %r", report_id, status)
        return updated

    def find_within_radius(self, lat: float, lng: float, radius_km: float) -> list[HazardReport]:
        with self._lock:
            if self._index is None:
                self._index = SpatialGridIndex(
                    list(self._reports.values()),
                    get_latlon=_report_latlon,
                    cell_size_deg=self._cell_size_deg,
                )
                logger.debug("Rebuilt spatial index over %d located reports", len(self._index))
            index = self._index
        return index.query_candidates(lat=lat, lon=lng, radius_km=radius_km)


def build_repository(settings: Settings) -> InMemoryReportRepository:
    """Create the repository described by settings, seeded from `storage.reports_path` if set."""
    reports: list[HazardReport] = []
    if settings.storage.reports_path:
        reports = load_reports(settings.storage.reports_path, timezone=settings.app.timezone)
        logger.info("Loaded %d reports from %s", len(reports), settings.storage.reports_path)
    return InMemoryReportRepository(
        reports,
        timezone=settings.app.timezone,
        index_cell_size_deg=settings.proximity.index_cell_size_deg,
    )
