from datetime import datetime, timezone

import pytest

from hazardradar.domain.models import CreateReportRequest, HazardReport
from hazardradar.storage.repository import InMemoryReportRepository, ReportNotFoundError


def _seed():
    return [
        HazardReport(
            id=7,
            title="Pothole",
            latitude=28.61,
            longitude=77.20,
            submitted_at=datetime(2025, 7, 1, tzinfo=timezone.utc),
            user_email="parv@gmail.com",
        ),
        HazardReport(id=3, title="Signal down", submitted_at=datetime(2025, 7, 2, tzinfo=timezone.utc)),
    ]


def test_create_assigns_next_id_and_timestamp():
    repo = InMemoryReportRepository(_seed(), timezone="Asia/Kolkata")
    report = repo.create(CreateReportRequest(title="Open manhole", latitude=28.7, longitude=77.1, userEmail="a@b.c"))

    assert report.id == 8
    assert report.submitted_at.tzinfo is not None
    assert report.coordinates() is not None
    assert repo.find_by_id(8) == report


def test_create_drops_half_specified_coordinates():
    repo = InMemoryReportRepository()
    report = repo.create(CreateReportRequest(title="Debris", latitude=28.7))
    assert report.id == 1
    assert report.latitude is None and report.longitude is None


def test_duplicate_seed_ids_are_rejected():
    seed = _seed()
    with pytest.raises(ValueError, match="duplicate report id 7"):
        InMemoryReportRepository([seed[0], seed[0]])


def test_find_by_user_email_filters_exactly():
    repo = InMemoryReportRepository(_seed())
    assert [r.id for r in repo.find_by_user_email("parv@gmail.com")] == [7]
    assert repo.find_by_user_email("nobody@example.com") == []


def test_update_status_replaces_status_and_keeps_other_fields():
    repo = InMemoryReportRepository(_seed())
    updated = repo.update_status(7, "Resolved")
    assert updated.status == "Resolved"
    assert updated.title == "Pothole"
    assert repo.find_by_id(7).status == "Resolved"


def test_update_status_unknown_id_raises():
    repo = InMemoryReportRepository(_seed())
    with pytest.raises(ReportNotFoundError):
        repo.update_status(99, "Resolved")


def test_find_within_radius_sees_reports_created_after_first_query():
    repo = InMemoryReportRepository(_seed())
    assert [r.id for r in repo.find_within_radius(28.61, 77.20, 1)] == [7]

    repo.create(CreateReportRequest(title="Fallen tree", latitude=28.611, longitude=77.201))
    assert [r.id for r in repo.find_within_radius(28.61, 77.20, 1)] == [7, 8]


def test_find_within_radius_excludes_reports_without_coordinates():
    repo = InMemoryReportRepository(_seed())
    ids = [r.id for r in repo.find_within_radius(0, 0, 25_000)]
    assert 3 not in ids
