from datetime import datetime, timezone

from starlette.testclient import TestClient

from hazardradar.api.app import create_app
from hazardradar.config.settings import get_settings
from hazardradar.domain.models import HazardReport
from hazardradar.storage.repository import InMemoryReportRepository


def _client(reports=()):
    repo = InMemoryReportRepository(reports, timezone="Asia/Kolkata")
    return TestClient(create_app(settings=get_settings(), repository=repo)), repo


def _delhi_reports():
    return [
        HazardReport(
            id=1,
            title="Waterlogging",
            severity="Medium",
            description="Underpass flooded",
            location="nearby area",
            status="Pending",
            latitude=28.7041,
            longitude=77.1025,
            submitted_at=datetime(2025, 7, 15, 13, 10, tzinfo=timezone.utc),
            user_email="asha@example.com",
        ),
        HazardReport(
            id=2,
            title="Broken signal",
            status="Pending",
            submitted_at=datetime(2025, 7, 16, tzinfo=timezone.utc),
            user_email="parv@gmail.com",
        ),
    ]


class _ExplodingRepository:
    def find_within_radius(self, lat, lng, radius_km):
        raise RuntimeError("connection pool exhausted: postgres://secret@db")


def test_api_nearby_returns_annotated_reports():
    client, _ = _client(_delhi_reports())
    with client as c:
        resp = c.get("/api/reports/nearby", params={"lat": 28.6139, "lng": 77.2090, "radius": 20})
    assert resp.status_code == 200
    data = resp.json()
    assert len(data) == 1
    item = data[0]
    assert set(item) == {
        "id",
        "title",
        "severity",
        "description",
        "latitude",
        "longitude",
        "location",
        "status",
        "distance",
        "submittedAt",
    }
    assert item["id"] == 1
    assert item["distance"].startswith("14.") and item["distance"].endswith(" km")


def test_api_nearby_excludes_reports_outside_radius():
    client, _ = _client(_delhi_reports())
    with client as c:
        resp = c.get("/api/reports/nearby", params={"lat": 28.6139, "lng": 77.2090, "radius": 5})
    assert resp.status_code == 200
    assert resp.json() == []


def test_api_nearby_default_radius_matches_explicit_two_km():
    client, repo = _client(_delhi_reports())
    with client as c:
        default = c.get("/api/reports/nearby", params={"lat": 28.7041, "lng": 77.1100})
        explicit = c.get("/api/reports/nearby", params={"lat": 28.7041, "lng": 77.1100, "radius": 2})
    assert default.status_code == explicit.status_code == 200
    assert default.json() == explicit.json()
    assert [r["id"] for r in default.json()] == [1]


def test_api_nearby_requires_numeric_coordinates():
    client, _ = _client()
    with client as c:
        missing = c.get("/api/reports/nearby", params={"lat": 28.6})
        junk = c.get("/api/reports/nearby", params={"lat": "north", "lng": 77.2})
        negative = c.get("/api/reports/nearby", params={"lat": 28.6, "lng": 77.2, "radius": -1})
    assert missing.status_code == 422
    assert junk.status_code == 422
    assert negative.status_code == 400
    assert negative.json()["detail"]["code"] == "VALIDATION_ERROR"


def test_api_nearby_hides_internal_failure_details():
    app = create_app(settings=get_settings(), repository=_ExplodingRepository())
    with TestClient(app) as c:
        resp = c.get("/api/reports/nearby", params={"lat": 28.6, "lng": 77.2})
    assert resp.status_code == 500
    body = resp.json()
    assert body["detail"]["code"] == "INTERNAL_ERROR"
    assert "secret" not in resp.text


def test_api_create_then_fetch_report():
    client, _ = _client()
    payload = {
        "userEmail": "parv@gmail.com",
        "title": "Open manhole",
        "location": "Karol Bagh",
        "status": "Pending",
        "severity": "High",
        "description": "Cover missing",
        "photos": ["uploads/manhole.jpg"],
        "latitude": 28.6519,
        "longitude": 77.1909,
    }
    with client as c:
        created = c.post("/api/reports", json=payload)
        assert created.status_code == 200
        report = created.json()
        fetched = c.get(f"/api/reports/{report['id']}")
        by_user = c.get("/api/reports/user", params={"email": "parv@gmail.com"})
        everything = c.get("/api/reports")

    assert report["id"] == 1
    assert report["userEmail"] == "parv@gmail.com"
    assert report["submittedAt"]
    assert fetched.status_code == 200
    assert fetched.json() == report
    assert [r["id"] for r in by_user.json()] == [1]
    assert len(everything.json()) == 1


def test_api_create_without_coordinates_never_shows_up_nearby():
    client, _ = _client()
    with client as c:
        c.post("/api/reports", json={"title": "Oil spill", "latitude": 28.6139})
        resp = c.get("/api/reports/nearby", params={"lat": 28.6139, "lng": 77.2090, "radius": 20000})
    assert resp.status_code == 200
    assert resp.json() == []


def test_api_get_unknown_report_is_404():
    client, _ = _client()
    with client as c:
        resp = c.get("/api/reports/42")
    assert resp.status_code == 404
    assert resp.json()["detail"]["code"] == "NOT_FOUND"


def test_api_update_status_accepts_plain_text_and_json_bodies():
    client, repo = _client(_delhi_reports())
    with client as c:
        plain = c.patch("/api/reports/1/status", content="In Progress", headers={"content-type": "text/plain"})
        as_json = c.patch("/api/reports/2/status", json="Resolved")
        wrapped = c.patch("/api/reports/2/status", json={"status": "Closed"})
        bad = c.patch("/api/reports/2/status", json=5)
        missing = c.patch("/api/reports/99/status", content="Resolved", headers={"content-type": "text/plain"})

    assert plain.status_code == 200
    assert plain.json()["status"] == "In Progress"
    assert as_json.json()["status"] == "Resolved"
    assert wrapped.json()["status"] == "Closed"
    assert repo.find_by_id(2).status == "Closed"
    assert bad.status_code == 400
    assert missing.status_code == 404


def test_cors_allows_localhost_origin_by_default(monkeypatch):
    for name in ("HAZARDRADAR_CORS_ORIGINS", "HAZARDRADAR_CORS_ALLOW_ORIGIN_REGEX", "HAZARDRADAR_CORS_ALLOW_LOCAL"):
        monkeypatch.delenv(name, raising=False)
    client, _ = _client(_delhi_reports())

    resp = client.get("/api/reports", headers={"Origin": "http://localhost:5173"})
    assert resp.status_code == 200
    assert resp.headers["access-control-allow-origin"] == "http://localhost:5173"

    other = client.get("/api/reports", headers={"Origin": "https://evil.example"})
    assert "access-control-allow-origin" not in other.headers


def test_cors_explicit_origins_replace_localhost_default(monkeypatch):
    monkeypatch.delenv("HAZARDRADAR_CORS_ALLOW_ORIGIN_REGEX", raising=False)
    monkeypatch.setenv("HAZARDRADAR_CORS_ORIGINS", "https://map.example.org")
    client, _ = _client()

    allowed = client.get("/api/reports", headers={"Origin": "https://map.example.org"})
    assert allowed.headers["access-control-allow-origin"] == "https://map.example.org"

    local = client.get("/api/reports", headers={"Origin": "http://localhost:5173"})
    assert "access-control-allow-origin" not in local.headers


def test_cors_can_be_disabled(monkeypatch):
    for name in ("HAZARDRADAR_CORS_ORIGINS", "HAZARDRADAR_CORS_ALLOW_ORIGIN_REGEX"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HAZARDRADAR_CORS_ALLOW_LOCAL", "0")
    client, _ = _client()

    resp = client.get("/api/reports", headers={"Origin": "http://localhost:5173"})
    assert "access-control-allow-origin" not in resp.headers
