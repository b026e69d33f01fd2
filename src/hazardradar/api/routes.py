"""
API routes.

Endpoints (all under `/api/reports`):
- GET   ``: every report.
- GET   `/user?email=`: reports submitted by one user.
- GET   `/nearby?lat=&lng=&radius=`: reports within `radius` km, with distance labels.
- GET   `/{id}`: one report.
- POST  ``: submit a report.
- PATCH `/{id}/status`: replace a report's status (body: plain text or a JSON string).
"""

from __future__ import annotations

import json

from fastapi import APIRouter, Depends, HTTPException, Request

from hazardradar.config.settings import Settings
from hazardradar.core.geo import GeoPoint
from hazardradar.domain.models import CreateReportRequest, HazardReport, NearbyHazard
from hazardradar.proximity.nearby import ProximityError, find_nearby
from hazardradar.storage.repository import ReportNotFoundError, ReportRepository

router = APIRouter(prefix="/api/reports")


def get_repository(request: Request) -> ReportRepository:
    return request.app.state.repository


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def _not_found(report_id: int) -> HTTPException:
    return HTTPException(
        status_code=404,
        detail={"code": "NOT_FOUND", "message": f"report {report_id} not found"},
    )


def _parse_status_body(raw: bytes, content_type: str) -> str:
    """Accept `open`, `"open"` or `{"status": "open"}` as the new status."""
    text = raw.decode("utf-8").strip()
    if "json" not in content_type:
        return text
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError("status body is not valid JSON") from e
    if isinstance(payload, dict):
        payload = payload.get("status")
    if not isinstance(payload, str):
        raise ValueError("status must be a string")
    return payload


@router.get("", response_model=list[HazardReport])
def list_reports(repository: ReportRepository = Depends(get_repository)) -> list[HazardReport]:
    """Return every stored report (not used by the user dashboard)."""
    return repository.find_all()


@router.get("/user", response_model=list[HazardReport])
def list_reports_by_user(email: str, repository: ReportRepository = Depends(get_repository)) -> list[HazardReport]:
    """Return the reports submitted with `email`."""
    return repository.find_by_user_email(email)


@router.get("/nearby", response_model=list[NearbyHazard])
def get_nearby_reports(
    lat: float,
    lng: float,
    radius: float | None = None,
    repository: ReportRepository = Depends(get_repository),
    settings: Settings = Depends(get_app_settings),
) -> list[NearbyHazard]:
    """Return reports within `radius` km (default from settings) of (`lat`, `lng`)."""
    radius_km = settings.proximity.default_radius_km if radius is None else radius
    result = find_nearby(repository, GeoPoint(lat=lat, lon=lng), radius_km)
    if isinstance(result, ProximityError):
        if result.kind == "invalid_input":
            raise HTTPException(status_code=400, detail={"code": "VALIDATION_ERROR", "message": result.message})
        raise HTTPException(status_code=500, detail={"code": "INTERNAL_ERROR", "message": result.message})
    return result


@router.get("/{report_id}", response_model=HazardReport)
def get_report(report_id: int, repository: ReportRepository = Depends(get_repository)) -> HazardReport:
    report = repository.find_by_id(report_id)
    if report is None:
        raise _not_found(report_id)
    return report


@router.post("", response_model=HazardReport)
def create_report(
    payload: CreateReportRequest, repository: ReportRepository = Depends(get_repository)
) -> HazardReport:
    """Store a new report; coordinates are kept only when both are provided."""
    return repository.create(payload)


@router.patch("/{report_id}/status", response_model=HazardReport)
async def update_report_status(
    report_id: int, request: Request, repository: ReportRepository = Depends(get_repository)
) -> HazardReport:
    try:
        status = _parse_status_body(await request.body(), request.headers.get("content-type", ""))
    except ValueError as e:
        raise HTTPException(status_code=400, detail={"code": "VALIDATION_ERROR", "message": str(e)}) from e
    try:
        return repository.update_status(report_id, status)
    except ReportNotFoundError as e:
        raise _not_found(report_id) from e
