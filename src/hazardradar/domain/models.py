"""
Domain models (Pydantic).

These types represent the stable "contract" between layers:
- stored reports (`HazardReport`) owned by the repository
- API/CLI inputs (`CreateReportRequest`)
- proximity query output (`NearbyHazard`)

Keeping these models in one place helps keep JSON output consistent across CLI/API.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from hazardradar.core.geo import GeoPoint


class HazardReport(BaseModel):
    """A location-tagged hazard report as held by the repository."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    title: str
    severity: str | None = None
    description: str | None = None
    location: str | None = None
    status: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    submitted_at: datetime = Field(alias="submittedAt")
    user_email: str | None = Field(default=None, alias="userEmail")
    photos: list[str] = Field(default_factory=list)

    def coordinates(self) -> GeoPoint | None:
        """Return the report position, or None when either coordinate is missing."""
        if self.latitude is None or self.longitude is None:
            return None
        return GeoPoint(lat=self.latitude, lon=self.longitude)


class CreateReportRequest(BaseModel):
    """Payload for submitting a new report."""

    model_config = ConfigDict(populate_by_name=True)

    user_email: str | None = Field(default=None, alias="userEmail")
    title: str
    location: str | None = None
    status: str | None = None
    severity: str | None = None
    description: str | None = None
    photos: list[str] = Field(default_factory=list)
    latitude: float | None = None
    longitude: float | None = None


class NearbyHazard(BaseModel):
    """One proximity query hit: the report's public fields plus its distance label."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    title: str
    severity: str | None = None
    description: str | None = None
    latitude: float
    longitude: float
    location: str | None = None
    status: str | None = None
    distance: str
    submitted_at: datetime = Field(alias="submittedAt")
