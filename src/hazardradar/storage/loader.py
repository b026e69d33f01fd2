"""
Seed file loader.

The seed file is a local JSON array of reports (e.g. `data/reports.json`). We validate
it into typed Pydantic models so the repository can assume a consistent shape.
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import TypeAdapter

from hazardradar.core.env import resolve_project_path
from hazardradar.core.time import ensure_tz
from hazardradar.domain.models import HazardReport


_REPORTS_ADAPTER = TypeAdapter(list[HazardReport])


def load_reports(path: str | Path, *, timezone: str = "UTC") -> list[HazardReport]:
    """Load and validate a report seed file; naive timestamps get `timezone`."""
    resolved = resolve_project_path(path)
    payload = json.loads(resolved.read_text(encoding="utf-8"))
    if not isinstance(payload, list):
        raise ValueError(f"Invalid report file {resolved}; expected a JSON array.")
    reports = _REPORTS_ADAPTER.validate_python(payload)
    return [r.model_copy(update={"submitted_at": ensure_tz(r.submitted_at, timezone)}) for r in reports]


def dump_reports(path: str | Path, reports: list[HazardReport]) -> Path:
    """Write reports in the seed file format (used by the import script)."""
    resolved = resolve_project_path(path)
    resolved.parent.mkdir(parents=True, exist_ok=True)
    payload = [r.model_dump(mode="json", by_alias=True) for r in reports]
    resolved.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
    return resolved
