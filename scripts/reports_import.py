from __future__ import annotations

import argparse
import csv
import json
from pathlib import Path
from typing import Any

from hazardradar.config.settings import get_settings
from hazardradar.core.env import resolve_project_path
from hazardradar.core.time import now, parse_datetime
from hazardradar.domain.models import HazardReport
from hazardradar.storage.loader import dump_reports, load_reports


def import_rows_from_csv(path: Path) -> list[dict[str, Any]]:
    with path.open("r", encoding="utf-8-sig", newline="") as f:
        return [row for row in csv.DictReader(f) if isinstance(row, dict)]


def import_rows_from_json(path: Path) -> list[dict[str, Any]]:
    payload = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(payload, list):
        return [r for r in payload if isinstance(r, dict)]
    raise ValueError("Unsupported JSON shape: expected an array of report objects.")


def _as_float(v: Any) -> float | None:
    if v is None or (isinstance(v, str) and not v.strip()):
        return None
    try:
        return float(v)
    except (TypeError, ValueError):
        return None


def _as_text(v: Any) -> str | None:
    s = str(v).strip() if v is not None else ""
    return s or None


def row_to_report(row: dict[str, Any], *, report_id: int, args: argparse.Namespace, timezone: str) -> HazardReport | None:
    title = _as_text(row.get(args.title_field))
    if not title:
        return None
    lat = _as_float(row.get(args.lat_field))
    lng = _as_float(row.get(args.lng_field))
    if lat is None or lng is None:
        lat = lng = None

    raw_ts = _as_text(row.get(args.submitted_field))
    submitted_at = parse_datetime(raw_ts, timezone) if raw_ts else now(timezone)

    photos = row.get("photos") or []
    if isinstance(photos, str):
        photos = [p.strip() for p in photos.split(";") if p.strip()]

    return HazardReport(
        id=report_id,
        title=title,
        severity=_as_text(row.get("severity")),
        description=_as_text(row.get("description")),
        location=_as_text(row.get("location")),
        status=_as_text(row.get("status")) or args.default_status,
        latitude=lat,
        longitude=lng,
        submitted_at=submitted_at,
        user_email=_as_text(row.get(args.email_field)),
        photos=list(photos),
    )


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Append hazard reports from a CSV/JSON dump to the seed file (offline).")
    p.add_argument("--out", type=str, default=None, help="Seed file (default: storage.reports_path or data/reports.json)")
    p.add_argument("--in-csv", type=str, default=None)
    p.add_argument("--in-json", type=str, default=None)
    p.add_argument("--title-field", type=str, default="title")
    p.add_argument("--lat-field", type=str, default="latitude")
    p.add_argument("--lng-field", type=str, default="longitude")
    p.add_argument("--email-field", type=str, default="userEmail")
    p.add_argument("--submitted-field", type=str, default="submittedAt")
    p.add_argument("--default-status", type=str, default="Pending")
    return p


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    if bool(args.in_csv) == bool(args.in_json):
        raise SystemExit("Provide exactly one of --in-csv or --in-json.")

    settings = get_settings()
    out_path = resolve_project_path(args.out or settings.storage.reports_path or "data/reports.json")
    existing = load_reports(out_path, timezone=settings.app.timezone) if out_path.is_file() else []

    if args.in_csv:
        rows = import_rows_from_csv(resolve_project_path(args.in_csv))
    else:
        rows = import_rows_from_json(resolve_project_path(args.in_json))

    next_id = max((r.id for r in existing), default=0) + 1
    added: list[HazardReport] = []
    skipped = 0
    for row in rows:
        report = row_to_report(row, report_id=next_id, args=args, timezone=settings.app.timezone)
        if report is None:
            skipped += 1
            continue
        added.append(report)
        next_id += 1

    written = dump_reports(out_path, [*existing, *added])
    located = sum(1 for r in added if r.coordinates() is not None)
    print(f"added={len(added)} located={located} skipped={skipped} total={len(existing) + len(added)}")
    print(f"  out: {written}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
