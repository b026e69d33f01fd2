"""
HazardRadar CLI entrypoint.

Offline access to the report store for quick local checks without the API:
- `nearby`: run a proximity query against a seed file
- `reports`: list reports (optionally for one user)
- `serve`: run the API with uvicorn
"""

from __future__ import annotations

import argparse
import json
from typing import Any

from hazardradar.config.settings import get_settings
from hazardradar.core.geo import GeoPoint
from hazardradar.core.logging import configure_logging
from hazardradar.proximity.nearby import ProximityError, find_nearby
from hazardradar.storage.loader import load_reports
from hazardradar.storage.repository import InMemoryReportRepository, build_repository


def _repository(args: argparse.Namespace) -> InMemoryReportRepository:
    settings = get_settings()
    if not args.reports:
        return build_repository(settings)
    return InMemoryReportRepository(
        load_reports(args.reports, timezone=settings.app.timezone),
        timezone=settings.app.timezone,
        index_cell_size_deg=settings.proximity.index_cell_size_deg,
    )


def _cmd_nearby(args: argparse.Namespace) -> int:
    """Handle the `nearby` subcommand."""
    settings = get_settings()
    radius = settings.proximity.default_radius_km if args.radius is None else float(args.radius)

    result = find_nearby(_repository(args), GeoPoint(lat=float(args.lat), lon=float(args.lng)), radius)
    if isinstance(result, ProximityError):
        print(f"error: {result.message}")
        return 2 if result.kind == "invalid_input" else 1

    if args.json:
        print(json.dumps([r.model_dump(mode="json", by_alias=True) for r in result], ensure_ascii=False, indent=2))
        return 0

    print(f"{len(result)} hazards within {radius:g} km of ({args.lat}, {args.lng})")
    for r in result:
        print(f"{r.distance:>9}  #{r.id} [{r.severity or '-'}] {r.title} ({r.status or 'unknown'})")
    return 0


def _cmd_reports(args: argparse.Namespace) -> int:
    """Handle the `reports` subcommand."""
    repo = _repository(args)
    reports = repo.find_by_user_email(args.email) if args.email else repo.find_all()
    print(json.dumps([r.model_dump(mode="json", by_alias=True) for r in reports], ensure_ascii=False, indent=2))
    return 0


def _cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("hazardradar.api.app:app", host=args.host, port=int(args.port), log_config=None)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="hazardradar", description="Hazard report proximity tools.")
    sub = parser.add_subparsers(dest="command", required=True)

    near = sub.add_parser("nearby", help="List reports within a radius of a point.")
    near.add_argument("--lat", type=float, required=True)
    near.add_argument("--lng", type=float, required=True)
    near.add_argument("--radius", type=float, default=None, help="Radius in km (default from settings)")
    near.add_argument("--reports", type=str, default=None, help="Report seed JSON (default from settings)")
    near.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    near.set_defaults(func=_cmd_nearby)

    rep = sub.add_parser("reports", help="Dump stored reports as JSON.")
    rep.add_argument("--reports", type=str, default=None, help="Report seed JSON (default from settings)")
    rep.add_argument("--email", type=str, default=None, help="Only reports submitted by this user")
    rep.set_defaults(func=_cmd_reports)

    srv = sub.add_parser("serve", help="Run the HTTP API.")
    srv.add_argument("--host", type=str, default="127.0.0.1")
    srv.add_argument("--port", type=int, default=8000)
    srv.set_defaults(func=_cmd_serve)
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint callable used by `python -m hazardradar.cli`."""
    configure_logging()
    parser = build_parser()
    args = parser.parse_args(argv)
    func: Any = getattr(args, "func")
    return int(func(args))


if __name__ == "__main__":
    raise SystemExit(main())
