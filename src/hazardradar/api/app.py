# src/hazardradar/api/app.py
"""
FastAPI application wiring.

`create_app()` builds the `FastAPI` instance and attaches its collaborators
(settings + report repository) to `app.state`; routes reach them through
dependencies in `hazardradar.api.routes`. Tests build their own app with a stub
repository instead of patching module globals.
"""

from __future__ import annotations

import os

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from hazardradar.config.settings import Settings, get_settings
from hazardradar.core.logging import configure_logging
from hazardradar.storage.repository import ReportRepository, build_repository

from .routes import router


_LOCAL_ORIGIN_REGEX = r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$"


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _add_cors(app: FastAPI) -> None:
    """Allow browser clients (e.g. a local map UI) to call the API.

    - `HAZARDRADAR_CORS_ORIGINS`: comma-separated explicit origins
    - `HAZARDRADAR_CORS_ALLOW_ORIGIN_REGEX`: origin pattern, wins over the local default
    - `HAZARDRADAR_CORS_ALLOW_LOCAL=0`: drop the localhost allowance used when nothing else is set
    """
    origins = [o.strip() for o in os.getenv("HAZARDRADAR_CORS_ORIGINS", "").split(",") if o.strip()]
    regex = os.getenv("HAZARDRADAR_CORS_ALLOW_ORIGIN_REGEX", "").strip()
    if not regex and not origins and _env_flag("HAZARDRADAR_CORS_ALLOW_LOCAL", True):
        regex = _LOCAL_ORIGIN_REGEX
    if not (origins or regex):
        return
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_origin_regex=regex or None,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def create_app(*, settings: Settings | None = None, repository: ReportRepository | None = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title=f"{settings.app.name} API", version="0.1.0")
    app.state.settings = settings
    app.state.repository = repository if repository is not None else build_repository(settings)
    _add_cors(app)
    app.include_router(router)
    return app


configure_logging()

app = create_app()
