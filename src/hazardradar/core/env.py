"""
Environment + project-root helpers.

The API, the CLI and the import script all read relative paths (seed file, `.env`)
and may be started from any working directory. Paths are therefore resolved against
the project root rather than the CWD.

Env knobs:
- `HAZARDRADAR_PROJECT_ROOT`: pin the root explicitly (CI, containers)
- `HAZARDRADAR_ENV_FILE`: load this env file instead of `<root>/.env`
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Iterator

from dotenv import load_dotenv

_ROOT_MARKERS = (".env", ".git", "pyproject.toml")


def _search_starts() -> Iterator[Path]:
    yield Path.cwd()
    yield Path(__file__).parent


def _find_marked_root(start: Path) -> Path | None:
    start = start.resolve()
    for candidate in (start, *start.parents):
        if any((candidate / marker).exists() for marker in _ROOT_MARKERS):
            return candidate
    return None


@lru_cache
def get_project_root() -> Path:
    """Return the project root (cached); falls back to the CWD."""
    pinned = os.getenv("HAZARDRADAR_PROJECT_ROOT")
    if pinned:
        return Path(pinned).expanduser().resolve()

    for start in _search_starts():
        found = _find_marked_root(start)
        if found is not None:
            return found
    return Path.cwd().resolve()


@lru_cache
def load_dotenv_if_present() -> Path | None:
    """Load the env file once; variables already in the environment are never replaced."""
    explicit = os.getenv("HAZARDRADAR_ENV_FILE")
    env_path = Path(explicit).expanduser().resolve() if explicit else get_project_root() / ".env"
    if not env_path.is_file():
        return None
    load_dotenv(dotenv_path=env_path, override=False)
    return env_path


def resolve_project_path(path: str | Path) -> Path:
    """Resolve a possibly-relative path against the project root."""
    p = Path(path).expanduser()
    return p if p.is_absolute() else (get_project_root() / p).resolve()
