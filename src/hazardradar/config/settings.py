# src/hazardradar/config/settings.py
"""
Application settings (Pydantic).

Settings are loaded from `src/hazardradar/config/defaults.yaml`, then optionally overridden by:
- an external YAML file via `HAZARDRADAR_CONFIG_PATH` (replaces the packaged defaults)
- a small whitelist of environment variables (e.g., `HAZARDRADAR_LOG_LEVEL`)

Design rule:
- Tuning knobs live in YAML, not hard-coded in business logic.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator

from hazardradar.core.env import load_dotenv_if_present


def _read_package_yaml(filename: str) -> dict[str, Any]:
    """Read a YAML file packaged inside `hazardradar.config`."""
    text = resources.files("hazardradar.config").joinpath(filename).read_text(encoding="utf-8")
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {filename}; expected a mapping.")
    return data


def _read_yaml_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML file from disk and return its mapping root."""
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {path}; expected a mapping.")
    return data


LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class AppSettings(BaseModel):
    name: str = "HazardRadar"
    timezone: str = "Asia/Kolkata"
    log_level: LogLevel = "INFO"
    logger_levels: dict[str, LogLevel] = Field(default_factory=dict)

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, value: Any) -> Any:
        return value.strip().upper() if isinstance(value, str) else value

    @field_validator("logger_levels", mode="before")
    @classmethod
    def _upper_logger_levels(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {k: v.strip().upper() if isinstance(v, str) else v for k, v in value.items()}
        return value


class StorageSettings(BaseModel):
    # Optional JSON seed file loaded into the in-memory repository at startup.
    reports_path: str | None = None


class ProximitySettings(BaseModel):
    default_radius_km: float = Field(2.0, ge=0)
    index_cell_size_deg: float = Field(0.05, gt=0)


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    proximity: ProximitySettings = Field(default_factory=ProximitySettings)


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay selected environment variables onto raw settings payload.

    Note: We intentionally keep this whitelist small.
    """
    load_dotenv_if_present()
    data = dict(data)

    log_level = os.getenv("HAZARDRADAR_LOG_LEVEL")
    if log_level:
        data.setdefault("app", {})["log_level"] = log_level

    reports_path = os.getenv("HAZARDRADAR_REPORTS_PATH")
    if reports_path:
        data.setdefault("storage", {})["reports_path"] = reports_path

    radius = os.getenv("HAZARDRADAR_DEFAULT_RADIUS_KM")
    if radius:
        data.setdefault("proximity", {})["default_radius_km"] = radius

    return data


@lru_cache
def get_settings() -> Settings:
    """Load and validate settings (cached)."""
    load_dotenv_if_present()
    config_path = os.getenv("HAZARDRADAR_CONFIG_PATH")
    raw = _read_yaml_file(config_path) if config_path else _read_package_yaml("defaults.yaml")
    raw = _apply_env_overrides(raw)
    return Settings.model_validate(raw)


@lru_cache
def get_logging_config() -> dict[str, Any]:
    """Load logging configuration (cached)."""
    return _read_package_yaml("logging.yaml")
