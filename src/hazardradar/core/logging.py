"""
Logging configuration.

The packaged YAML logging config (`src/hazardradar/config/logging.yaml`) is the base;
settings then set the root level (`app.log_level`, `HAZARDRADAR_LOG_LEVEL`) and
optional per-logger levels (`app.logger_levels`, e.g. `hazardradar.proximity: DEBUG`).
"""

from __future__ import annotations

import copy
import logging.config

from hazardradar.config.settings import get_logging_config, get_settings


def configure_logging() -> None:
    settings = get_settings()
    config = copy.deepcopy(get_logging_config())

    root_level = settings.app.log_level
    config.setdefault("root", {})["level"] = root_level

    loggers = config.setdefault("loggers", {})
    for name, level in settings.app.logger_levels.items():
        loggers.setdefault(name, {})["level"] = level

    # Handlers must let through the most verbose level any logger asks for.
    handler_level = min([root_level, *settings.app.logger_levels.values()], key=logging.getLevelName)
    for handler in config.get("handlers", {}).values():
        if isinstance(handler, dict) and "level" in handler:
            handler["level"] = handler_level

    logging.config.dictConfig(config)
