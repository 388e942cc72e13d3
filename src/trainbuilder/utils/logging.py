from __future__ import annotations

import logging
from typing import Optional

from trainbuilder.config.models import LoggingSettings


REQUEST_LOGGER_NAME = "trainbuilder.requests"


def resolve_level(name: str) -> int:
    level = getattr(logging, name.upper(), None)
    if not isinstance(level, int):
        raise ValueError(f"Invalid log level: {name}")
    return level


def configure_logging(settings: LoggingSettings, *, dev_mode: bool = False) -> None:
    level = resolve_level(settings.level)

    handlers: Optional[list[logging.Handler]] = None
    if settings.file is not None:
        settings.file.parent.mkdir(parents=True, exist_ok=True)
        handlers = [logging.FileHandler(settings.file, encoding="utf-8"), logging.StreamHandler()]

    logging.basicConfig(level=level, format=settings.format, handlers=handlers)

    # Request lines are only interesting while developing locally.
    logging.getLogger(REQUEST_LOGGER_NAME).setLevel(logging.INFO if dev_mode else logging.WARNING)


def log_request(method: str, path: str, status_code: int, elapsed_ms: float) -> None:
    logging.getLogger(REQUEST_LOGGER_NAME).info(
        "%s %s - %s (%.0fms)", method, path, status_code, elapsed_ms
    )
