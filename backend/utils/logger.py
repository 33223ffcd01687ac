"""Structured logging utilities."""

from __future__ import annotations

import logging
import sys
from typing import Optional

from backend.utils.config import get_settings


_LOGGER_INITIALIZED = False


def configure_logging(level: Optional[str] = None) -> None:
    """Install the root handler for allocator logs on first use.

    `level` overrides LOG_LEVEL from settings. Records go to stdout next to
    uvicorn's access log; allocation and removal lines carry their details as
    `key=value` pairs built by `format_fields`.
    """

    global _LOGGER_INITIALIZED
    if _LOGGER_INITIALIZED:
        return

    settings = get_settings()
    resolved_level = (level or settings.log_level).upper()

    logging.basicConfig(
        level=resolved_level,
        format=(
            "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
        ),
        stream=sys.stdout,
    )
    _LOGGER_INITIALIZED = True


def get_logger(name: str) -> logging.Logger:
    """Return a configured logger for the requested module."""
    configure_logging()
    return logging.getLogger(name)


def format_fields(**fields: object) -> str:
    """Render `key=value` pairs in the shared pipe-delimited layout."""
    return " | ".join(f"{key}={value}" for key, value in fields.items())
