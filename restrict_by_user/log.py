"""
Structlog setup.

Usage:
    from restrict_by_user.log import configure_logging

    configure_logging()  # uses RESTRICT_LOG_LEVEL / RESTRICT_LOG_FORMAT
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import structlog

from .config import RestrictSettings, get_settings


def add_library_name(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Structlog processor tagging every event with the library name."""
    event_dict.setdefault("library", "restrict_by_user")
    return event_dict


def configure_logging(config: Optional[RestrictSettings] = None) -> None:
    """
    Configure structlog from settings.

    json: one JSON object per event (production)
    text: coloured console output (development)
    """
    config = config or get_settings()
    level = logging.getLevelName(config.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    if config.log_format == "json":
        renderer: Any = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_library_name,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=False,
    )
