"""
layerforge.core.logging_config - Structured Logging Setup
===========================================================

Every module obtains its logger with ``structlog.get_logger()`` and binds a
``component`` name; this module decides how those events are rendered.

    console: ``2026-01-01T00:00:00Z [info] archive_created  file_count=42 ...``
    json:    ``{"event": "archive_created", "file_count": 42, ...}``

The pipeline's milestone events (request_received, package_install_started,
installer_cache_cleared, archive_created, upload_completed, layer_published)
are diagnostic only; callers never see them in the response.
"""

from __future__ import annotations

import logging

import structlog


def configure_logging(level: str = "INFO", fmt: str = "console") -> None:
    """Configure structlog for the process.

    Args:
        level: Minimum level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        fmt: "console" or "json".
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    renderer: structlog.types.Processor
    if fmt == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        cache_logger_on_first_use=False,
    )
