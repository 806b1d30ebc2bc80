"""
layerforge.handler - Invocation Entry Point
=============================================

Synchronous ``handler(event, context)`` for hosting environments that call a
plain function with a request dict and expect a response dict:

    event:    {"packages": "lodash dayjs@1.11.10", "layerName": "utils"}
    success:  {"statusCode": 200,
               "body": '{"message": "Lambda Layer created successfully",
                         "layerArn": "...", "layerVersion": 3, ...}'}
    failure:  {"statusCode": 500,
               "body": '{"error": "Internal Server Error", "details": "..."}'}

Configuration is read once per process (environment + optional
layerforge.yaml); every invocation gets a fresh workspace. If the facade
can't be built (bad settings, missing config file, no AWS region), the
invocation is answered with a 500 and the next one tries again.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional

import structlog

from layerforge.core.config import LayerForgeConfig, load_config
from layerforge.core.logging_config import configure_logging
from layerforge.core.models import error_response
from layerforge.facade import LayerForge


logger = structlog.get_logger()

_forge: Optional[LayerForge] = None


def get_forge(config: Optional[LayerForgeConfig] = None) -> LayerForge:
    """Return the process-wide LayerForge, creating it on first use."""
    global _forge
    if _forge is None or config is not None:
        config = config or load_config()
        configure_logging(config.log_level, config.log_format)
        _forge = LayerForge(config)
    return _forge


def handler(event: dict[str, Any], context: Any = None) -> dict[str, Any]:
    """Build and publish the layer described by ``event``."""
    try:
        forge = get_forge()
    except Exception as e:
        logger.exception("forge_setup_failed", error_type=type(e).__name__)
        return error_response(f"LayerForge is misconfigured: {e}")
    return asyncio.run(forge.handle_event(event))
