"""
Build Layer Example: One Request Through the Pipeline
=======================================================

This example runs a complete layer build. By default it needs neither AWS
nor npm: the in-memory backend stands in for S3 and Lambda, and the mock
installer writes a placeholder package for each spec.

Any LAYERFORGE_* variable you set takes precedence over those local
defaults, so the same script publishes a real layer with:
    LAYERFORGE_BACKEND=aws LAYERFORGE_INSTALLER__KIND=npm \\
    LAYER_BUCKET=my-bucket python examples/build_layer.py

Usage:
    python examples/build_layer.py
"""

from __future__ import annotations

import asyncio
import json
import os
from typing import Any

from layerforge.core.config import LayerForgeConfig
from layerforge.core.logging_config import configure_logging
from layerforge.facade import LayerForge


def build_config() -> LayerForgeConfig:
    """Local defaults, applied only where the environment is silent."""
    overrides: dict[str, Any] = {}
    if "LAYERFORGE_BACKEND" not in os.environ:
        overrides["backend"] = "memory"
    if "LAYERFORGE_INSTALLER__KIND" not in os.environ:
        overrides["installer"] = {"kind": "mock"}
    return LayerForgeConfig(**overrides)


async def main() -> None:
    """Build the same layer twice and print both responses."""
    config = build_config()
    configure_logging(config.log_level, config.log_format)

    forge = LayerForge(config)
    print(forge)

    event = {"packages": "lodash@4.17.21 dayjs@1.11.10", "layerName": "utils"}
    for _ in range(2):
        response = await forge.handle_event(event)
        print(response["statusCode"], json.dumps(json.loads(response["body"]), indent=2))

    # An invalid request is answered, not raised
    response = await forge.handle_event({"packages": "", "layerName": "utils"})
    print(response["statusCode"], response["body"])


if __name__ == "__main__":
    asyncio.run(main())
