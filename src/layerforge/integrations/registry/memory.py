"""
layerforge.integrations.registry.memory - In-Memory Layer Registry
====================================================================

Registry fake for tests and local runs. Version numbers start at 1 and
increase per layer name; ARNs follow the Lambda format with a fixed fake
account so they look like the real thing in logs and responses.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

import structlog

from layerforge.core.models import LayerVersion
from layerforge.integrations.registry.base import LayerRegistry


logger = structlog.get_logger()

FAKE_ACCOUNT_ID = "000000000000"


class InMemoryLayerRegistry(LayerRegistry):
    """In-memory LayerRegistry.

    Attributes:
        _versions: layer name -> published versions, oldest first.
        _failure: Exception raised by publish_version(), if set.
    """

    def __init__(self, region: str = "us-east-1") -> None:
        self._region = region
        self._versions: dict[str, list[LayerVersion]] = {}
        self._call_history: list[dict[str, Any]] = []
        self._failure: Optional[Exception] = None
        self._logger = logger.bind(component="in_memory_layer_registry")

    @property
    def call_history(self) -> list[dict[str, Any]]:
        return list(self._call_history)

    def fail_with(self, error: Optional[Exception]) -> None:
        """Make subsequent publishes raise ``error`` (None to stop failing)."""
        self._failure = error

    def versions(self, layer_name: str) -> list[LayerVersion]:
        return list(self._versions.get(layer_name, []))

    def latest(self, layer_name: str) -> Optional[LayerVersion]:
        versions = self._versions.get(layer_name)
        return versions[-1] if versions else None

    async def publish_version(
        self,
        layer_name: str,
        description: str,
        bucket: str,
        key: str,
        compatible_runtimes: Sequence[str],
        compatible_architectures: Sequence[str],
    ) -> LayerVersion:
        self._call_history.append({
            "layer_name": layer_name,
            "description": description,
            "bucket": bucket,
            "key": key,
            "compatible_runtimes": list(compatible_runtimes),
            "compatible_architectures": list(compatible_architectures),
        })
        if self._failure is not None:
            raise self._failure

        history = self._versions.setdefault(layer_name, [])
        number = len(history) + 1
        layer_arn = f"arn:aws:lambda:{self._region}:{FAKE_ACCOUNT_ID}:layer:{layer_name}"

        version = LayerVersion(
            layer_name=layer_name,
            description=description,
            bucket=bucket,
            key=key,
            compatible_runtimes=list(compatible_runtimes),
            compatible_architectures=list(compatible_architectures),
            layer_arn=layer_arn,
            layer_version_arn=f"{layer_arn}:{number}",
            version=number,
        )
        history.append(version)
        self._logger.debug("layer_version_recorded", layer_name=layer_name, version=number)
        return version
