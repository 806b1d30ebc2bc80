"""
layerforge.integrations.registry.base - Abstract Layer Registry
=================================================================

The registry stores named, versioned layers. Publishing never replaces an
existing version: every call creates a new one, and the registry assigns
its number (monotonically increasing per layer name).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from layerforge.core.models import LayerVersion


class LayerRegistry(ABC):
    """Publishes layer versions that reference an archive in blob storage."""

    @abstractmethod
    async def publish_version(
        self,
        layer_name: str,
        description: str,
        bucket: str,
        key: str,
        compatible_runtimes: Sequence[str],
        compatible_architectures: Sequence[str],
    ) -> LayerVersion:
        """Create a new version of ``layer_name`` from ``bucket/key``.

        Args:
            layer_name: Layer to add a version to (created if new).
            description: Free text stored on the version.
            bucket: Bucket holding the archive.
            key: Object key of the archive.
            compatible_runtimes: Runtime identifiers to declare.
            compatible_architectures: Architecture identifiers to declare.

        Returns:
            The published version with its ARNs and number.
        """
        ...
