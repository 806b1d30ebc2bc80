"""
layerforge.facade - LayerForge Top-Level Facade
=================================================

The single entry point that wires every layer together from configuration.

    ┌──────────────────────────────────────────────────┐
    │               LayerForge (Facade)                │
    │                                                  │
    │  ┌────────────────────────────────────────────┐  │
    │  │          Orchestration Layer               │  │
    │  │  LayerPipeline, ArtifactPublisher          │  │
    │  └─────────────────────┬──────────────────────┘  │
    │  ┌─────────────────────▼──────────────────────┐  │
    │  │         Infrastructure Layer               │  │
    │  │  WorkspaceManager, ArchiveBuilder          │  │
    │  └─────────────────────┬──────────────────────┘  │
    │  ┌─────────────────────▼──────────────────────┐  │
    │  │          Integration Layer                 │  │
    │  │  PackageInstaller, BlobStore, LayerRegistry│  │
    │  └────────────────────────────────────────────┘  │
    └──────────────────────────────────────────────────┘

Any collaborator can be injected; everything not injected is built from the
configuration (installer kind, AWS vs. in-memory backend, bucket, ...).

Usage:
    >>> forge = LayerForge(LayerForgeConfig(backend="memory"))
    >>> response = await forge.handle_event(
    ...     {"packages": "lodash", "layerName": "test-layer"}
    ... )
    >>> response["statusCode"]
    200
"""

from __future__ import annotations

from typing import Any, Optional, Union

import structlog

from layerforge.core.config import LayerForgeConfig
from layerforge.core.models import LayerRequest, PipelineResult
from layerforge.infrastructure.archive import ArchiveBuilder
from layerforge.infrastructure.workspace import WorkspaceManager
from layerforge.integrations.installer.base import PackageInstaller
from layerforge.integrations.installer.factory import create_installer
from layerforge.integrations.registry.base import LayerRegistry
from layerforge.integrations.registry.factory import create_layer_registry
from layerforge.integrations.storage.base import BlobStore
from layerforge.integrations.storage.factory import create_blob_store
from layerforge.orchestration.pipeline import LayerPipeline
from layerforge.orchestration.publisher import ArtifactPublisher


logger = structlog.get_logger()


class LayerForge:
    """Top-level facade for building and publishing layers.

    Attributes:
        _config: LayerForge configuration.
        _installer: Package installer (injected or from config.installer).
        _blob_store: Blob store (injected or from config.backend).
        _registry: Layer registry (injected or from config.backend).
        _pipeline: The wired LayerPipeline.

    Example:
        >>> forge = LayerForge(config, installer=MockPackageInstaller())
        >>> result = await forge.build_layer(
        ...     LayerRequest(packages=["lodash"], layer_name="utils")
        ... )
        >>> result.layer_version.version
        1
    """

    def __init__(
        self,
        config: Optional[LayerForgeConfig] = None,
        *,
        installer: Optional[PackageInstaller] = None,
        blob_store: Optional[BlobStore] = None,
        registry: Optional[LayerRegistry] = None,
        workspace_manager: Optional[WorkspaceManager] = None,
        archive_builder: Optional[ArchiveBuilder] = None,
    ) -> None:
        self._config = config or LayerForgeConfig()

        # --- Integration Layer ---
        self._installer = installer or create_installer(self._config.installer)
        self._blob_store = blob_store or create_blob_store(self._config)
        self._registry = registry or create_layer_registry(self._config)

        # --- Infrastructure Layer ---
        self._workspace_manager = workspace_manager or WorkspaceManager(
            self._config.workspace_dir
        )
        self._archive_builder = archive_builder or ArchiveBuilder(
            compression_level=self._config.archive.compression_level,
            max_unzipped_bytes=self._config.archive.max_unzipped_bytes,
        )

        # --- Orchestration Layer ---
        self._publisher = ArtifactPublisher(
            blob_store=self._blob_store,
            registry=self._registry,
            bucket=self._config.bucket,
            compatible_runtimes=self._config.compatible_runtimes,
            compatible_architectures=self._config.compatible_architectures,
        )
        self._pipeline = LayerPipeline(
            workspace_manager=self._workspace_manager,
            installer=self._installer,
            archive_builder=self._archive_builder,
            publisher=self._publisher,
            distinguish_client_errors=self._config.distinguish_client_errors,
        )

        self._logger = logger.bind(component="layerforge")

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def config(self) -> LayerForgeConfig:
        return self._config

    @property
    def installer(self) -> PackageInstaller:
        return self._installer

    @property
    def blob_store(self) -> BlobStore:
        return self._blob_store

    @property
    def registry(self) -> LayerRegistry:
        return self._registry

    @property
    def pipeline(self) -> LayerPipeline:
        return self._pipeline

    # =========================================================================
    # Operations
    # =========================================================================

    async def build_layer(self, request: Union[LayerRequest, dict[str, Any]]) -> PipelineResult:
        """Run the pipeline for one request and return the full result."""
        return await self._pipeline.run(request)

    async def handle_event(self, event: dict[str, Any]) -> dict[str, Any]:
        """Run the pipeline for an invocation event and render the response.

        Returns:
            ``{"statusCode": int, "body": str}`` where body is JSON.
        """
        result = await self._pipeline.run(event)
        return result.to_response()

    def __repr__(self) -> str:
        return (
            f"LayerForge(bucket={self._config.bucket!r}, "
            f"backend={self._config.backend.value!r}, "
            f"installer={self._installer.name!r})"
        )
