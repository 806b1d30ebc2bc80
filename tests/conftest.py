"""
Shared Test Fixtures for LayerForge
=====================================

Reusable pytest fixtures, organized by layer:

    1. Configuration
    2. Infrastructure (WorkspaceManager, ArchiveBuilder)
    3. Integrations (mock installer, in-memory blob store and registry)
    4. Orchestration (ArtifactPublisher, LayerPipeline)
"""

from __future__ import annotations

import pytest

from layerforge.core.config import LayerForgeConfig
from layerforge.infrastructure.archive import ArchiveBuilder
from layerforge.infrastructure.workspace import WorkspaceManager
from layerforge.integrations.installer.mock import MockPackageInstaller
from layerforge.integrations.registry.memory import InMemoryLayerRegistry
from layerforge.integrations.storage.memory import InMemoryBlobStore
from layerforge.orchestration.pipeline import LayerPipeline
from layerforge.orchestration.publisher import ArtifactPublisher


BUCKET = "test-bucket"
RUNTIMES = ["nodejs20.x", "nodejs22.x"]
ARCHITECTURES = ["x86_64"]


# =============================================================================
# Configuration
# =============================================================================

@pytest.fixture
def config(tmp_path):
    """In-memory configuration rooted in a temporary workspace dir."""
    return LayerForgeConfig(
        bucket=BUCKET,
        backend="memory",
        workspace_dir=tmp_path / "workspaces",
        installer={"kind": "mock"},
    )


# =============================================================================
# Infrastructure
# =============================================================================

@pytest.fixture
def workspace_manager(tmp_path):
    """WorkspaceManager writing under tmp_path."""
    return WorkspaceManager(tmp_path / "workspaces")


@pytest.fixture
async def workspace(workspace_manager):
    """A prepared workspace for a layer named 'test-layer'."""
    return await workspace_manager.prepare("test-layer")


@pytest.fixture
def archive_builder():
    """ArchiveBuilder with maximum compression and no size limit."""
    return ArchiveBuilder(compression_level=9)


# =============================================================================
# Integrations
# =============================================================================

@pytest.fixture
def mock_installer():
    """Fresh MockPackageInstaller."""
    return MockPackageInstaller()


@pytest.fixture
def blob_store():
    """Fresh InMemoryBlobStore."""
    return InMemoryBlobStore()


@pytest.fixture
def registry():
    """Fresh InMemoryLayerRegistry."""
    return InMemoryLayerRegistry()


# =============================================================================
# Orchestration
# =============================================================================

@pytest.fixture
def publisher(blob_store, registry):
    """ArtifactPublisher wired to the in-memory store and registry."""
    return ArtifactPublisher(
        blob_store=blob_store,
        registry=registry,
        bucket=BUCKET,
        compatible_runtimes=RUNTIMES,
        compatible_architectures=ARCHITECTURES,
    )


@pytest.fixture
def pipeline(workspace_manager, mock_installer, archive_builder, publisher):
    """LayerPipeline wired entirely to in-process collaborators."""
    return LayerPipeline(
        workspace_manager=workspace_manager,
        installer=mock_installer,
        archive_builder=archive_builder,
        publisher=publisher,
    )
