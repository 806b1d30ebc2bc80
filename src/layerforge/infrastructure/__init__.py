"""
layerforge.infrastructure - Local Filesystem Layer
====================================================

The two components that only ever touch local disk:

    ┌─────────────── ORCHESTRATION LAYER ─────────────────┐
    │  LayerPipeline, ArtifactPublisher                    │
    └─────────────────────┬───────────────────────────────┘
                          │
    ┌─────────────── INFRASTRUCTURE LAYER ────────────────┐
    │  WorkspaceManager  - private per-run directories     │
    │  ArchiveBuilder    - streaming ZIP of the layer tree │
    └──────────────────────────────────────────────────────┘

Usage:
    from layerforge.infrastructure import ArchiveBuilder, WorkspaceManager
"""

from layerforge.infrastructure.archive import ArchiveBuilder
from layerforge.infrastructure.workspace import WorkspaceManager

__all__ = [
    "ArchiveBuilder",
    "WorkspaceManager",
]
