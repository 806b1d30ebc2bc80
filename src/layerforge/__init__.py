"""
LayerForge - On-Demand Runtime Layer Builder
==============================================

LayerForge turns a list of package specs into a published, versioned
runtime layer:

    install  →  archive  →  persist  →  register
    (npm)       (zip -9)    (S3)        (Lambda layer version)

Architecture Layers (top to bottom):
    1. Orchestration Layer  - LayerPipeline, ArtifactPublisher
    2. Infrastructure Layer - WorkspaceManager, ArchiveBuilder
    3. Integration Layer    - PackageInstaller, BlobStore, LayerRegistry

Quick Start:
    >>> from layerforge import LayerForge
    >>> forge = LayerForge()
    >>> response = await forge.handle_event(
    ...     {"packages": "lodash", "layerName": "test-layer"}
    ... )
"""

__version__ = "0.1.0"

from layerforge.facade import LayerForge

__all__ = ["LayerForge", "__version__"]
