"""
layerforge.integrations.storage.factory - Blob Store Factory
==============================================================
"""

from __future__ import annotations

from layerforge.core.config import LayerForgeConfig
from layerforge.core.enums import Backend
from layerforge.integrations.storage.base import BlobStore


def create_blob_store(config: LayerForgeConfig) -> BlobStore:
    """Create the blob store for the configured backend.

        - Backend.AWS    → S3BlobStore in ``config.region``
        - Backend.MEMORY → InMemoryBlobStore
    """
    if config.backend == Backend.MEMORY:
        from layerforge.integrations.storage.memory import InMemoryBlobStore
        return InMemoryBlobStore()

    from layerforge.integrations.storage.s3 import S3BlobStore
    return S3BlobStore(region=config.region)
