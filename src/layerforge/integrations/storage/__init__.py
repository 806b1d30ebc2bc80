"""
layerforge.integrations.storage - Blob Store Adapters
=======================================================

    - BlobStore (ABC):     put_object / put_file with explicit content length
    - S3BlobStore:         Amazon S3 via boto3
    - InMemoryBlobStore:   dict-backed, for tests
    - create_blob_store:   picks one from LayerForgeConfig.backend
"""

from layerforge.integrations.storage.base import BlobStore
from layerforge.integrations.storage.factory import create_blob_store
from layerforge.integrations.storage.memory import InMemoryBlobStore
from layerforge.integrations.storage.s3 import S3BlobStore

__all__ = [
    "BlobStore",
    "S3BlobStore",
    "InMemoryBlobStore",
    "create_blob_store",
]
