"""
layerforge.integrations.storage.memory - In-Memory Blob Store
===============================================================

Dict-backed BlobStore for tests and local runs. Objects are keyed by
(bucket, key) and overwritten on every put, exactly like the real store.
Every call is recorded, including the declared content length, so tests can
check that the length matched the bytes actually sent.

Not suitable for production: contents vanish with the process.
"""

from __future__ import annotations

from typing import Any, BinaryIO, Optional

import structlog

from layerforge.core.models import StoredObject
from layerforge.integrations.storage.base import BlobStore


logger = structlog.get_logger()

_READ_CHUNK = 64 * 1024


class InMemoryBlobStore(BlobStore):
    """In-memory BlobStore.

    Attributes:
        _objects: (bucket, key) -> (content bytes, content type).
        _call_history: One record per put_object() call.
        _failure: Exception raised by the next put_object() calls, if set.
    """

    def __init__(self) -> None:
        self._objects: dict[tuple[str, str], tuple[bytes, str]] = {}
        self._call_history: list[dict[str, Any]] = []
        self._failure: Optional[Exception] = None
        self._logger = logger.bind(component="in_memory_blob_store")

    @property
    def call_history(self) -> list[dict[str, Any]]:
        return list(self._call_history)

    def fail_with(self, error: Optional[Exception]) -> None:
        """Make subsequent uploads raise ``error`` (None to stop failing)."""
        self._failure = error

    def get(self, bucket: str, key: str) -> Optional[bytes]:
        entry = self._objects.get((bucket, key))
        return entry[0] if entry else None

    def content_type(self, bucket: str, key: str) -> Optional[str]:
        entry = self._objects.get((bucket, key))
        return entry[1] if entry else None

    def keys(self, bucket: str) -> list[str]:
        return sorted(k for b, k in self._objects if b == bucket)

    async def put_object(
        self,
        bucket: str,
        key: str,
        body: BinaryIO,
        content_type: str,
        content_length: int,
    ) -> StoredObject:
        if self._failure is not None:
            raise self._failure

        chunks = []
        while True:
            chunk = body.read(_READ_CHUNK)
            if not chunk:
                break
            chunks.append(chunk)
        data = b"".join(chunks)

        self._call_history.append({
            "bucket": bucket,
            "key": key,
            "content_type": content_type,
            "content_length": content_length,
            "bytes_received": len(data),
        })

        if len(data) != content_length:
            raise OSError(
                f"declared content length {content_length} but body had {len(data)} bytes"
            )

        self._objects[(bucket, key)] = (data, content_type)
        self._logger.debug("object_stored", bucket=bucket, key=key, size=len(data))
        return StoredObject(bucket=bucket, key=key, size=len(data), content_type=content_type)
