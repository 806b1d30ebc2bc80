"""
layerforge.integrations.storage.base - Abstract Blob Store
============================================================

The blob store persists finished archives. Its one write operation takes an
explicit content length: callers measure the file before streaming it, and
no implementation may fall back to unknown-length (chunked) transfers.

    put_file(bucket, key, path)
        │  stat() → content_length
        │  open(path, "rb") → body
        ▼
    put_object(bucket, key, body, content_type, content_length) → StoredObject

Writing to an existing key replaces the object. Versioning is the
registry's job, not the store's.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO

from layerforge.core.models import ARCHIVE_CONTENT_TYPE, StoredObject


class BlobStore(ABC):
    """Durable object storage addressed by (bucket, key)."""

    @abstractmethod
    async def put_object(
        self,
        bucket: str,
        key: str,
        body: BinaryIO,
        content_type: str,
        content_length: int,
    ) -> StoredObject:
        """Stream ``content_length`` bytes from ``body`` to ``bucket/key``.

        Args:
            bucket: Target bucket.
            key: Target object key. An existing object is overwritten.
            body: Readable binary stream positioned at the start.
            content_type: MIME type stored with the object.
            content_length: Exact number of bytes ``body`` will yield.

        Returns:
            Description of the stored object.
        """
        ...

    async def put_file(
        self,
        bucket: str,
        key: str,
        path: Path,
        content_type: str = ARCHIVE_CONTENT_TYPE,
    ) -> StoredObject:
        """Upload a local file, sizing it before the transfer starts."""
        path = Path(path)
        content_length = (await asyncio.to_thread(path.stat)).st_size
        with open(path, "rb") as body:
            return await self.put_object(
                bucket=bucket,
                key=key,
                body=body,
                content_type=content_type,
                content_length=content_length,
            )
