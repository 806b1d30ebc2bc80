"""
layerforge.integrations.storage.s3 - S3 Blob Store
====================================================

BlobStore backed by Amazon S3 through boto3. ``put_object`` is given the
open archive file as its body together with ``ContentLength``, so botocore
streams the file from disk with a known size instead of buffering it.

boto3 is synchronous; calls run in a worker thread so the event loop stays
free. Errors from botocore propagate unchanged and are translated by the
ArtifactPublisher.
"""

from __future__ import annotations

import asyncio
from typing import Any, BinaryIO, Optional

import boto3
import structlog

from layerforge.core.models import StoredObject
from layerforge.integrations.storage.base import BlobStore


logger = structlog.get_logger()


class S3BlobStore(BlobStore):
    """BlobStore that writes to S3.

    Attributes:
        _client: A boto3 S3 client. Built from ``region`` when not given;
            tests pass a stubbed client.
    """

    def __init__(self, client: Optional[Any] = None, region: Optional[str] = None) -> None:
        self._client = client or boto3.client("s3", region_name=region)
        self._logger = logger.bind(component="s3_blob_store")

    @property
    def client(self) -> Any:
        return self._client

    async def put_object(
        self,
        bucket: str,
        key: str,
        body: BinaryIO,
        content_type: str,
        content_length: int,
    ) -> StoredObject:
        self._logger.debug(
            "s3_put_object",
            bucket=bucket,
            key=key,
            content_length=content_length,
        )
        response = await asyncio.to_thread(
            self._client.put_object,
            Bucket=bucket,
            Key=key,
            Body=body,
            ContentType=content_type,
            ContentLength=content_length,
        )
        return StoredObject(
            bucket=bucket,
            key=key,
            size=content_length,
            content_type=content_type,
            etag=response.get("ETag"),
        )
