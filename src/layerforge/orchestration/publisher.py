"""
layerforge.orchestration.publisher - Artifact Publisher
=========================================================

Turns a finished archive into a published layer version in two steps:

    ┌──────────────┐  upload()   ┌───────────┐  register()  ┌───────────────┐
    │ archive file │ ──────────→ │ BlobStore │ ───────────→ │ LayerRegistry │
    └──────────────┘             └───────────┘              └───────────────┘
                        layers/<name>.zip          new LayerVersion

Any error from the store or the registry comes back as UploadError or
RegistrationError respectively, with the AWS error code in ``details`` when
there is one.

No compensation: if register() fails after upload() succeeded, the object
stays in the bucket. The next build of the same layer overwrites it.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Sequence

import structlog
from botocore.exceptions import BotoCoreError, ClientError

from layerforge.core.exceptions import LayerForgeError, RegistrationError, UploadError
from layerforge.core.models import (
    ARCHIVE_CONTENT_TYPE,
    LayerVersion,
    StoredObject,
    storage_key_for,
)
from layerforge.integrations.registry.base import LayerRegistry
from layerforge.integrations.storage.base import BlobStore


logger = structlog.get_logger()

# Lambda rejects longer layer descriptions.
MAX_DESCRIPTION_LENGTH = 256


def describe_layer(packages: Sequence[str]) -> str:
    """Build the description stored on a layer version."""
    description = f"Layer containing node_modules for: {' '.join(packages)}"
    if len(description) > MAX_DESCRIPTION_LENGTH:
        description = description[: MAX_DESCRIPTION_LENGTH - 3] + "..."
    return description


def _error_details(error: Exception) -> dict[str, Any]:
    details: dict[str, Any] = {"cause": type(error).__name__}
    if isinstance(error, ClientError):
        err = error.response.get("Error", {})
        details["aws_error_code"] = err.get("Code")
        details["aws_error_message"] = err.get("Message")
        status = error.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
        if status is not None:
            details["http_status"] = status
    elif isinstance(error, BotoCoreError):
        details["aws_error_code"] = None
    return details


class ArtifactPublisher:
    """Uploads layer archives and registers them as layer versions.

    Attributes:
        _blob_store: Where archives are stored.
        _registry: Where versions are published.
        _bucket: Target bucket for every upload.
        _compatible_runtimes: Declared on every version.
        _compatible_architectures: Declared on every version.
    """

    def __init__(
        self,
        blob_store: BlobStore,
        registry: LayerRegistry,
        bucket: str,
        compatible_runtimes: Sequence[str],
        compatible_architectures: Sequence[str],
    ) -> None:
        self._blob_store = blob_store
        self._registry = registry
        self._bucket = bucket
        self._compatible_runtimes = list(compatible_runtimes)
        self._compatible_architectures = list(compatible_architectures)
        self._logger = logger.bind(component="artifact_publisher", bucket=bucket)

    @property
    def bucket(self) -> str:
        return self._bucket

    async def upload(self, archive_path: Path, layer_name: str) -> StoredObject:
        """Stream the archive to ``layers/<layer_name>.zip``.

        Raises:
            UploadError: If the file can't be read or the store rejects it.
        """
        key = storage_key_for(layer_name)
        self._logger.info("upload_started", key=key, path=str(archive_path))

        try:
            stored = await self._blob_store.put_file(
                bucket=self._bucket,
                key=key,
                path=Path(archive_path),
                content_type=ARCHIVE_CONTENT_TYPE,
            )
        except LayerForgeError:
            raise
        except Exception as e:
            raise UploadError(
                message=f"Failed to upload s3://{self._bucket}/{key}: {e}",
                bucket=self._bucket,
                key=key,
                details=_error_details(e),
            ) from e

        self._logger.info("upload_completed", uri=stored.uri, size=stored.size)
        return stored

    async def register(
        self,
        layer_name: str,
        packages: Sequence[str],
        stored: StoredObject,
    ) -> LayerVersion:
        """Publish a new version of ``layer_name`` referencing ``stored``.

        Raises:
            RegistrationError: If the registry rejects the version.
        """
        description = describe_layer(packages)

        try:
            version = await self._registry.publish_version(
                layer_name=layer_name,
                description=description,
                bucket=stored.bucket,
                key=stored.key,
                compatible_runtimes=self._compatible_runtimes,
                compatible_architectures=self._compatible_architectures,
            )
        except LayerForgeError:
            raise
        except Exception as e:
            self._logger.warning(
                "orphaned_object_left",
                uri=stored.uri,
                layer_name=layer_name,
            )
            raise RegistrationError(
                message=f"Failed to publish layer '{layer_name}': {e}",
                layer_name=layer_name,
                details={**_error_details(e), "orphaned_object": stored.uri},
            ) from e

        self._logger.info(
            "layer_published",
            layer_name=layer_name,
            layer_version_arn=version.layer_version_arn,
            version=version.version,
        )
        return version
