"""
layerforge.core.models - Core Data Models
===========================================

The Pydantic models that flow through the pipeline. Data moves strictly
forward:

    LayerRequest → Workspace → InstallOutcome(s) → ArchiveSummary
        → StoredObject → LayerVersion → PipelineResult

Every stage also yields a StageOutcome, an explicit success/failure value.
The orchestrator inspects outcomes instead of relying on exceptions
unwinding through it, so "stop at the first failed stage" is a plain branch.
"""

from __future__ import annotations

import json
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from layerforge.core.enums import PipelineStage
from layerforge.core.exceptions import InvalidRequestError, LayerForgeError


# =============================================================================
# Constants
# =============================================================================
STORAGE_KEY_PREFIX = "layers"
ARCHIVE_CONTENT_TYPE = "application/zip"
MANIFEST_VERSION = "1.0.0"
MISSING_PARAMETERS_MESSAGE = "Missing required parameters: packages or layerName"

# Lambda layer names; also safe as a single S3 key segment.
LAYER_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def storage_key_for(layer_name: str) -> str:
    """Return the blob-store key for a layer.

    The key depends on nothing but the layer name, so every build of the
    same layer overwrites the same object.

    >>> storage_key_for("test-layer")
    'layers/test-layer.zip'
    """
    return f"{STORAGE_KEY_PREFIX}/{layer_name}.zip"


# =============================================================================
# Layer Request
# =============================================================================
class LayerRequest(BaseModel):
    """A request to build and publish one layer version.

    Attributes:
        packages: Ordered package specs, each ``name`` or ``name@version``.
        layer_name: Target layer name.

    Example:
        >>> request = LayerRequest.from_event(
        ...     {"packages": "lodash dayjs@1.11.10", "layerName": "utils"}
        ... )
        >>> request.packages
        ['lodash', 'dayjs@1.11.10']
    """

    packages: list[str] = Field(
        min_length=1,
        description="Ordered package specs to install",
    )
    layer_name: str = Field(
        description="Name of the layer to publish a new version of",
    )

    @field_validator("packages")
    @classmethod
    def _check_specs(cls, value: list[str]) -> list[str]:
        for spec in value:
            if not spec or spec != spec.strip() or any(c.isspace() for c in spec):
                raise ValueError(f"invalid package spec: {spec!r}")
            # A leading dash would be read by the installer as an option.
            if spec.startswith("-"):
                raise ValueError(f"package spec must not start with '-': {spec!r}")
        return value

    @field_validator("layer_name")
    @classmethod
    def _check_layer_name(cls, value: str) -> str:
        if not LAYER_NAME_PATTERN.match(value):
            raise ValueError(
                f"invalid layer name {value!r}: use 1-64 letters, digits, '-' or '_'"
            )
        return value

    @property
    def storage_key(self) -> str:
        return storage_key_for(self.layer_name)

    @classmethod
    def from_event(cls, event: Any) -> "LayerRequest":
        """Build a request from an invocation event.

        ``packages`` may be a space-separated string or a list of specs.
        Missing or empty fields raise InvalidRequestError before anything
        else happens.

        Raises:
            InvalidRequestError: If a field is missing, empty or illegal.
        """
        if not isinstance(event, dict):
            raise InvalidRequestError(
                message=MISSING_PARAMETERS_MESSAGE,
                details={"event_type": type(event).__name__},
            )

        raw_packages = event.get("packages")
        layer_name = event.get("layerName")

        if isinstance(raw_packages, str):
            packages = raw_packages.split()
        elif isinstance(raw_packages, (list, tuple)):
            packages = [str(p).strip() for p in raw_packages if str(p).strip()]
        else:
            packages = []

        missing = []
        if not packages:
            missing.append("packages")
        if not layer_name or not isinstance(layer_name, str):
            missing.append("layerName")
        if missing:
            raise InvalidRequestError(
                message=MISSING_PARAMETERS_MESSAGE,
                details={"missing": missing},
            )

        try:
            return cls(packages=packages, layer_name=layer_name)
        except ValidationError as e:
            errors = [err["msg"] for err in e.errors()]
            raise InvalidRequestError(
                message=f"Invalid request: {'; '.join(errors)}",
                details={"errors": errors},
            ) from e


# =============================================================================
# Workspace Handle
# =============================================================================
class Workspace(BaseModel):
    """Handle to one invocation's private working directory.

    Layout:
        <root>/
            <layer_name>.zip      ← archive_path (outside the archived tree)
            layer/                ← layer_dir (archived)
                package.json      ← manifest_path
                .npmcache/        ← cache_dir (removed before archiving)
                node_modules/...
    """

    layer_name: str
    root: Path
    layer_dir: Path
    cache_dir: Path
    manifest_path: Path
    archive_path: Path
    created_at: datetime = Field(default_factory=_now)


# =============================================================================
# Archive Summary
# =============================================================================
class ArchiveSummary(BaseModel):
    """What the archive builder wrote.

    Attributes:
        path: Location of the archive on local disk.
        file_count: Number of file entries in the archive.
        uncompressed_bytes: Total size of the archived files.
        compressed_bytes: Size of the archive file itself.
    """

    path: Path
    file_count: int = Field(ge=0)
    uncompressed_bytes: int = Field(ge=0)
    compressed_bytes: int = Field(ge=0)


# =============================================================================
# Stored Object
# =============================================================================
class StoredObject(BaseModel):
    """An archive persisted to blob storage."""

    bucket: str
    key: str
    size: int = Field(ge=0)
    content_type: str = ARCHIVE_CONTENT_TYPE
    etag: Optional[str] = None

    @property
    def uri(self) -> str:
        return f"s3://{self.bucket}/{self.key}"


# =============================================================================
# Layer Version
# =============================================================================
class LayerVersion(BaseModel):
    """A published layer version as returned by the registry.

    Attributes:
        layer_name: Name of the layer.
        description: Description stored on the version.
        bucket: Bucket holding the archive the version was built from.
        key: Object key of that archive.
        compatible_runtimes: Runtimes declared on the version.
        compatible_architectures: Architectures declared on the version.
        layer_arn: ARN of the layer (without version suffix).
        layer_version_arn: ARN of this specific version.
        version: Registry-assigned version number, increasing per layer.
    """

    layer_name: str
    description: str = ""
    bucket: str
    key: str
    compatible_runtimes: list[str] = Field(default_factory=list)
    compatible_architectures: list[str] = Field(default_factory=list)
    layer_arn: str
    layer_version_arn: str
    version: int = Field(ge=1)


# =============================================================================
# Stage Outcome
# =============================================================================
class ErrorDetail(BaseModel):
    """Serializable description of the error that stopped the pipeline."""

    stage: PipelineStage
    error_type: str
    error_code: str
    message: str
    details: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_error(cls, stage: PipelineStage, error: LayerForgeError) -> "ErrorDetail":
        return cls(
            stage=stage,
            error_type=error.__class__.__name__,
            error_code=error.error_code,
            message=error.message,
            details=error.details,
        )


class StageOutcome(BaseModel):
    """Explicit success/failure value produced by every stage.

    Attributes:
        stage: Which stage ran.
        succeeded: Whether it completed.
        value: The stage's product on success (Workspace, ArchiveSummary,
            StoredObject, LayerVersion, ...).
        error: What went wrong on failure.
        duration_seconds: Wall-clock time spent in the stage.
    """

    stage: PipelineStage
    succeeded: bool
    value: Any = None
    error: Optional[ErrorDetail] = None
    duration_seconds: float = Field(default=0.0, ge=0)

    @classmethod
    def ok(cls, stage: PipelineStage, value: Any = None, duration: float = 0.0) -> "StageOutcome":
        return cls(stage=stage, succeeded=True, value=value, duration_seconds=duration)

    @classmethod
    def fail(
        cls,
        stage: PipelineStage,
        error: LayerForgeError,
        duration: float = 0.0,
    ) -> "StageOutcome":
        return cls(
            stage=stage,
            succeeded=False,
            error=ErrorDetail.from_error(stage, error),
            duration_seconds=duration,
        )


# =============================================================================
# Pipeline Result
# =============================================================================
class PipelineResult(BaseModel):
    """Final result of one pipeline run.

    Exactly one of ``layer_version`` and ``error`` is set. ``stages`` lists
    every stage that ran, in order, ending with the failed one on failure.
    """

    status_code: int
    layer_version: Optional[LayerVersion] = None
    error: Optional[ErrorDetail] = None
    stages: list[StageOutcome] = Field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.layer_version is not None

    def to_response(self) -> dict[str, Any]:
        """Render the invocation response: ``statusCode`` plus a JSON body."""
        if self.succeeded:
            body = {
                "message": "Lambda Layer created successfully",
                "layerArn": self.layer_version.layer_arn,
                "layerVersion": self.layer_version.version,
                "layerVersionArn": self.layer_version.layer_version_arn,
            }
            return {"statusCode": self.status_code, "body": json.dumps(body)}
        return error_response(
            self.error.message if self.error else "Unknown error",
            status_code=self.status_code,
        )


def error_response(details: str, status_code: int = 500) -> dict[str, Any]:
    """Render a failure response: ``statusCode`` plus ``{"error", "details"}``."""
    label = "Bad Request" if status_code == 400 else "Internal Server Error"
    body = {"error": label, "details": details}
    return {"statusCode": status_code, "body": json.dumps(body)}
