"""
layerforge.core.exceptions - Custom Exception Hierarchy
=========================================================

Structured exceptions for LayerForge. Every stage of the pipeline raises a
specific subclass carrying an error code, a details dict and the stage it
belongs to. The orchestrator turns them into ``ErrorDetail`` values; none of
them ever crosses the pipeline boundary.

Exception Hierarchy:
    LayerForgeError (base)
        ├── ConfigurationError    - Invalid settings
        ├── InvalidRequestError   - Missing/empty packages or layerName
        ├── WorkspaceError        - Could not create the working directory
        ├── InstallationError     - Installer exited non-zero for some spec
        ├── ArchiveError          - I/O error or size ceiling while zipping
        ├── UploadError           - Blob store rejected the upload
        └── RegistrationError     - Registry rejected the new layer version

Usage:
    >>> from layerforge.core.exceptions import InstallationError
    >>> raise InstallationError(
    ...     message="Failed to install 'left-pad@9.9.9': exit code 1",
    ...     spec="left-pad@9.9.9",
    ...     exit_code=1,
    ... )
"""

from __future__ import annotations

from typing import Any, Optional

from layerforge.core.enums import PipelineStage


# =============================================================================
# Base Exception
# =============================================================================
class LayerForgeError(Exception):
    """Base exception for all LayerForge errors.

    Attributes:
        message: Human-readable error description. This is what ends up in
            the ``details`` field of a failure response.
        error_code: Machine-readable UPPER_SNAKE_CASE code.
        details: Additional debugging context.
        stage: The pipeline stage this kind of error belongs to. Subclasses
            set it as a class attribute.
    """

    stage: Optional[PipelineStage] = None

    def __init__(
        self,
        message: str,
        error_code: str = "UNKNOWN_ERROR",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)

        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Serialize this exception to a dictionary for logs and responses."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


# =============================================================================
# Configuration Error
# =============================================================================
class ConfigurationError(LayerForgeError):
    """Raised when settings are invalid, e.g. an unknown installer name."""

    def __init__(
        self,
        message: str,
        error_code: str = "CONFIG_ERROR",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, error_code=error_code, details=details)


# =============================================================================
# Invalid Request
# =============================================================================
# Detected before any side effect: no workspace, no installer, no network.
# =============================================================================
class InvalidRequestError(LayerForgeError):
    """Raised when the request is missing fields or carries illegal values.

    Example:
        >>> raise InvalidRequestError(
        ...     message="Missing required parameters: packages or layerName",
        ...     details={"missing": ["packages"]},
        ... )
    """

    stage = PipelineStage.VALIDATE

    def __init__(
        self,
        message: str,
        error_code: str = "INVALID_REQUEST",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, error_code=error_code, details=details)


# =============================================================================
# Workspace Error
# =============================================================================
class WorkspaceError(LayerForgeError):
    """Raised when the private working directory or manifest can't be created."""

    stage = PipelineStage.WORKSPACE

    def __init__(
        self,
        message: str,
        error_code: str = "WORKSPACE_ERROR",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, error_code=error_code, details=details)


# =============================================================================
# Installation Error
# =============================================================================
# The installer is an opaque external command. Whatever it printed last is
# the only diagnostic we have, so the tail of its output travels with the
# error.
# =============================================================================
class InstallationError(LayerForgeError):
    """Raised when the installer fails for a package spec.

    Attributes:
        spec: The package spec that failed to install.
        exit_code: The installer's exit code. None when the process never
            ran (missing executable) or was killed on timeout.

    Example:
        >>> raise InstallationError(
        ...     message="Failed to install 'nope@0.0.0': exit code 1",
        ...     spec="nope@0.0.0",
        ...     exit_code=1,
        ...     details={"output_tail": "npm ERR! 404 Not Found"},
        ... )
    """

    stage = PipelineStage.INSTALL

    def __init__(
        self,
        message: str,
        spec: str,
        exit_code: Optional[int] = None,
        error_code: str = "INSTALL_FAILED",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        enriched_details = details or {}
        enriched_details["spec"] = spec
        enriched_details["exit_code"] = exit_code

        super().__init__(message=message, error_code=error_code, details=enriched_details)

        self.spec = spec
        self.exit_code = exit_code


# =============================================================================
# Archive Error
# =============================================================================
class ArchiveError(LayerForgeError):
    """Raised on I/O errors while zipping, or when the layer is too large."""

    stage = PipelineStage.ARCHIVE

    def __init__(
        self,
        message: str,
        error_code: str = "ARCHIVE_FAILED",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, error_code=error_code, details=details)


# =============================================================================
# Upload Error
# =============================================================================
class UploadError(LayerForgeError):
    """Raised when the archive can't be written to blob storage.

    Attributes:
        bucket: Target bucket.
        key: Target object key.
    """

    stage = PipelineStage.UPLOAD

    def __init__(
        self,
        message: str,
        bucket: str,
        key: str,
        error_code: str = "UPLOAD_FAILED",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        enriched_details = details or {}
        enriched_details["bucket"] = bucket
        enriched_details["key"] = key

        super().__init__(message=message, error_code=error_code, details=enriched_details)

        self.bucket = bucket
        self.key = key


# =============================================================================
# Registration Error
# =============================================================================
# The uploaded object is NOT removed when this is raised; it stays in the
# bucket and is overwritten by the next build of the same layer.
# =============================================================================
class RegistrationError(LayerForgeError):
    """Raised when the registry refuses to publish the new layer version.

    Attributes:
        layer_name: The layer whose version could not be published.
    """

    stage = PipelineStage.REGISTER

    def __init__(
        self,
        message: str,
        layer_name: str,
        error_code: str = "REGISTRATION_FAILED",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        enriched_details = details or {}
        enriched_details["layer_name"] = layer_name

        super().__init__(message=message, error_code=error_code, details=enriched_details)

        self.layer_name = layer_name
