"""
layerforge.core - Foundation Layer
====================================

Plain data structures and configuration that every other package depends on:

    - config:          LayerForgeConfig, InstallerConfig, ArchiveConfig
    - enums:           PipelineStage, Backend
    - models:          LayerRequest, Workspace, LayerVersion, StageOutcome, ...
    - exceptions:      LayerForgeError and one subclass per failure kind
    - logging_config:  structlog setup

Dependency Rule:
    core/ depends on NOTHING else in the layerforge package.
"""

from layerforge.core.config import (
    ArchiveConfig,
    InstallerConfig,
    LayerForgeConfig,
    load_config,
)
from layerforge.core.enums import Backend, PipelineStage
from layerforge.core.exceptions import (
    ArchiveError,
    ConfigurationError,
    InstallationError,
    InvalidRequestError,
    LayerForgeError,
    RegistrationError,
    UploadError,
    WorkspaceError,
)
from layerforge.core.models import (
    ArchiveSummary,
    ErrorDetail,
    LayerRequest,
    LayerVersion,
    PipelineResult,
    StageOutcome,
    StoredObject,
    Workspace,
    storage_key_for,
)

__all__ = [
    # Config
    "LayerForgeConfig",
    "InstallerConfig",
    "ArchiveConfig",
    "load_config",
    # Enums
    "PipelineStage",
    "Backend",
    # Models
    "LayerRequest",
    "Workspace",
    "ArchiveSummary",
    "StoredObject",
    "LayerVersion",
    "ErrorDetail",
    "StageOutcome",
    "PipelineResult",
    "storage_key_for",
    # Exceptions
    "LayerForgeError",
    "ConfigurationError",
    "InvalidRequestError",
    "WorkspaceError",
    "InstallationError",
    "ArchiveError",
    "UploadError",
    "RegistrationError",
]
