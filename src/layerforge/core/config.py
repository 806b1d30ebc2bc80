"""
layerforge.core.config - Configuration Management
===================================================

Configuration for LayerForge. Values are loaded with the following priority
(highest first):

    1. Explicit constructor arguments
    2. Environment variables (prefixed with LAYERFORGE_)
    3. Host variables AWS_REGION and LAYER_BUCKET
    4. YAML configuration file (only through load_config)
    5. Default values defined in the models below

Architecture Context:
    The top-level LayerForgeConfig is created once and handed to the facade,
    which passes the relevant pieces down:

        LayerForgeConfig
            ├── InstallerConfig   → PackageInstaller
            ├── ArchiveConfig     → ArchiveBuilder
            └── (other settings)  → WorkspaceManager, ArtifactPublisher,
                                     LayerPipeline, logging

Two settings also honour the plain variable names the hosting environment
already provides: ``AWS_REGION`` for the region and ``LAYER_BUCKET`` for the
bucket. Only those exact names are read; a generic ``BUCKET`` or ``REGION``
is ignored.

Environment Variables:
    LAYERFORGE_LOG_LEVEL=DEBUG
    LAYERFORGE_BUCKET=my-layer-bucket      (or LAYER_BUCKET)
    LAYERFORGE_REGION=eu-west-1            (or AWS_REGION)
    LAYERFORGE_BACKEND=memory
    LAYERFORGE_INSTALLER__COMMAND=/opt/node/bin/npm
    LAYERFORGE_ARCHIVE__MAX_UNZIPPED_BYTES=262144000
"""

from __future__ import annotations

import os
import tempfile
from contextvars import ContextVar
from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field
from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    YamlConfigSettingsSource,
)

from layerforge.core.enums import Backend


# =============================================================================
# Constants
# =============================================================================
DEFAULT_BUCKET = "concept-cdn"

# Lambda rejects layers whose unzipped contents exceed 250 MB.
LAMBDA_LAYER_UNZIPPED_LIMIT = 262_144_000

# Unprefixed variables the hosting environment sets, read below LAYERFORGE_*.
HOST_ENV_VARS = {
    "region": "AWS_REGION",
    "bucket": "LAYER_BUCKET",
}

# YAML file for the LayerForgeConfig being built by load_config(), if any.
_yaml_file: ContextVar[Optional[Path]] = ContextVar("layerforge_yaml_file", default=None)


# =============================================================================
# Host Environment Source
# =============================================================================
class HostEnvSettingsSource(PydanticBaseSettingsSource):
    """Settings source for the exact variable names in HOST_ENV_VARS.

    Empty values count as unset.
    """

    def get_field_value(self, field: FieldInfo, field_name: str) -> tuple[Any, str, bool]:
        env_name = HOST_ENV_VARS.get(field_name)
        value = os.environ.get(env_name) if env_name else None
        return value, field_name, False

    def __call__(self) -> dict[str, Any]:
        values: dict[str, Any] = {}
        for field_name, field in self.settings_cls.model_fields.items():
            value, key, _ = self.get_field_value(field, field_name)
            if value:
                values[key] = value
        return values


# =============================================================================
# Installer Configuration
# =============================================================================
class InstallerConfig(BaseModel):
    """Configuration for the package installer adapter.

    Attributes:
        kind: Which PackageInstaller implementation to build:
            "npm" runs the real installer, "mock" writes fake packages.
        command: Executable used by the npm installer. Override it when npm
            is not on PATH.
        timeout_seconds: Per-package limit. An install that runs longer is
            killed and reported as an installation failure.
    """

    kind: str = Field(
        default="npm",
        description="Installer implementation: 'npm' or 'mock'",
    )
    command: str = Field(
        default="npm",
        description="Installer executable",
    )
    timeout_seconds: float = Field(
        default=300.0,
        gt=0,
        description="Maximum time for a single package install",
    )


# =============================================================================
# Archive Configuration
# =============================================================================
class ArchiveConfig(BaseModel):
    """Configuration for the archive builder.

    Attributes:
        compression_level: DEFLATE level, 0 (store) to 9 (maximum).
        max_unzipped_bytes: Ceiling for the total uncompressed size of the
            layer. None disables the check.
    """

    compression_level: int = Field(
        default=9,
        ge=0,
        le=9,
        description="DEFLATE compression level",
    )
    max_unzipped_bytes: Optional[int] = Field(
        default=LAMBDA_LAYER_UNZIPPED_LIMIT,
        ge=1,
        description="Maximum uncompressed layer size in bytes (None = no limit)",
    )


# =============================================================================
# Main Configuration
# =============================================================================
class LayerForgeConfig(BaseSettings):
    """Top-level configuration for LayerForge.

    Attributes:
        environment: Deployment environment.
        log_level: Logging level for structlog.
        log_format: "console" for human-readable lines, "json" for
            machine-readable log records.
        region: AWS region for the S3 and Lambda clients. None lets boto3
            resolve it from its own configuration chain.
        bucket: Bucket that receives the layer archives.
        backend: AWS for real services, MEMORY for in-process fakes.
        workspace_dir: Parent directory for per-invocation workspaces.
        compatible_runtimes: Runtimes declared on every published version.
        compatible_architectures: Architectures declared on every published
            version.
        distinguish_client_errors: When True, invalid requests answer with
            400 instead of the uniform 500.
        installer: Installer adapter configuration.
        archive: Archive builder configuration.

    Example:
        >>> config = LayerForgeConfig(bucket="my-layers", backend="memory")
    """

    # -------------------------------------------------------------------------
    # General Settings
    # -------------------------------------------------------------------------
    environment: Literal["dev", "staging", "prod"] = Field(
        default="dev",
        description="Deployment environment",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level: DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )
    log_format: Literal["console", "json"] = Field(
        default="console",
        description="Log renderer: 'console' or 'json'",
    )

    # -------------------------------------------------------------------------
    # Publishing
    # -------------------------------------------------------------------------
    region: Optional[str] = Field(
        default=None,
        description="AWS region for S3 and Lambda",
    )
    bucket: str = Field(
        default=DEFAULT_BUCKET,
        min_length=3,
        description="Bucket that stores layer archives",
    )
    backend: Backend = Field(
        default=Backend.AWS,
        description="'aws' for S3/Lambda, 'memory' for in-process fakes",
    )
    compatible_runtimes: list[str] = Field(
        default_factory=lambda: ["nodejs20.x", "nodejs22.x"],
        description="Runtimes declared on every published layer version",
    )
    compatible_architectures: list[str] = Field(
        default_factory=lambda: ["x86_64"],
        description="Architectures declared on every published layer version",
    )

    # -------------------------------------------------------------------------
    # Pipeline Behaviour
    # -------------------------------------------------------------------------
    workspace_dir: Path = Field(
        default_factory=lambda: Path(tempfile.gettempdir()) / "layerforge",
        description="Parent directory for per-invocation workspaces",
    )
    distinguish_client_errors: bool = Field(
        default=False,
        description="Answer invalid requests with 400 instead of 500",
    )

    # -------------------------------------------------------------------------
    # Nested Configurations
    # -------------------------------------------------------------------------
    installer: InstallerConfig = Field(
        default_factory=InstallerConfig,
        description="Package installer configuration",
    )
    archive: ArchiveConfig = Field(
        default_factory=ArchiveConfig,
        description="Archive builder configuration",
    )

    model_config = {
        "env_prefix": "LAYERFORGE_",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
    }

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        sources = [
            init_settings,
            env_settings,
            dotenv_settings,
            HostEnvSettingsSource(settings_cls),
        ]
        yaml_file = _yaml_file.get()
        if yaml_file is not None:
            sources.append(YamlConfigSettingsSource(settings_cls, yaml_file=yaml_file))
        sources.append(file_secret_settings)
        return tuple(sources)


# =============================================================================
# Configuration Loader
# =============================================================================
def load_config(path: Optional[str] = None) -> LayerForgeConfig:
    """Load configuration from a YAML file and/or environment variables.

    Args:
        path: Path to a YAML configuration file. If None, 'layerforge.yaml'
            in the current directory is used when present; otherwise only
            defaults and environment variables apply.

    Returns:
        A validated LayerForgeConfig.

    Raises:
        FileNotFoundError: If an explicit path is given but doesn't exist.
    """
    if path is None:
        default_path = Path("layerforge.yaml")
        if default_path.exists():
            path = str(default_path)

    if path is not None and not Path(path).exists():
        raise FileNotFoundError(
            f"Configuration file not found: {path}. "
            f"Create one or use LAYERFORGE_* environment variables."
        )

    # The file ranks below every environment variable.
    token = _yaml_file.set(Path(path) if path is not None else None)
    try:
        return LayerForgeConfig()
    finally:
        _yaml_file.reset(token)
