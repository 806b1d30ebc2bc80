"""
layerforge.integrations.installer.factory - Installer Factory
===============================================================

Maps ``InstallerConfig.kind`` to a concrete PackageInstaller.

Usage:
    >>> installer = create_installer(InstallerConfig(kind="mock"))
    >>> type(installer)  # MockPackageInstaller
"""

from __future__ import annotations

from layerforge.core.config import InstallerConfig
from layerforge.core.exceptions import ConfigurationError
from layerforge.integrations.installer.base import PackageInstaller


def create_installer(config: InstallerConfig) -> PackageInstaller:
    """Create a package installer from configuration.

        - "npm"  → NpmInstaller (runs the real command)
        - "mock" → MockPackageInstaller (writes fake packages)

    Raises:
        ConfigurationError: If the installer kind is not recognized.
    """
    kind = config.kind.lower()

    if kind == "npm":
        from layerforge.integrations.installer.npm import NpmInstaller
        return NpmInstaller(command=config.command, timeout_seconds=config.timeout_seconds)

    if kind == "mock":
        from layerforge.integrations.installer.mock import MockPackageInstaller
        return MockPackageInstaller()

    raise ConfigurationError(
        message=f"Unknown installer: '{kind}'. Available installers: 'npm', 'mock'.",
        error_code="UNKNOWN_INSTALLER",
        details={"installer": kind},
    )
