"""
layerforge.integrations.installer - Package Installer Adapters
================================================================

    - PackageInstaller (ABC): install(spec, workspace) -> InstallOutcome
    - NpmInstaller:           runs the npm CLI in the workspace
    - MockPackageInstaller:   writes fake packages, for tests
    - create_installer:       picks one from InstallerConfig
"""

from layerforge.integrations.installer.base import InstallOutcome, PackageInstaller
from layerforge.integrations.installer.factory import create_installer
from layerforge.integrations.installer.mock import MockPackageInstaller
from layerforge.integrations.installer.npm import NPM_INSTALL_FLAGS, NpmInstaller

__all__ = [
    "InstallOutcome",
    "PackageInstaller",
    "NpmInstaller",
    "NPM_INSTALL_FLAGS",
    "MockPackageInstaller",
    "create_installer",
]
