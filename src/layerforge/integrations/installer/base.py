"""
layerforge.integrations.installer.base - Abstract Package Installer
=====================================================================

The contract every package installer implements. The pipeline never runs the
installer command itself; it calls ``install(spec, workspace)`` once per spec
and inspects the InstallOutcome it gets back.

    ┌───────────────┐   install(spec, ws)   ┌──────────────────────┐
    │ LayerPipeline │ ────────────────────→ │  PackageInstaller    │
    │               │ ←── InstallOutcome ── │  (abstract)          │
    └───────────────┘                       └──────────┬───────────┘
                                                       │
                                            ┌──────────┴──────────┐
                                       ┌────▼─────┐        ┌──────▼──────┐
                                       │   Mock   │        │    npm      │
                                       │Installer │        │ (subprocess)│
                                       └──────────┘        └─────────────┘

An installer must keep all of its state inside the workspace: its working
directory is ``workspace.layer_dir`` and its cache is ``workspace.cache_dir``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from pydantic import BaseModel, Field

from layerforge.core.exceptions import InstallationError
from layerforge.core.models import Workspace


# Keep this much of the installer's output for error reports.
OUTPUT_TAIL_CHARS = 2000


class InstallOutcome(BaseModel):
    """Result of installing one package spec.

    Attributes:
        spec: The package spec that was installed.
        exit_code: Installer exit code. None if the process never ran to
            completion (missing executable, timeout).
        output: Tail of the installer's combined stdout/stderr.
        duration_seconds: Wall-clock time of the install.
        reason: Short explanation when the install did not complete
            normally, e.g. "timed out after 300s".
    """

    spec: str
    exit_code: Optional[int] = None
    output: str = ""
    duration_seconds: float = Field(default=0.0, ge=0)
    reason: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0

    def raise_for_status(self) -> None:
        """Raise InstallationError unless the install succeeded."""
        if self.succeeded:
            return
        cause = self.reason or f"exit code {self.exit_code}"
        raise InstallationError(
            message=f"Failed to install '{self.spec}': {cause}",
            spec=self.spec,
            exit_code=self.exit_code,
            details={"output_tail": self.output[-OUTPUT_TAIL_CHARS:]},
        )


class PackageInstaller(ABC):
    """Installs one package spec into a workspace."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Installer name for logging, e.g. "npm"."""
        ...

    @abstractmethod
    async def install(self, spec: str, workspace: Workspace) -> InstallOutcome:
        """Install ``spec`` and its production dependencies into the workspace.

        Implementations report failure through the returned outcome rather
        than by raising.

        Args:
            spec: ``name`` or ``name@version``.
            workspace: The run's workspace; the install happens in
                ``workspace.layer_dir``.

        Returns:
            The outcome of this single install.
        """
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"
