"""
layerforge.integrations.installer.mock - Mock Package Installer
=================================================================

An installer that never starts a process. For each spec it writes a tiny
fake package into ``<layer_dir>/node_modules/<name>/``, which is enough for
the archive builder and publisher to do real work on a realistic tree.

Features:
    - **Call History**: every spec, in order, for assertions.
    - **Failure Injection**: fail on chosen specs with a chosen exit code.
    - **Scoped Names**: ``@scope/pkg@1.2.3`` lands in
      ``node_modules/@scope/pkg``.

Usage:
    >>> installer = MockPackageInstaller()
    >>> installer.fail_on("broken-pkg", exit_code=1, output="npm ERR! 404")
    >>> outcome = await installer.install("lodash", workspace)
    >>> installer.installed_specs
    ['lodash']
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

import structlog

from layerforge.core.models import Workspace
from layerforge.integrations.installer.base import InstallOutcome, PackageInstaller


logger = structlog.get_logger()


def split_spec(spec: str) -> tuple[str, str]:
    """Split a package spec into (name, version).

    The version defaults to "0.0.0-mock" when the spec has none.

    >>> split_spec("@types/node@20.1.0")
    ('@types/node', '20.1.0')
    >>> split_spec("lodash")
    ('lodash', '0.0.0-mock')
    """
    at = spec.rfind("@")
    if at > 0:
        return spec[:at], spec[at + 1:] or "0.0.0-mock"
    return spec, "0.0.0-mock"


class MockPackageInstaller(PackageInstaller):
    """Fake installer for tests and local dry runs.

    Attributes:
        _call_history: Specs passed to install(), in call order.
        _failures: spec -> (exit_code, output) for injected failures.
    """

    def __init__(self) -> None:
        self._call_history: list[dict[str, Any]] = []
        self._failures: dict[str, tuple[int, str]] = {}
        self._logger = logger.bind(component="mock_installer")

    @property
    def name(self) -> str:
        return "mock"

    @property
    def call_history(self) -> list[dict[str, Any]]:
        """One entry per install() call: spec and workspace root."""
        return list(self._call_history)

    @property
    def installed_specs(self) -> list[str]:
        return [call["spec"] for call in self._call_history]

    @property
    def call_count(self) -> int:
        return len(self._call_history)

    def fail_on(self, spec: str, exit_code: int = 1, output: str = "npm ERR! mock failure") -> None:
        """Make install(spec) report a failure."""
        self._failures[spec] = (exit_code, output)

    def reset(self) -> None:
        self._call_history.clear()
        self._failures.clear()

    async def install(self, spec: str, workspace: Workspace) -> InstallOutcome:
        self._call_history.append({"spec": spec, "root": str(workspace.root)})

        if spec in self._failures:
            exit_code, output = self._failures[spec]
            self._logger.debug("mock_install_failed", spec=spec, exit_code=exit_code)
            return InstallOutcome(spec=spec, exit_code=exit_code, output=output)

        await asyncio.to_thread(self._write_package, spec, workspace.layer_dir)
        return InstallOutcome(spec=spec, exit_code=0, output=f"added 1 package ({spec})")

    @staticmethod
    def _write_package(spec: str, layer_dir: Path) -> None:
        name, version = split_spec(spec)
        package_dir = layer_dir / "node_modules" / name
        package_dir.mkdir(parents=True, exist_ok=True)
        (package_dir / "package.json").write_text(
            json.dumps({"name": name, "version": version, "main": "index.js"}, indent=2),
            encoding="utf-8",
        )
        (package_dir / "index.js").write_text(
            f"module.exports = {{ name: {json.dumps(name)} }};\n",
            encoding="utf-8",
        )
