"""
layerforge.integrations.installer.npm - npm Subprocess Installer
==================================================================

Runs ``npm install`` for one spec at a time:

    npm install <spec> --save-exact --no-package-lock --no-audit --no-fund --omit=dev

Isolation:
    The environment for each call is built fresh from the parent environment
    plus three overrides, and handed only to that one subprocess:

        HOME                        → <layer_dir>
        NPM_CONFIG_CACHE            → <layer_dir>/.npmcache
        npm_config_update_notifier  → false

    Nothing is written to ``os.environ``, so concurrent runs in the same
    process can't see each other's cache location.

The command is executed without a shell. Package specs were already checked
not to start with ``-`` by LayerRequest, so they can't smuggle options in.
"""

from __future__ import annotations

import asyncio
import os
import time
from typing import Mapping, Optional, Sequence

import structlog

from layerforge.core.models import Workspace
from layerforge.integrations.installer.base import (
    OUTPUT_TAIL_CHARS,
    InstallOutcome,
    PackageInstaller,
)


logger = structlog.get_logger()

NPM_INSTALL_FLAGS: tuple[str, ...] = (
    "--save-exact",
    "--no-package-lock",
    "--no-audit",
    "--no-fund",
    "--omit=dev",
)


class NpmInstaller(PackageInstaller):
    """PackageInstaller backed by the npm CLI.

    Attributes:
        _command: The installer executable plus any leading arguments,
            e.g. ``["npm"]`` or ``["/opt/nodejs/bin/npm"]``.
        _timeout_seconds: Per-spec limit; the process is killed after it.
        _base_env: Environment the overrides are layered on. Defaults to a
            snapshot of ``os.environ`` taken at each call.
    """

    def __init__(
        self,
        command: Sequence[str] | str = "npm",
        timeout_seconds: float = 300.0,
        base_env: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._command = [command] if isinstance(command, str) else list(command)
        self._timeout_seconds = timeout_seconds
        self._base_env = dict(base_env) if base_env is not None else None
        self._logger = logger.bind(component="npm_installer")

    @property
    def name(self) -> str:
        return "npm"

    def build_command(self, spec: str) -> list[str]:
        return [*self._command, "install", spec, *NPM_INSTALL_FLAGS]

    def build_env(self, workspace: Workspace) -> dict[str, str]:
        env = dict(self._base_env if self._base_env is not None else os.environ)
        env.update({
            "HOME": str(workspace.layer_dir),
            "NPM_CONFIG_CACHE": str(workspace.cache_dir),
            "npm_config_update_notifier": "false",
        })
        return env

    async def install(self, spec: str, workspace: Workspace) -> InstallOutcome:
        argv = self.build_command(spec)
        started = time.monotonic()

        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                cwd=str(workspace.layer_dir),
                env=self.build_env(workspace),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except OSError as e:
            self._logger.error("installer_not_started", spec=spec, command=argv[0], error=str(e))
            return InstallOutcome(
                spec=spec,
                duration_seconds=time.monotonic() - started,
                reason=f"could not run {argv[0]!r}: {e}",
            )

        try:
            stdout, _ = await asyncio.wait_for(
                process.communicate(), timeout=self._timeout_seconds
            )
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            self._logger.error("installer_timed_out", spec=spec, timeout=self._timeout_seconds)
            return InstallOutcome(
                spec=spec,
                duration_seconds=time.monotonic() - started,
                reason=f"timed out after {self._timeout_seconds:g}s",
            )

        output = (stdout or b"").decode("utf-8", errors="replace")
        outcome = InstallOutcome(
            spec=spec,
            exit_code=process.returncode,
            output=output[-OUTPUT_TAIL_CHARS:],
            duration_seconds=time.monotonic() - started,
        )

        if outcome.succeeded:
            self._logger.debug("installer_output", spec=spec, output=outcome.output)
        else:
            self._logger.error(
                "installer_failed",
                spec=spec,
                exit_code=outcome.exit_code,
                output=outcome.output,
            )
        return outcome
