"""
layerforge.infrastructure.workspace - Per-Invocation Workspaces
=================================================================

Each pipeline run gets its own directory under the configured base dir. The
installer writes into it, the archive builder reads from it, and it is
removed when the run ends. Nothing in it is shared with any other run, which
is what makes concurrent invocations on the same host safe:

    <base_dir>/
        test-layer-3f9c1a2b.../      ← one run
            test-layer.zip
            layer/
                package.json
                .npmcache/
                node_modules/
        test-layer-77d0e4c1.../      ← another run of the same layer

The manifest written into ``layer/`` exists only so the installer works in
project mode (installing into ``layer/node_modules``) instead of globally.
Installed dependencies are never written back into it.

Usage:
    >>> manager = WorkspaceManager(Path("/tmp/layerforge"))
    >>> workspace = await manager.prepare("test-layer")
    >>> ...  # install, archive
    >>> await manager.clear_cache(workspace)
    >>> await manager.teardown(workspace)
"""

from __future__ import annotations

import asyncio
import json
import shutil
import tempfile
from pathlib import Path

import structlog

from layerforge.core.exceptions import WorkspaceError
from layerforge.core.models import MANIFEST_VERSION, Workspace


logger = structlog.get_logger()

LAYER_SUBDIR = "layer"
CACHE_SUBDIR = ".npmcache"
MANIFEST_NAME = "package.json"


class WorkspaceManager:
    """Creates, trims and removes per-invocation workspaces.

    Attributes:
        _base_dir: Parent directory of all workspaces. Created on demand;
            an existing directory is fine.
    """

    def __init__(self, base_dir: Path) -> None:
        self._base_dir = Path(base_dir)
        self._logger = logger.bind(component="workspace_manager")

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    async def prepare(self, layer_name: str) -> Workspace:
        """Create a fresh workspace for one build of ``layer_name``.

        Returns:
            A Workspace handle whose directories exist and whose manifest
            has been written.

        Raises:
            WorkspaceError: If the directories or the manifest can't be
                written.
        """
        try:
            workspace = await asyncio.to_thread(self._create, layer_name)
        except OSError as e:
            raise WorkspaceError(
                message=f"Failed to prepare workspace for '{layer_name}': {e}",
                details={"base_dir": str(self._base_dir)},
            ) from e

        self._logger.info(
            "workspace_prepared",
            layer_name=layer_name,
            root=str(workspace.root),
        )
        return workspace

    def _create(self, layer_name: str) -> Workspace:
        self._base_dir.mkdir(parents=True, exist_ok=True)

        # mkdtemp guarantees a name no other run is using.
        root = Path(tempfile.mkdtemp(prefix=f"{layer_name}-", dir=self._base_dir))
        layer_dir = root / LAYER_SUBDIR
        layer_dir.mkdir(parents=True, exist_ok=True)

        manifest = {
            "name": layer_name,
            "version": MANIFEST_VERSION,
            "dependencies": {},
        }
        manifest_path = layer_dir / MANIFEST_NAME
        manifest_path.write_text(json.dumps(manifest, indent=2), encoding="utf-8")

        return Workspace(
            layer_name=layer_name,
            root=root,
            layer_dir=layer_dir,
            cache_dir=layer_dir / CACHE_SUBDIR,
            manifest_path=manifest_path,
            archive_path=root / f"{layer_name}.zip",
        )

    async def clear_cache(self, workspace: Workspace) -> bool:
        """Remove the workspace's private installer cache.

        Best-effort: a failure is logged and reported through the return
        value, never raised.

        Returns:
            True if the cache is gone afterwards.
        """
        try:
            await asyncio.to_thread(_remove_tree, workspace.cache_dir)
        except OSError as e:
            self._logger.warning(
                "installer_cache_cleanup_failed",
                cache_dir=str(workspace.cache_dir),
                error=str(e),
            )
            return False

        self._logger.info("installer_cache_cleared", cache_dir=str(workspace.cache_dir))
        return True

    async def teardown(self, workspace: Workspace) -> bool:
        """Remove the whole workspace, archive included.

        Best-effort: cleanup errors never replace the outcome the caller is
        about to report.

        Returns:
            True if the workspace is gone afterwards.
        """
        try:
            await asyncio.to_thread(_remove_tree, workspace.root)
        except OSError as e:
            self._logger.warning(
                "workspace_teardown_failed",
                root=str(workspace.root),
                error=str(e),
            )
            return False

        self._logger.debug("workspace_removed", root=str(workspace.root))
        return True


def _remove_tree(path: Path) -> None:
    if path.exists():
        shutil.rmtree(path)
