"""
Tests for layerforge.infrastructure.workspace
===============================================

What's Being Tested:
    - prepare(): directory layout, manifest contents, unique roots
    - clear_cache(): removes the private cache, tolerates absence
    - teardown(): removes everything, never raises
"""

import json

import pytest

from layerforge.core.exceptions import WorkspaceError
from layerforge.infrastructure.workspace import WorkspaceManager


class TestPrepare:
    """Tests for WorkspaceManager.prepare()."""

    async def test_creates_layout(self, workspace_manager) -> None:
        ws = await workspace_manager.prepare("test-layer")

        assert ws.root.is_dir()
        assert ws.layer_dir.is_dir()
        assert ws.layer_dir.parent == ws.root
        assert ws.root.parent == workspace_manager.base_dir
        assert ws.cache_dir.parent == ws.layer_dir
        assert ws.archive_path.parent == ws.root
        assert ws.archive_path.name == "test-layer.zip"

    async def test_writes_manifest(self, workspace_manager) -> None:
        ws = await workspace_manager.prepare("test-layer")
        manifest = json.loads(ws.manifest_path.read_text())
        assert manifest == {"name": "test-layer", "version": "1.0.0", "dependencies": {}}
        assert ws.manifest_path.name == "package.json"

    async def test_concurrent_runs_get_distinct_roots(self, workspace_manager) -> None:
        first = await workspace_manager.prepare("same")
        second = await workspace_manager.prepare("same")
        assert first.root != second.root

    async def test_existing_base_dir_is_fine(self, tmp_path) -> None:
        base = tmp_path / "exists"
        base.mkdir()
        ws = await WorkspaceManager(base).prepare("x")
        assert ws.root.parent == base

    async def test_unwritable_base_raises_workspace_error(self, tmp_path) -> None:
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        with pytest.raises(WorkspaceError):
            await WorkspaceManager(blocker / "nested").prepare("x")


class TestCleanup:
    """Tests for clear_cache() and teardown()."""

    async def test_clear_cache_removes_cache_only(self, workspace_manager) -> None:
        ws = await workspace_manager.prepare("x")
        (ws.cache_dir / "_cacache").mkdir(parents=True)
        (ws.cache_dir / "_cacache" / "blob").write_bytes(b"data")

        assert await workspace_manager.clear_cache(ws) is True
        assert not ws.cache_dir.exists()
        assert ws.manifest_path.exists()

    async def test_clear_cache_when_absent(self, workspace_manager) -> None:
        ws = await workspace_manager.prepare("x")
        assert await workspace_manager.clear_cache(ws) is True

    async def test_teardown_removes_root(self, workspace_manager) -> None:
        ws = await workspace_manager.prepare("x")
        ws.archive_path.write_bytes(b"zip")

        assert await workspace_manager.teardown(ws) is True
        assert not ws.root.exists()

    async def test_teardown_twice_is_harmless(self, workspace_manager) -> None:
        ws = await workspace_manager.prepare("x")
        await workspace_manager.teardown(ws)
        assert await workspace_manager.teardown(ws) is True

    async def test_teardown_failure_is_swallowed(self, workspace_manager, monkeypatch) -> None:
        ws = await workspace_manager.prepare("x")

        def _fail(path):
            raise PermissionError("read-only filesystem")

        monkeypatch.setattr("layerforge.infrastructure.workspace._remove_tree", _fail)
        assert await workspace_manager.teardown(ws) is False
