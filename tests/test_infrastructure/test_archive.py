"""
Tests for layerforge.infrastructure.archive
=============================================

What's Being Tested:
    - Extracting the archive reproduces the workspace's file set exactly
    - Entry names carry no root-directory prefix
    - Maximum (DEFLATE) compression is used
    - The size ceiling and I/O failures raise ArchiveError
"""

import os
import zipfile
from pathlib import Path

import pytest

from layerforge.core.exceptions import ArchiveError
from layerforge.infrastructure.archive import ArchiveBuilder


def _populate(root: Path) -> set[str]:
    files = {
        "package.json": '{"name": "x"}',
        "node_modules/lodash/package.json": '{"name": "lodash"}',
        "node_modules/lodash/lodash.js": "module.exports = {};\n" * 200,
        "node_modules/@types/node/index.d.ts": "export {};\n",
        "node_modules/.bin/.keep": "",
    }
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return set(files)


def _tree(root: Path) -> set[str]:
    return {
        p.relative_to(root).as_posix()
        for p in root.rglob("*")
        if p.is_file()
    }


class TestArchiveContents:
    """The archive mirrors the source tree."""

    async def test_round_trip_file_set(self, tmp_path, archive_builder) -> None:
        source = tmp_path / "layer"
        expected = _populate(source)
        output = tmp_path / "out.zip"

        await archive_builder.build(source, output)

        extracted = tmp_path / "extracted"
        with zipfile.ZipFile(output) as zf:
            zf.extractall(extracted)
        assert _tree(extracted) == expected
        assert (extracted / "node_modules/lodash/lodash.js").read_text() == (
            source / "node_modules/lodash/lodash.js"
        ).read_text()

    async def test_no_root_prefix(self, tmp_path, archive_builder) -> None:
        source = tmp_path / "layer"
        _populate(source)
        output = tmp_path / "out.zip"

        await archive_builder.build(source, output)

        with zipfile.ZipFile(output) as zf:
            names = zf.namelist()
        assert "package.json" in names
        assert not any(name.startswith("layer/") for name in names)
        assert not any(name.startswith("/") for name in names)

    async def test_entries_are_sorted_and_deflated(self, tmp_path, archive_builder) -> None:
        source = tmp_path / "layer"
        _populate(source)
        output = tmp_path / "out.zip"

        await archive_builder.build(source, output)

        with zipfile.ZipFile(output) as zf:
            infos = zf.infolist()
        assert all(info.compress_type == zipfile.ZIP_DEFLATED for info in infos)
        assert [i.filename for i in infos] == [
            "package.json",
            "node_modules/.bin/.keep",
            "node_modules/@types/node/index.d.ts",
            "node_modules/lodash/lodash.js",
            "node_modules/lodash/package.json",
        ]

    async def test_summary(self, tmp_path, archive_builder) -> None:
        source = tmp_path / "layer"
        expected = _populate(source)
        output = tmp_path / "out.zip"

        summary = await archive_builder.build(source, output)

        assert summary.path == output
        assert summary.file_count == len(expected)
        assert summary.compressed_bytes == output.stat().st_size
        assert summary.uncompressed_bytes == sum(
            (source / rel).stat().st_size for rel in expected
        )
        assert summary.compressed_bytes < summary.uncompressed_bytes

    async def test_output_inside_source_is_not_archived(self, tmp_path, archive_builder) -> None:
        source = tmp_path / "layer"
        expected = _populate(source)
        output = source / "self.zip"

        await archive_builder.build(source, output)

        with zipfile.ZipFile(output) as zf:
            assert set(zf.namelist()) == expected

    async def test_symlinked_file_stored_by_content(self, tmp_path, archive_builder) -> None:
        source = tmp_path / "layer"
        _populate(source)
        os.symlink("../lodash/lodash.js", source / "node_modules/.bin/lodash")
        output = tmp_path / "out.zip"

        await archive_builder.build(source, output)

        with zipfile.ZipFile(output) as zf:
            data = zf.read("node_modules/.bin/lodash").decode()
        assert data.startswith("module.exports")


class TestArchiveFailures:
    """Failure modes raise ArchiveError."""

    async def test_missing_source(self, tmp_path, archive_builder) -> None:
        with pytest.raises(ArchiveError) as exc_info:
            await archive_builder.build(tmp_path / "missing", tmp_path / "out.zip")
        assert exc_info.value.error_code == "ARCHIVE_FAILED"

    async def test_unwritable_output(self, tmp_path, archive_builder) -> None:
        source = tmp_path / "layer"
        _populate(source)
        blocker = tmp_path / "blocker"
        blocker.write_text("file, not dir")

        with pytest.raises(ArchiveError):
            await archive_builder.build(source, blocker / "out.zip")

    async def test_size_ceiling(self, tmp_path) -> None:
        source = tmp_path / "layer"
        _populate(source)
        builder = ArchiveBuilder(compression_level=9, max_unzipped_bytes=100)

        with pytest.raises(ArchiveError) as exc_info:
            await builder.build(source, tmp_path / "out.zip")
        assert exc_info.value.error_code == "LAYER_TOO_LARGE"
        assert exc_info.value.details["max_unzipped_bytes"] == 100
