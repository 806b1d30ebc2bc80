"""
layerforge.infrastructure.archive - Layer Archive Builder
===========================================================

Zips the populated workspace into the single file that gets uploaded.

Streaming:
    ``ZipFile.write`` copies each source file into the archive in chunks,
    and the archive itself is written straight to its output file. At no
    point is the whole tree, or the whole compressed result, held in
    memory. The upload later reads the finished file from disk, so its size
    is known before streaming starts.

Layout:
    Entry names are relative to the source directory, so

        <layer_dir>/node_modules/lodash/package.json

    is stored as ``node_modules/lodash/package.json``. Files are added in
    sorted order so the same tree always yields the same entry order.

Usage:
    >>> builder = ArchiveBuilder(compression_level=9)
    >>> summary = await builder.build(workspace.layer_dir, workspace.archive_path)
    >>> summary.file_count
    412
"""

from __future__ import annotations

import asyncio
import os
import zipfile
from pathlib import Path
from typing import Iterator, Optional

import structlog

from layerforge.core.exceptions import ArchiveError
from layerforge.core.models import ArchiveSummary


logger = structlog.get_logger()


class ArchiveBuilder:
    """Builds a DEFLATE-compressed ZIP from a directory tree.

    Attributes:
        _compression_level: DEFLATE level, 9 is maximum compression.
        _max_unzipped_bytes: Size ceiling for the uncompressed contents.
            Exceeding it fails the build before anything is uploaded.
    """

    def __init__(
        self,
        compression_level: int = 9,
        max_unzipped_bytes: Optional[int] = None,
    ) -> None:
        self._compression_level = compression_level
        self._max_unzipped_bytes = max_unzipped_bytes
        self._logger = logger.bind(component="archive_builder")

    async def build(self, source_dir: Path, output_path: Path) -> ArchiveSummary:
        """Write every file under ``source_dir`` into a ZIP at ``output_path``.

        A partially written archive is left where it is on failure; the
        workspace teardown removes it.

        Raises:
            ArchiveError: On any I/O error, or when the uncompressed size
                exceeds the configured ceiling (code LAYER_TOO_LARGE).
        """
        source_dir = Path(source_dir)
        output_path = Path(output_path)

        try:
            summary = await asyncio.to_thread(self._write, source_dir, output_path)
        except (OSError, zipfile.BadZipFile, zipfile.LargeZipFile) as e:
            raise ArchiveError(
                message=f"Failed to create archive from {source_dir}: {e}",
                details={
                    "source_dir": str(source_dir),
                    "output_path": str(output_path),
                },
            ) from e

        if (
            self._max_unzipped_bytes is not None
            and summary.uncompressed_bytes > self._max_unzipped_bytes
        ):
            raise ArchiveError(
                message=(
                    f"Layer contents are {summary.uncompressed_bytes} bytes unzipped, "
                    f"above the {self._max_unzipped_bytes} byte limit"
                ),
                error_code="LAYER_TOO_LARGE",
                details={
                    "uncompressed_bytes": summary.uncompressed_bytes,
                    "max_unzipped_bytes": self._max_unzipped_bytes,
                },
            )

        self._logger.info(
            "archive_created",
            path=str(summary.path),
            file_count=summary.file_count,
            uncompressed_bytes=summary.uncompressed_bytes,
            compressed_bytes=summary.compressed_bytes,
        )
        return summary

    def _write(self, source_dir: Path, output_path: Path) -> ArchiveSummary:
        if not source_dir.is_dir():
            raise NotADirectoryError(f"not a directory: {source_dir}")

        output_path.parent.mkdir(parents=True, exist_ok=True)
        file_count = 0
        uncompressed = 0

        with zipfile.ZipFile(
            output_path,
            mode="w",
            compression=zipfile.ZIP_DEFLATED,
            compresslevel=self._compression_level,
        ) as archive:
            for path, arcname in self._iter_files(source_dir, output_path):
                archive.write(path, arcname)
                file_count += 1
                uncompressed += path.stat().st_size

        return ArchiveSummary(
            path=output_path,
            file_count=file_count,
            uncompressed_bytes=uncompressed,
            compressed_bytes=output_path.stat().st_size,
        )

    def _iter_files(self, source_dir: Path, output_path: Path) -> Iterator[tuple[Path, str]]:
        """Yield (absolute path, archive name) for every file, sorted."""
        output_resolved = output_path.resolve()

        def _raise(error: OSError) -> None:
            raise error

        for dirpath, dirnames, filenames in os.walk(source_dir, onerror=_raise):
            current = Path(dirpath)
            # Symlinked directories are never descended; sorted for stable order.
            dirnames[:] = sorted(d for d in dirnames if not (current / d).is_symlink())
            for name in sorted(filenames):
                path = current / name
                if path.resolve() == output_resolved:
                    continue
                if path.is_symlink() and not path.exists():
                    self._logger.warning("archive_skipped_broken_symlink", path=str(path))
                    continue
                yield path, path.relative_to(source_dir).as_posix()
