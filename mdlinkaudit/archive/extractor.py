"""Markdown extraction from repository zip snapshots."""

from __future__ import annotations

import shutil
import zipfile
import zlib
from pathlib import Path, PurePosixPath
from typing import Callable, Iterator, Optional

from ..logging import get_logger
from ..models import MarkdownFile

_MARKDOWN_SUFFIX = ".md"


class ArchiveError(RuntimeError):
    """Raised when an archive cannot be opened as a zip file."""


class FileReadError(RuntimeError):
    """Raised for a single archive entry that cannot be read."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(message)
        self.path = path


class MarkdownExtractor:
    """Yields markdown files stored inside a source-hosting snapshot archive.

    Snapshot archives wrap the repository tree in a single ``<repo>-<branch>/``
    folder; yielded paths are relative to that folder.
    """

    def __init__(self) -> None:
        self.logger = get_logger("archive.extractor")

    def extract(
        self,
        archive_path: Path,
        *,
        on_error: Optional[Callable[[FileReadError], None]] = None,
    ) -> Iterator[MarkdownFile]:
        """Iterate markdown entries; unreadable entries go to ``on_error`` or raise."""
        try:
            archive = zipfile.ZipFile(archive_path)
        except (zipfile.BadZipFile, OSError) as exc:
            raise ArchiveError(f"[ERR] Couldn't open {archive_path.name} archive.\n\t{exc}") from exc

        with archive:
            for info in archive.infolist():
                if info.is_dir():
                    continue
                relative = repository_path(info.filename)
                if not is_markdown(relative):
                    continue
                try:
                    raw = archive.read(info)
                except (zipfile.BadZipFile, zlib.error, OSError, RuntimeError, NotImplementedError) as exc:
                    error = FileReadError(
                        relative,
                        f"[ERR] Couldn't load {PurePosixPath(relative).name}:\n\t{exc}",
                    )
                    if on_error is None:
                        raise error from exc
                    self.logger.warning("Skipping unreadable entry %s: %s", info.filename, exc)
                    on_error(error)
                    continue
                yield MarkdownFile(path=relative, content=raw.decode("utf-8", errors="replace"))

    def remove_archive(self, directory: Path) -> None:
        """Delete the directory holding a downloaded archive; failures are logged only."""
        if not directory.exists():
            return
        try:
            shutil.rmtree(directory)
        except OSError as exc:
            self.logger.warning("Could not remove archive directory %s: %s", directory, exc)


def repository_path(entry_name: str) -> str:
    """Strip the synthetic top-level folder from an archive entry name."""
    head, sep, rest = entry_name.partition("/")
    return rest if sep and rest else head


def is_markdown(path: str) -> bool:
    return PurePosixPath(path).suffix.lower() == _MARKDOWN_SUFFIX


__all__ = [
    "ArchiveError",
    "FileReadError",
    "MarkdownExtractor",
    "is_markdown",
    "repository_path",
]
