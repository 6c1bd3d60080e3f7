"""Helpers for building repository snapshot archives in tests."""

from __future__ import annotations

import textwrap
import zipfile
from pathlib import Path
from typing import Mapping


class ArchiveBuilder:
    """Writes zip files laid out like source-hosting snapshot downloads."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "snapshots"
        self.root.mkdir()

    def build(
        self,
        files: Mapping[str, str | bytes],
        *,
        repo: str = "demo",
        branch: str = "main",
    ) -> Path:
        """Write ``path -> contents`` entries under ``<repo>-<branch>/`` and return the zip path."""
        prefix = f"{repo}-{branch}/"
        path = self.root / f"{repo}-{branch}.zip"
        with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            archive.writestr(prefix, "")
            for relative, content in files.items():
                if isinstance(content, str):
                    content = textwrap.dedent(content).lstrip("\n")
                archive.writestr(prefix + relative, content)
        return path

    def build_bytes(self, files: Mapping[str, str | bytes], **kwargs: str) -> bytes:
        return self.build(files, **kwargs).read_bytes()


__all__ = ["ArchiveBuilder"]
