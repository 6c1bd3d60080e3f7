"""Archive download and markdown extraction."""

from .extractor import ArchiveError, FileReadError, MarkdownExtractor
from .fetcher import ArchiveFetcher, DownloadError

__all__ = [
    "ArchiveError",
    "ArchiveFetcher",
    "DownloadError",
    "FileReadError",
    "MarkdownExtractor",
]
