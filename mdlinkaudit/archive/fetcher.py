"""Repository snapshot downloads."""

from __future__ import annotations

import shutil
from http.client import HTTPException
from pathlib import Path
from typing import Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from ..logging import get_logger
from ..urls import encode_url


class DownloadError(RuntimeError):
    """Raised when a repository archive cannot be downloaded or stored."""


class ArchiveFetcher:
    """Streams zip snapshots into a caller-supplied directory."""

    CHUNK_SIZE = 64 * 1024

    def __init__(
        self,
        *,
        timeout: Optional[float] = 30.0,
        user_agent: str | None = None,
    ) -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self.logger = get_logger("archive.fetcher")

    def fetch(self, url: str, destination: Path, filename: str) -> Path:
        """Download ``url`` to ``destination/filename`` and return the written path."""
        try:
            destination.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise DownloadError(f"[ERR] Couldn't create {destination} directory.\n\t{exc}") from exc

        target = destination / filename
        partial = destination / f"{filename}.part"
        headers = {"User-Agent": self.user_agent} if self.user_agent else {}
        self.logger.debug("Downloading %s to %s", url, target)

        try:
            request = Request(encode_url(url), headers=headers)
            with urlopen(request, timeout=self.timeout) as response:  # type: ignore[arg-type]
                status = getattr(response, "status", 200)
                if not 200 <= status < 300:
                    raise DownloadError(
                        f"[ERR] Couldn't download {url} file.\n\tresponse: {status}"
                    )
                try:
                    with partial.open("wb") as handle:
                        shutil.copyfileobj(response, handle, self.CHUNK_SIZE)
                except OSError as exc:
                    raise DownloadError(
                        f"[ERR] Couldn't store downloaded file.\n\t{exc}"
                    ) from exc
        except DownloadError:
            _discard(partial)
            raise
        except HTTPError as exc:
            _discard(partial)
            raise DownloadError(
                f"[ERR] Couldn't download {url} file.\n\tresponse: {exc.code}"
            ) from exc
        except (URLError, HTTPException, OSError, ValueError) as exc:
            _discard(partial)
            reason = getattr(exc, "reason", exc)
            raise DownloadError(f"[ERR] Couldn't download {url} file.\n\t{reason}") from exc

        try:
            partial.replace(target)
        except OSError as exc:
            _discard(partial)
            raise DownloadError(f"[ERR] Couldn't store downloaded file.\n\t{exc}") from exc
        self.logger.debug("Stored %s (%d bytes)", target, target.stat().st_size)
        return target


def _discard(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError:
        pass


__all__ = ["ArchiveFetcher", "DownloadError"]
