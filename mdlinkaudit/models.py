"""Core data models shared across mdlinkaudit components."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional

STATUS_OK = "ok"
STATUS_BROKEN = "broken"
STATUS_SKIPPED = "skipped"
STATUS_ERROR = "error"

KIND_ABSOLUTE_URL = "absolute_url"
KIND_EMAIL = "email"
KIND_BARE_DOMAIN = "bare_domain"
KIND_RELATIVE_PATH = "relative_path"
KIND_UNSUPPORTED = "unsupported"

REPORT_DONE = "done"
REPORT_FAILED = "failed"

NO_LINKS_MESSAGE = "[INF] No markdown links were found."
ALL_LINKS_OK_MESSAGE = "[INF] No inactive/broken links were found."


@dataclass(frozen=True)
class RepositoryRef:
    """Identity of a repository to audit."""

    name: str
    html_url: str
    default_branch: str
    archive_url: str
    web_root: str

    @classmethod
    def create(cls, name: str, html_url: str, default_branch: str) -> "RepositoryRef":
        """Build a reference, deriving the archive and blob URLs from the web URL."""
        base = html_url.rstrip("/")
        return cls(
            name=name,
            html_url=base,
            default_branch=default_branch,
            archive_url=f"{base}/archive/refs/heads/{default_branch}.zip",
            web_root=f"{base}/blob/{default_branch}",
        )

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "RepositoryRef":
        """Build a reference from a GitHub repository payload."""
        return cls.create(
            name=str(payload["name"]),
            html_url=str(payload["html_url"]),
            default_branch=str(payload.get("default_branch") or "main"),
        )


@dataclass
class MarkdownFile:
    """A markdown entry read from a repository archive."""

    path: str
    content: str


@dataclass(frozen=True)
class RawLink:
    """A link token exactly as it appears in markdown source."""

    text: str
    label: str
    target: str


@dataclass(frozen=True)
class ValidationOutcome:
    """Result of checking one resolved link."""

    status: str
    detail: str
    http_status: Optional[int] = None

    @classmethod
    def ok(cls, url: str, http_status: int) -> "ValidationOutcome":
        return cls(STATUS_OK, f"{url} response: {http_status}", http_status)

    @classmethod
    def broken(cls, url: str, http_status: int) -> "ValidationOutcome":
        return cls(STATUS_BROKEN, f"{url} response: {http_status}", http_status)

    @classmethod
    def error(cls, detail: str, http_status: Optional[int] = None) -> "ValidationOutcome":
        return cls(STATUS_ERROR, detail, http_status)

    @classmethod
    def skipped(cls, detail: str) -> "ValidationOutcome":
        return cls(STATUS_SKIPPED, detail)

    @property
    def succeeded(self) -> bool:
        return self.status == STATUS_OK

    @property
    def severity(self) -> str:
        """Short level tag used by the rendered report."""
        if self.status in (STATUS_BROKEN, STATUS_ERROR):
            return "ERR"
        return "INF"


@dataclass
class ResolvedLink:
    """A raw link after classification and, later, validation."""

    raw: RawLink
    kind: str
    target: Optional[str]
    file_path: str
    outcome: Optional[ValidationOutcome] = None

    @property
    def is_email(self) -> bool:
        return self.kind == KIND_EMAIL


@dataclass
class FileReport:
    """Links of one markdown file that did not validate cleanly."""

    path: str
    links: List[ResolvedLink] = field(default_factory=list)


@dataclass
class RepositoryReport:
    """Aggregated audit results for one repository."""

    repository: RepositoryRef
    files: List[FileReport] = field(default_factory=list)
    all_links_ok: bool = True
    state: Optional[str] = None
    status: str = REPORT_DONE
    file_errors: List[str] = field(default_factory=list)
    markdown_files: int = 0
    links_checked: int = 0

    @property
    def failed(self) -> bool:
        return self.status == REPORT_FAILED

    def fail(self, message: str) -> None:
        """Mark the repository as failed; per-file details are dropped."""
        self.status = REPORT_FAILED
        self.state = message
        self.files = []


__all__ = [
    "ALL_LINKS_OK_MESSAGE",
    "FileReport",
    "KIND_ABSOLUTE_URL",
    "KIND_BARE_DOMAIN",
    "KIND_EMAIL",
    "KIND_RELATIVE_PATH",
    "KIND_UNSUPPORTED",
    "MarkdownFile",
    "NO_LINKS_MESSAGE",
    "REPORT_DONE",
    "REPORT_FAILED",
    "RawLink",
    "RepositoryRef",
    "RepositoryReport",
    "ResolvedLink",
    "STATUS_BROKEN",
    "STATUS_ERROR",
    "STATUS_OK",
    "STATUS_SKIPPED",
    "ValidationOutcome",
]
