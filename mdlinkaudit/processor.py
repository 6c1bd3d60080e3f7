"""Per-repository audit pipeline."""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import List, Optional

from .archive import (
    ArchiveError,
    ArchiveFetcher,
    DownloadError,
    FileReadError,
    MarkdownExtractor,
)
from .barrier import PhaseBarrier
from .config import AuditConfig
from .links import LinkClassifier, LinkContext, LinkParser, LinkValidator
from .logging import get_logger, repository_context
from .models import (
    ALL_LINKS_OK_MESSAGE,
    KIND_EMAIL,
    KIND_UNSUPPORTED,
    NO_LINKS_MESSAGE,
    REPORT_DONE,
    FileReport,
    MarkdownFile,
    RepositoryRef,
    RepositoryReport,
    ResolvedLink,
    ValidationOutcome,
)

STATE_PENDING = "pending"
STATE_FETCHING = "fetching"
STATE_EXTRACTING = "extracting"
STATE_VALIDATING = "validating"
STATE_DONE = "done"
STATE_FAILED = "failed"


class RepositoryProcessor:
    """Runs fetch, extract, classify and validate for a single repository.

    States move ``fetching -> extracting -> validating -> done`` with
    ``failed`` reachable from fetching and extracting. Extraction and
    validation interleave per file.
    """

    def __init__(
        self,
        config: AuditConfig,
        *,
        fetcher: ArchiveFetcher | None = None,
        extractor: MarkdownExtractor | None = None,
        parser: LinkParser | None = None,
        classifier: LinkClassifier | None = None,
        validator: LinkValidator | None = None,
        barrier: PhaseBarrier | None = None,
    ) -> None:
        self.config = config
        self.fetcher = fetcher or ArchiveFetcher(
            timeout=config.request_timeout, user_agent=config.user_agent
        )
        self.extractor = extractor or MarkdownExtractor()
        self.parser = parser or LinkParser()
        self.classifier = classifier or LinkClassifier()
        self.validator = validator or LinkValidator(
            retry_policy=config.rate_limit,
            timeout=config.request_timeout,
            user_agent=config.user_agent,
        )
        self.barrier = barrier
        self.state = STATE_PENDING
        self.transitions: List[str] = []
        self.logger = get_logger("processor")

    def process(self, repository: RepositoryRef) -> RepositoryReport:
        """Audit one repository; every log record inside is tagged with its name."""
        with repository_context(repository.name):
            return self._process(repository)

    def _process(self, repository: RepositoryRef) -> RepositoryReport:
        report = RepositoryReport(repository=repository)
        self.logger.info("Auditing %s", repository.html_url)

        self._transition(STATE_FETCHING)
        workdir: Optional[Path] = None
        archive_path: Optional[Path] = None
        try:
            workdir = self._make_workdir(repository)
            archive_path = self.fetcher.fetch(
                repository.archive_url, workdir, f"{repository.name}.zip"
            )
        except DownloadError as exc:
            report.fail(str(exc))
        finally:
            self._leave_download_phase(waiting=archive_path is not None)

        if archive_path is None or workdir is None:
            if workdir is not None:
                self.extractor.remove_archive(workdir)
            self._transition(STATE_FAILED)
            self.logger.warning("%s", report.state)
            return report

        self._transition(STATE_EXTRACTING)
        try:
            self._audit_archive(report, archive_path)
        except ArchiveError as exc:
            report.fail(str(exc))
        finally:
            self.extractor.remove_archive(workdir)

        if report.failed:
            self._transition(STATE_FAILED)
            self.logger.warning("%s", report.state)
            return report

        self._finish(report)
        self._transition(STATE_DONE)
        self.logger.info(
            "Finished: %d markdown files, %d links, %d files with failing links",
            report.markdown_files,
            report.links_checked,
            len(report.files),
        )
        return report

    def check_file(self, repository: RepositoryRef, markdown: MarkdownFile) -> tuple[FileReport, int]:
        """Validate every link in one file; returns the non-ok links and the link count."""
        context = LinkContext(web_root=repository.web_root, file_path=markdown.path)
        file_report = FileReport(path=markdown.path)
        raw_links = self.parser.parse(markdown.content)
        for raw in raw_links:
            link = self.classifier.classify(raw, context)
            link.outcome = self._validate(link)
            if not link.outcome.succeeded:
                file_report.links.append(link)
        return file_report, len(raw_links)

    def _audit_archive(self, report: RepositoryReport, archive_path: Path) -> None:
        def _record_read_error(error: FileReadError) -> None:
            report.file_errors.append(str(error))

        for markdown in self.extractor.extract(archive_path, on_error=_record_read_error):
            report.markdown_files += 1
            self._transition(STATE_VALIDATING)
            file_report, link_count = self.check_file(report.repository, markdown)
            report.links_checked += link_count
            if not file_report.links:
                continue
            report.files.append(file_report)
            if report.all_links_ok and _has_failure(file_report.links):
                report.all_links_ok = False

    def _validate(self, link: ResolvedLink) -> ValidationOutcome:
        if link.kind == KIND_EMAIL:
            self.logger.debug("%s is an email link; not validated", link.raw.target)
            return ValidationOutcome.skipped(f"{link.raw.target} is not URL")
        if link.kind == KIND_UNSUPPORTED or link.target is None:
            return ValidationOutcome.error(f"Unsupported link scheme: {link.raw.target}")
        return self.validator.validate(link)

    @staticmethod
    def _finish(report: RepositoryReport) -> None:
        if report.links_checked == 0:
            report.state = NO_LINKS_MESSAGE
        elif report.all_links_ok:
            report.state = ALL_LINKS_OK_MESSAGE
        report.status = REPORT_DONE

    def _make_workdir(self, repository: RepositoryRef) -> Path:
        """Create a private directory for this run under the archive root."""
        root = self.config.archive_root
        try:
            root.mkdir(parents=True, exist_ok=True)
            return Path(tempfile.mkdtemp(prefix=f"{repository.name}-", dir=root))
        except OSError as exc:
            raise DownloadError(f"[ERR] Couldn't create {root} directory.\n\t{exc}") from exc

    def _leave_download_phase(self, *, waiting: bool) -> None:
        if self.barrier is None:
            return
        if waiting:
            self.barrier.arrive_and_wait()
        else:
            self.barrier.arrive()

    def _transition(self, state: str) -> None:
        if self.state == state:
            return
        self.logger.debug("%s -> %s", self.state, state)
        self.state = state
        self.transitions.append(state)


def _has_failure(links: List[ResolvedLink]) -> bool:
    return any(not link.is_email for link in links)


__all__ = [
    "RepositoryProcessor",
    "STATE_DONE",
    "STATE_EXTRACTING",
    "STATE_FAILED",
    "STATE_FETCHING",
    "STATE_VALIDATING",
]
