"""Concurrent audit of many repositories."""

from __future__ import annotations

import concurrent.futures as cf
from typing import Callable, Iterator, List, Sequence

from .barrier import PhaseBarrier
from .config import AuditConfig
from .logging import get_logger
from .models import RepositoryRef, RepositoryReport
from .processor import RepositoryProcessor

ProcessorFactory = Callable[[PhaseBarrier], RepositoryProcessor]


class FleetCoordinator:
    """Starts one repository processor per repository and gathers their reports.

    Every worker runs on its own thread; the pool is sized to the repository
    count because all workers must reach the download barrier together.
    """

    def __init__(
        self,
        config: AuditConfig,
        *,
        processor_factory: ProcessorFactory | None = None,
    ) -> None:
        self.config = config
        self._processor_factory = processor_factory or self._default_processor
        self.logger = get_logger("coordinator")

    def iter_reports(self, repositories: Sequence[RepositoryRef]) -> Iterator[RepositoryReport]:
        """Yield reports in completion order."""
        repos = list(repositories)
        if not repos:
            return
        barrier = PhaseBarrier(len(repos))
        # Every party must exist before any worker can wait at the barrier.
        processors = [self._processor_factory(barrier) for _ in repos]
        with cf.ThreadPoolExecutor(
            max_workers=len(repos), thread_name_prefix="mdlinkaudit"
        ) as executor:
            futures = {}
            for index, (repository, processor) in enumerate(zip(repos, processors)):
                futures[executor.submit(processor.process, repository)] = repository
                self.logger.info("%d: %s", index, repository.html_url)
            for future in cf.as_completed(futures):
                repository = futures[future]
                try:
                    report = future.result()
                except Exception as exc:  # noqa: BLE001
                    self.logger.exception("Audit of %s crashed", repository.name)
                    report = RepositoryReport(repository=repository)
                    report.fail(f"[ERR] Audit failed unexpectedly: {exc}")
                yield report

    def run(self, repositories: Sequence[RepositoryRef]) -> List[RepositoryReport]:
        return list(self.iter_reports(repositories))

    def _default_processor(self, barrier: PhaseBarrier) -> RepositoryProcessor:
        return RepositoryProcessor(self.config, barrier=barrier)


__all__ = ["FleetCoordinator", "ProcessorFactory"]
