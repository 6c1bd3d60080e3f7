from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pytest

from mdlinkaudit.config import AuditConfig, RetryPolicy
from mdlinkaudit.logging import ROOT_LOGGER, reset_handlers
from mdlinkaudit.models import RepositoryRef
from tests._fixtures.archive_builder import ArchiveBuilder


@pytest.fixture
def archive_builder(tmp_path: Path) -> ArchiveBuilder:
    """Provide a snapshot archive builder rooted at the pytest tmp_path."""
    return ArchiveBuilder(tmp_path)


@pytest.fixture
def repository() -> RepositoryRef:
    return RepositoryRef.create("demo", "https://github.com/octo/demo", "main")


@pytest.fixture
def audit_config(tmp_path: Path) -> AuditConfig:
    """Configuration with a private archive root and no rate-limit cool-down."""
    return AuditConfig(
        archive_root=tmp_path / ".archives",
        request_timeout=5.0,
        rate_limit=RetryPolicy(cooldown=0.0, max_retries=None),
    )


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    """Undo handlers installed by configure_logging so tests stay isolated."""
    yield
    logger = logging.getLogger(ROOT_LOGGER)
    reset_handlers(logger)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
