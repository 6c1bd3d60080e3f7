"""Logging for mdlinkaudit.

Repository workers run on separate threads, so their output interleaves.
Code running inside :func:`repository_context` gets the repository name
attached to every record it logs. Handlers installed by
:func:`configure_logging` render it as a ``<name>: `` prefix.
"""

from __future__ import annotations

import contextlib
import contextvars
import logging
from pathlib import Path
from typing import Iterator, Optional

ROOT_LOGGER = "mdlinkaudit"
CONSOLE_FORMAT = "[mdlinkaudit] %(levelname)s %(repository_prefix)s%(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)s %(threadName)s %(name)s %(repository_prefix)s%(message)s"

_current_repository: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "mdlinkaudit_repository", default=None
)


def get_logger(name: str | None = None) -> logging.Logger:
    return logging.getLogger(f"{ROOT_LOGGER}.{name}" if name else ROOT_LOGGER)


def current_repository() -> Optional[str]:
    return _current_repository.get()


@contextlib.contextmanager
def repository_context(name: str) -> Iterator[None]:
    """Tag records logged by the current thread with ``name`` until the block exits."""
    token = _current_repository.set(name)
    try:
        yield
    finally:
        _current_repository.reset(token)


class RepositoryFilter(logging.Filter):
    """Sets ``repository`` and ``repository_prefix`` on every record it sees."""

    def filter(self, record: logging.LogRecord) -> bool:
        repository = _current_repository.get()
        record.repository = repository or ""
        record.repository_prefix = f"{repository}: " if repository else ""
        return True


def configure_logging(*, verbose: bool = False, log_file: Path | None = None) -> logging.Logger:
    """Install console output and an optional file sink on the mdlinkaudit logger.

    Earlier handlers are closed and replaced, so calling this again does not
    duplicate output.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    logger.propagate = False
    reset_handlers(logger)

    logger.addHandler(_prepare(logging.StreamHandler(), CONSOLE_FORMAT, level))
    if log_file is not None:
        logger.addHandler(
            _prepare(logging.FileHandler(log_file, encoding="utf-8"), FILE_FORMAT, level)
        )
    return logger


def reset_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def _prepare(handler: logging.Handler, fmt: str, level: int) -> logging.Handler:
    handler.setLevel(level)
    handler.addFilter(RepositoryFilter())
    handler.setFormatter(logging.Formatter(fmt))
    return handler


__all__ = [
    "RepositoryFilter",
    "configure_logging",
    "current_repository",
    "get_logger",
    "repository_context",
    "reset_handlers",
]
