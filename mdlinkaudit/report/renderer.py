"""Markdown/console rendering of audit reports."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional, TextIO

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from ..models import RepositoryReport


class ReportRenderer:
    """Renders repository reports into one consolidated document.

    The console layout prints link text verbatim; the markdown-file layout
    escapes it so the table shows the literal ``[label](target)`` source.
    """

    TEMPLATE_NAME = "report.md.j2"

    def __init__(self, templates_dir: Path | None = None) -> None:
        self._env = self._create_env(templates_dir)

    def render(self, reports: Iterable[RepositoryReport], *, escape_links: bool = False) -> str:
        template = self._env.get_template(self.TEMPLATE_NAME)
        return template.render(reports=list(reports), escape_links=escape_links)

    def write(
        self,
        reports: Iterable[RepositoryReport],
        sink: TextIO,
        *,
        path: Optional[Path] = None,
    ) -> None:
        """Write the report to ``sink``; ``path`` names the file behind it, if any."""
        sink.write(self.render(reports, escape_links=self.escapes_links_for(path)))

    @staticmethod
    def escapes_links_for(path: Optional[Path]) -> bool:
        return path is not None and path.suffix.lower() == ".md"

    @staticmethod
    def _create_env(templates_dir: Path | None) -> Environment:
        directories = []
        if templates_dir:
            directories.append(str(templates_dir))
        directories.append(str(Path(__file__).with_name("templates")))
        env = Environment(
            loader=FileSystemLoader(directories),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )
        env.filters["oneline"] = _oneline
        env.filters["cell"] = _table_cell
        return env


def _oneline(value: object) -> str:
    return " ".join(str(value).split())


def _table_cell(value: object) -> str:
    return str(value).replace("|", "\\|")


__all__ = ["ReportRenderer"]
