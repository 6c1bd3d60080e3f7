from __future__ import annotations

import io
from pathlib import Path

from mdlinkaudit.models import (
    ALL_LINKS_OK_MESSAGE,
    KIND_ABSOLUTE_URL,
    FileReport,
    RawLink,
    RepositoryRef,
    RepositoryReport,
    ResolvedLink,
    ValidationOutcome,
)
from mdlinkaudit.report import ReportRenderer


def _broken_report(repository: RepositoryRef, text: str = "[old](http://dead.example/x)") -> RepositoryReport:
    link = ResolvedLink(
        raw=RawLink(text=text, label="old", target="http://dead.example/x"),
        kind=KIND_ABSOLUTE_URL,
        target="http://dead.example/x",
        file_path="README.md",
        outcome=ValidationOutcome.broken("http://dead.example/x", 404),
    )
    return RepositoryReport(
        repository=repository,
        files=[FileReport(path="README.md", links=[link])],
        all_links_ok=False,
    )


def test_broken_links_render_as_table(repository: RepositoryRef) -> None:
    output = ReportRenderer().render([_broken_report(repository)])

    assert output == (
        "\n## [demo](https://github.com/octo/demo)\n"
        "\n* https://github.com/octo/demo/blob/main/README.md\n"
        "\n| URL | State |\n"
        "| --- | --- |\n"
        "| [old](http://dead.example/x) | [ERR] http://dead.example/x response: 404 |\n"
    )


def test_markdown_layout_escapes_link_source(repository: RepositoryRef) -> None:
    output = ReportRenderer().render([_broken_report(repository)], escape_links=True)

    assert "| \\[old](http://dead.example/x) |" in output


def test_healthy_repository_renders_state_line(repository: RepositoryRef) -> None:
    report = RepositoryReport(repository=repository, state=ALL_LINKS_OK_MESSAGE)

    output = ReportRenderer().render([report])

    assert output == "\n## [demo](https://github.com/octo/demo) - [INF] No inactive/broken links were found.\n"


def test_failed_repository_state_is_collapsed_to_one_line(repository: RepositoryRef) -> None:
    report = _broken_report(repository)
    report.fail("[ERR] Couldn't download x file.\n\tresponse: 404")

    output = ReportRenderer().render([report])

    assert output == "\n## [demo](https://github.com/octo/demo) - [ERR] Couldn't download x file. response: 404\n"


def test_file_errors_are_listed_under_heading(repository: RepositoryRef) -> None:
    report = RepositoryReport(
        repository=repository,
        state=ALL_LINKS_OK_MESSAGE,
        file_errors=["[ERR] Couldn't load bad.md:\n\tBad CRC-32"],
    )

    output = ReportRenderer().render([report])

    assert " - [ERR] Couldn't load bad.md: Bad CRC-32\n" in output


def test_pipes_in_link_text_are_escaped(repository: RepositoryRef) -> None:
    output = ReportRenderer().render([_broken_report(repository, text="[a|b](http://dead.example/x)")])

    assert "| [a\\|b](http://dead.example/x) |" in output


def test_no_repositories_message() -> None:
    assert ReportRenderer().render([]) == "[INF] No repositories were found\n"


def test_write_escapes_only_for_markdown_files(repository: RepositoryRef, tmp_path: Path) -> None:
    renderer = ReportRenderer()
    reports = [_broken_report(repository)]

    markdown_sink = io.StringIO()
    renderer.write(reports, markdown_sink, path=tmp_path / "REPORT.md")
    text_sink = io.StringIO()
    renderer.write(reports, text_sink, path=tmp_path / "report.txt")
    console_sink = io.StringIO()
    renderer.write(reports, console_sink)

    assert "\\[old]" in markdown_sink.getvalue()
    assert "\\[old]" not in text_sink.getvalue()
    assert "\\[old]" not in console_sink.getvalue()


def test_custom_template_directory_takes_precedence(repository: RepositoryRef, tmp_path: Path) -> None:
    (tmp_path / ReportRenderer.TEMPLATE_NAME).write_text(
        "{% for report in reports %}{{ report.repository.name }}{% endfor %}", encoding="utf-8"
    )

    assert ReportRenderer(templates_dir=tmp_path).render([_broken_report(repository)]) == "demo"
