"""CLI entrypoint for mdlinkaudit."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import CONFIG_FILENAME, ConfigError, load_config
from .coordinator import FleetCoordinator
from .github import GitHubClient, ListingError
from .logging import configure_logging, get_logger
from .report import ReportRenderer


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mdlinkaudit",
        description="Validate the links in the markdown files of GitHub repositories.",
    )
    parser.add_argument(
        "-u",
        "--username",
        default="",
        help="GitHub account name.",
    )
    parser.add_argument(
        "-r",
        "--repository",
        default="",
        help="GitHub repository name (defaults to every public repository of the account).",
    )
    parser.add_argument(
        "-o",
        "--output",
        choices=("cli", "file"),
        default=None,
        help="Output format: cli or file (default: file).",
    )
    parser.add_argument(
        "-f",
        "--filename",
        default=None,
        help="Results filename (default: REPORT.md).",
    )
    parser.add_argument(
        "-c",
        "--config",
        default=".",
        help=f"Path to {CONFIG_FILENAME} or the directory holding it.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write log records to this file.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Increase log verbosity for troubleshooting.",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for mdlinkaudit."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    # Nothing to audit without an account.
    if not args.username:
        return

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)
    logger = get_logger("cli")

    try:
        config = load_config(Path(args.config))
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    output = args.output or config.report.output
    filename = args.filename or config.report.filename

    client = GitHubClient(
        config.github, timeout=config.request_timeout, user_agent=config.user_agent
    )
    try:
        repositories = client.list_repositories(args.username, args.repository or None)
    except ListingError as exc:
        parser.exit(1, f"mdlinkaudit failed: {exc}\n")

    renderer = ReportRenderer()
    if repositories:
        reports = FleetCoordinator(config).run(repositories)
    else:
        reports = []

    if output == "cli":
        renderer.write(reports, sys.stdout)
        return

    report_path = Path.cwd() / filename
    with report_path.open("w", encoding="utf-8") as handle:
        renderer.write(reports, handle, path=report_path)
    logger.info("Report written to %s", _relativize(report_path))


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
