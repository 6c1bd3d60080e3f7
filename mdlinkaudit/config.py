"""Configuration loading for mdlinkaudit (.mdlinkaudit.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

CONFIG_FILENAME = ".mdlinkaudit.yml"
DEFAULT_ARCHIVE_DIR = ".archives"
DEFAULT_USER_AGENT = "mdlinkaudit/0.1 (+https://github.com)"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass(frozen=True)
class RetryPolicy:
    """Backoff applied when a link check answers 429 Too Many Requests.

    ``max_retries`` of ``None`` retries until the server stops rate limiting.
    """

    cooldown: float = 60.0
    max_retries: Optional[int] = None

    def allows(self, attempt: int) -> bool:
        """Return True when retry number ``attempt`` (1-based) may run."""
        return self.max_retries is None or attempt <= self.max_retries


@dataclass
class GitHubConfig:
    """Repository listing API settings."""

    api_url: str = "https://api.github.com"
    per_page: int = 100


@dataclass
class ReportConfig:
    """Default report sink, overridable from the CLI."""

    output: str = "file"
    filename: str = "REPORT.md"


@dataclass
class AuditConfig:
    """Settings threaded through the coordinator and repository processors."""

    archive_root: Path = field(default_factory=lambda: Path.cwd() / DEFAULT_ARCHIVE_DIR)
    request_timeout: Optional[float] = 30.0
    user_agent: str = DEFAULT_USER_AGENT
    rate_limit: RetryPolicy = field(default_factory=RetryPolicy)
    github: GitHubConfig = field(default_factory=GitHubConfig)
    report: ReportConfig = field(default_factory=ReportConfig)


def load_config(config_path: Path) -> AuditConfig:
    """Load configuration from disk, returning defaults when the file is absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return AuditConfig(archive_root=root / DEFAULT_ARCHIVE_DIR)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    archive_dir = _as_str(data.get("archive_root")) or DEFAULT_ARCHIVE_DIR
    archive_root = Path(archive_dir).expanduser()
    if not archive_root.is_absolute():
        archive_root = root / archive_root

    config = AuditConfig(archive_root=archive_root)
    if "request_timeout" in data:
        config.request_timeout = _as_float(data.get("request_timeout"))
    user_agent = _as_str(data.get("user_agent"))
    if user_agent:
        config.user_agent = user_agent

    rate_data = _as_dict(data.get("rate_limit"))
    if rate_data:
        cooldown = _as_float(rate_data.get("cooldown"))
        max_retries = _as_int(rate_data.get("max_retries"))
        if cooldown is not None and cooldown < 0:
            raise ConfigError("rate_limit.cooldown must not be negative")
        if max_retries is not None and max_retries < 0:
            raise ConfigError("rate_limit.max_retries must not be negative")
        config.rate_limit = RetryPolicy(
            cooldown=cooldown if cooldown is not None else RetryPolicy.cooldown,
            max_retries=max_retries,
        )

    github_data = _as_dict(data.get("github"))
    if github_data:
        api_url = _as_str(github_data.get("api_url"))
        per_page = _as_int(github_data.get("per_page"))
        if api_url:
            config.github.api_url = api_url.rstrip("/")
        if per_page:
            config.github.per_page = max(1, min(per_page, 100))

    report_data = _as_dict(data.get("report"))
    if report_data:
        output = _as_str(report_data.get("output"))
        filename = _as_str(report_data.get("filename"))
        if output:
            if output not in {"cli", "file"}:
                raise ConfigError(f"report.output must be 'cli' or 'file', got '{output}'")
            config.report.output = output
        if filename:
            config.report.filename = filename

    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


__all__ = [
    "AuditConfig",
    "CONFIG_FILENAME",
    "ConfigError",
    "GitHubConfig",
    "ReportConfig",
    "RetryPolicy",
    "load_config",
]
