"""GitHub REST client that lists repositories to audit."""

from __future__ import annotations

import json
from http.client import HTTPException
from typing import Any, Dict, List, Optional
from urllib.error import HTTPError, URLError
from urllib.parse import quote, urlencode
from urllib.request import Request, urlopen

from ..config import GitHubConfig
from ..logging import get_logger
from ..models import RepositoryRef


class ListingError(RuntimeError):
    """Raised when the repository listing cannot be retrieved."""


class GitHubClient:
    """Lists public repositories of an account, or looks up a single one."""

    def __init__(
        self,
        config: GitHubConfig | None = None,
        *,
        timeout: Optional[float] = 30.0,
        user_agent: str | None = None,
    ) -> None:
        self.config = config or GitHubConfig()
        self.timeout = timeout
        self.user_agent = user_agent
        self.logger = get_logger("github")

    def list_repositories(self, account: str, repository: str | None = None) -> List[RepositoryRef]:
        if repository:
            return self._single_repository(account, repository)
        return self._account_repositories(account)

    def _account_repositories(self, account: str) -> List[RepositoryRef]:
        refs: List[RepositoryRef] = []
        page = 1
        while True:
            query = urlencode({"type": "owner", "per_page": self.config.per_page, "page": page})
            payload = self._get_json(f"{self.config.api_url}/users/{quote(account)}/repos?{query}")
            if not isinstance(payload, list):
                raise ListingError(f"Unexpected repository listing for {account}")
            for item in payload:
                if isinstance(item, dict) and _is_auditable(item):
                    refs.append(RepositoryRef.from_api(item))
            if len(payload) < self.config.per_page:
                break
            page += 1
        self.logger.info("Found %d auditable repositories for %s", len(refs), account)
        return refs

    def _single_repository(self, account: str, repository: str) -> List[RepositoryRef]:
        url = f"{self.config.api_url}/repos/{quote(account)}/{quote(repository)}"
        payload = self._get_json(url, missing_ok=True)
        if payload is None:
            self.logger.info("Repository %s/%s not found", account, repository)
            return []
        if not isinstance(payload, dict):
            raise ListingError(f"Unexpected repository payload for {account}/{repository}")
        return [RepositoryRef.from_api(payload)]

    def _get_json(self, url: str, *, missing_ok: bool = False) -> Any:
        headers = {"Accept": "application/vnd.github+json"}
        if self.user_agent:
            headers["User-Agent"] = self.user_agent
        request = Request(url, headers=headers)
        self.logger.debug("GET %s", url)
        try:
            with urlopen(request, timeout=self.timeout) as response:  # type: ignore[arg-type]
                raw = response.read()
        except HTTPError as exc:
            if missing_ok and exc.code == 404:
                return None
            raise ListingError(f"GitHub API answered {exc.code} for {url}") from exc
        except (URLError, HTTPException, OSError) as exc:
            reason = getattr(exc, "reason", exc)
            raise ListingError(f"GitHub API request failed: {reason}") from exc

        try:
            return json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ListingError("GitHub API returned invalid JSON") from exc


def _is_auditable(item: Dict[str, Any]) -> bool:
    """Active, non-fork, non-empty repositories only."""
    return (
        not item.get("fork")
        and not item.get("disabled")
        and not item.get("archived")
        and int(item.get("size") or 0) > 0
    )


__all__ = ["GitHubClient", "ListingError"]
