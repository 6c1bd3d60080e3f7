"""Network reachability checks for resolved links."""

from __future__ import annotations

import time
from http.client import HTTPException
from typing import Callable, Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from ..config import RetryPolicy
from ..logging import get_logger
from ..models import ResolvedLink, ValidationOutcome
from ..urls import encode_url

TOO_MANY_REQUESTS = 429


class LinkValidator:
    """Issues GET requests and maps the response onto a ValidationOutcome."""

    def __init__(
        self,
        *,
        retry_policy: RetryPolicy | None = None,
        timeout: Optional[float] = 30.0,
        user_agent: str | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.retry_policy = retry_policy or RetryPolicy()
        self.timeout = timeout
        self.user_agent = user_agent
        self._sleep = sleep
        self.logger = get_logger("links.validator")

    def validate(self, link: ResolvedLink) -> ValidationOutcome:
        """Check ``link.target``; 429 answers are retried per the retry policy."""
        url = link.target
        if url is None:
            raise ValueError(f"Link {link.raw.text} has no URL to validate")

        retries = 0
        while True:
            try:
                status = self._get(url)
            except (URLError, HTTPException, OSError, ValueError) as exc:
                reason = getattr(exc, "reason", exc)
                self.logger.debug("GET %s failed: %s", url, reason)
                return ValidationOutcome.error(f"Couldn't reach URL: {url}: {reason}")

            if status != TOO_MANY_REQUESTS:
                break
            retries += 1
            if not self.retry_policy.allows(retries):
                self.logger.warning("%s still rate limited after %d retries", url, retries - 1)
                return ValidationOutcome.error(
                    f"{url} still rate limited after {retries - 1} retries",
                    TOO_MANY_REQUESTS,
                )
            self.logger.info(
                "Rate limited on %s; retrying in %.0f seconds (retry %d)",
                url,
                self.retry_policy.cooldown,
                retries,
            )
            self._sleep(self.retry_policy.cooldown)

        self.logger.debug("GET %s -> %d", url, status)
        if status >= 400:
            return ValidationOutcome.broken(url, status)
        return ValidationOutcome.ok(url, status)

    def _get(self, url: str) -> int:
        headers = {"User-Agent": self.user_agent} if self.user_agent else {}
        request = Request(encode_url(url), headers=headers, method="GET")
        try:
            with urlopen(request, timeout=self.timeout) as response:  # type: ignore[arg-type]
                return int(getattr(response, "status", 200))
        except HTTPError as exc:
            if exc.fp is not None:
                exc.close()
            return exc.code


__all__ = ["LinkValidator", "TOO_MANY_REQUESTS"]
