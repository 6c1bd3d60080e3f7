"""Ordered classification rules that turn raw link targets into checkable URLs."""

from __future__ import annotations

import posixpath
import re
import socket
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from ..logging import get_logger
from ..models import (
    KIND_ABSOLUTE_URL,
    KIND_BARE_DOMAIN,
    KIND_EMAIL,
    KIND_RELATIVE_PATH,
    KIND_UNSUPPORTED,
    RawLink,
    ResolvedLink,
)

HostResolver = Callable[[str], bool]

_SCHEME_PATTERN = re.compile(r"^[a-z][a-z0-9+.-]*:", re.IGNORECASE)


def resolve_host(host: str) -> bool:
    """Return True when ``host`` has at least one DNS address."""
    if not host:
        return False
    try:
        return bool(socket.getaddrinfo(host, None))
    except (OSError, UnicodeError):
        return False


def target_extension(target: str) -> str:
    """Lower-cased trailing extension of a link target, ignoring query and fragment."""
    path = target.split("#", 1)[0].split("?", 1)[0]
    return path.lower().rsplit(".", 1)[-1]


@dataclass(frozen=True)
class LinkContext:
    """Where a link was found: the repository web root and the file path."""

    web_root: str
    file_path: str

    @property
    def directory(self) -> str:
        """Directory of the current file, wrapped in slashes (``/`` at the root)."""
        parent = posixpath.dirname(self.file_path.strip("/"))
        return f"/{parent}/" if parent else "/"


class LinkRule(ABC):
    """One step of the classification sequence."""

    kind: str

    @abstractmethod
    def supports(self, target: str) -> bool:
        """Return True when this rule claims the target."""

    @abstractmethod
    def resolve(self, target: str, context: LinkContext) -> Optional[str]:
        """Return the checkable URL, or None when the target is not a URL."""


class AbsoluteURLRule(LinkRule):
    """Scheme-qualified HTTP(S) links, used verbatim."""

    kind = KIND_ABSOLUTE_URL
    _PATTERN = re.compile(r"^https?://[\da-z.-]+(?::\d+)?(?:[/?#].*)?$", re.IGNORECASE)

    def supports(self, target: str) -> bool:
        return bool(self._PATTERN.match(target))

    def resolve(self, target: str, context: LinkContext) -> Optional[str]:
        return target


class EmailRule(LinkRule):
    """``mailto:`` links; never checked over the network."""

    kind = KIND_EMAIL

    def supports(self, target: str) -> bool:
        return target.startswith("mailto:")

    def resolve(self, target: str, context: LinkContext) -> Optional[str]:
        return None


class BareDomainRule(LinkRule):
    """Unprefixed external links such as ``example.com/page``.

    The first path segment must resolve in DNS and the target must not name a
    markdown file; ``docs/page.md`` stays an in-repository path even when
    ``docs`` happens to resolve.
    """

    kind = KIND_BARE_DOMAIN

    def __init__(self, resolver: HostResolver = resolve_host) -> None:
        self._resolver = resolver

    def supports(self, target: str) -> bool:
        if ":" in target:
            return False
        if target_extension(target) == "md":
            return False
        host = target.split("/", 1)[0]
        return self._resolver(host)

    def resolve(self, target: str, context: LinkContext) -> Optional[str]:
        return f"http://{target}"


class RelativePathRule(LinkRule):
    """Paths inside the repository, resolved against its web root."""

    kind = KIND_RELATIVE_PATH

    def supports(self, target: str) -> bool:
        return not _SCHEME_PATTERN.match(target)

    def resolve(self, target: str, context: LinkContext) -> Optional[str]:
        if target.startswith("/"):
            return f"{context.web_root}{target}"
        return f"{context.web_root}{context.directory}{target}"


def default_rules(resolver: HostResolver = resolve_host) -> list[LinkRule]:
    return [AbsoluteURLRule(), EmailRule(), BareDomainRule(resolver), RelativePathRule()]


class LinkClassifier:
    """Applies the rules in order; the first rule that supports a target wins."""

    def __init__(
        self,
        rules: Sequence[LinkRule] | None = None,
        *,
        resolver: HostResolver = resolve_host,
    ) -> None:
        self.rules = list(rules) if rules is not None else default_rules(resolver)
        self.logger = get_logger("links.classifier")

    def classify(self, raw: RawLink, context: LinkContext) -> ResolvedLink:
        for rule in self.rules:
            if rule.supports(raw.target):
                resolved = rule.resolve(raw.target, context)
                self.logger.debug("%s classified as %s -> %s", raw.text, rule.kind, resolved)
                return ResolvedLink(
                    raw=raw,
                    kind=rule.kind,
                    target=resolved,
                    file_path=context.file_path,
                )
        self.logger.debug("%s matched no rule", raw.text)
        return ResolvedLink(raw=raw, kind=KIND_UNSUPPORTED, target=None, file_path=context.file_path)


__all__ = [
    "AbsoluteURLRule",
    "BareDomainRule",
    "EmailRule",
    "HostResolver",
    "LinkClassifier",
    "LinkContext",
    "LinkRule",
    "RelativePathRule",
    "default_rules",
    "resolve_host",
    "target_extension",
]
