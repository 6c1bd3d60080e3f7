"""Tests for the ordered link classification rules."""

from __future__ import annotations

import pytest

from mdlinkaudit.links.classifier import (
    AbsoluteURLRule,
    BareDomainRule,
    EmailRule,
    LinkClassifier,
    LinkContext,
    RelativePathRule,
    target_extension,
)
from mdlinkaudit.models import (
    KIND_ABSOLUTE_URL,
    KIND_BARE_DOMAIN,
    KIND_EMAIL,
    KIND_RELATIVE_PATH,
    KIND_UNSUPPORTED,
    RawLink,
)

WEB_ROOT = "https://github.com/octo/demo/blob/main"


def _raw(target: str) -> RawLink:
    return RawLink(text=f"[x]({target})", label="x", target=target)


def _classifier(*resolvable: str) -> LinkClassifier:
    hosts = set(resolvable)
    return LinkClassifier(resolver=lambda host: host in hosts)


def test_absolute_rule_accepts_http_and_https() -> None:
    rule = AbsoluteURLRule()

    assert rule.supports("https://example.com")
    assert rule.supports("http://example.com/docs?page=1#top")
    assert rule.supports("http://localhost:8080/health")
    assert not rule.supports("ftp://example.com/file")
    assert not rule.supports("example.com/page")


def test_email_rule_requires_mailto_prefix() -> None:
    rule = EmailRule()

    assert rule.supports("mailto:dev@example.com")
    assert not rule.supports("dev@example.com")
    assert rule.resolve("mailto:dev@example.com", LinkContext(WEB_ROOT, "README.md")) is None


def test_bare_domain_rule_requires_resolvable_host_and_non_markdown_target() -> None:
    lookups: list[str] = []

    def resolver(host: str) -> bool:
        lookups.append(host)
        return host in {"example.com", "docs"}

    rule = BareDomainRule(resolver)

    assert rule.supports("example.com/page")
    assert not rule.supports("docs/page.md")
    assert not rule.supports("docs/page.MD#intro")
    assert not rule.supports("unknown.invalid/page")
    assert not rule.supports("example.com:8080/page")
    assert "docs" not in lookups
    assert rule.resolve("example.com/page", LinkContext(WEB_ROOT, "README.md")) == "http://example.com/page"


def test_relative_rule_resolves_root_and_path_relative_targets() -> None:
    rule = RelativePathRule()
    context = LinkContext(WEB_ROOT, "a/b.md")

    assert rule.resolve("/docs/x.md", context) == f"{WEB_ROOT}/docs/x.md"
    assert rule.resolve("x.md", context) == f"{WEB_ROOT}/a/x.md"
    assert rule.resolve("x.md", LinkContext(WEB_ROOT, "README.md")) == f"{WEB_ROOT}/x.md"
    assert not rule.supports("tel:+123456")


@pytest.mark.parametrize(
    ("target", "kind", "resolved"),
    [
        ("https://example.com", KIND_ABSOLUTE_URL, "https://example.com"),
        ("mailto:dev@example.com", KIND_EMAIL, None),
        ("example.com/page", KIND_BARE_DOMAIN, "http://example.com/page"),
        ("/docs/x.md", KIND_RELATIVE_PATH, f"{WEB_ROOT}/docs/x.md"),
        ("x.md", KIND_RELATIVE_PATH, f"{WEB_ROOT}/a/x.md"),
        ("#usage", KIND_RELATIVE_PATH, f"{WEB_ROOT}/a/#usage"),
        ("ftp://example.com/file", KIND_UNSUPPORTED, None),
    ],
)
def test_classifier_applies_first_matching_rule(target: str, kind: str, resolved: str | None) -> None:
    link = _classifier("example.com").classify(_raw(target), LinkContext(WEB_ROOT, "a/b.md"))

    assert link.kind == kind
    assert link.target == resolved
    assert link.file_path == "a/b.md"
    assert link.outcome is None


def test_classifier_keeps_markdown_targets_in_repository_even_if_host_resolves() -> None:
    link = _classifier("docs").classify(_raw("docs/page.md"), LinkContext(WEB_ROOT, "README.md"))

    assert link.kind == KIND_RELATIVE_PATH
    assert link.target == f"{WEB_ROOT}/docs/page.md"


def test_classifier_preserves_surprising_domain_matches() -> None:
    # A path whose first segment is a live domain is treated as external.
    link = _classifier("github.com").classify(
        _raw("github.com/octo/demo"), LinkContext(WEB_ROOT, "README.md")
    )

    assert link.kind == KIND_BARE_DOMAIN
    assert link.target == "http://github.com/octo/demo"


def test_classification_is_repeatable() -> None:
    classifier = _classifier()
    context = LinkContext(WEB_ROOT, "a/b.md")
    raw = _raw("../c/d.md")

    assert classifier.classify(raw, context).target == classifier.classify(raw, context).target


def test_classifier_accepts_custom_rule_order() -> None:
    classifier = LinkClassifier(rules=[RelativePathRule()])

    link = classifier.classify(_raw("example.com"), LinkContext(WEB_ROOT, "README.md"))

    assert link.kind == KIND_RELATIVE_PATH


def test_target_extension_ignores_query_and_fragment() -> None:
    assert target_extension("docs/Page.MD#section") == "md"
    assert target_extension("example.com/page?x=1") == "com/page"
    assert target_extension("README") == "readme"
