from __future__ import annotations

import pytest

from mdlinkaudit.urls import encode_url


def test_ascii_urls_are_unchanged() -> None:
    url = "https://example.com/a/b.md?x=1&y=two#part"
    assert encode_url(url) == url


def test_non_ascii_path_is_percent_encoded() -> None:
    assert encode_url("https://de.wikipedia.org/wiki/Straße") == "https://de.wikipedia.org/wiki/Stra%C3%9Fe"


def test_existing_escapes_are_kept() -> None:
    assert encode_url("https://example.com/a%20b/c d") == "https://example.com/a%20b/c%20d"


def test_query_and_fragment_are_encoded() -> None:
    assert encode_url("https://example.com/search?q=café#résumé") == (
        "https://example.com/search?q=caf%C3%A9#r%C3%A9sum%C3%A9"
    )


def test_unicode_host_is_idna_encoded() -> None:
    assert encode_url("http://bücher.example:8080/x") == "http://xn--bcher-kva.example:8080/x"


def test_invalid_idna_host_raises_unicode_error() -> None:
    with pytest.raises(UnicodeError):
        encode_url("http://" + "ü" * 70 + ".example/")
