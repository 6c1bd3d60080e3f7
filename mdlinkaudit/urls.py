"""URL normalisation for outgoing requests."""

from __future__ import annotations

from urllib.parse import quote, urlsplit, urlunsplit

_PATH_SAFE = "/%:@!$&'()*+,;=~"
_QUERY_SAFE = _PATH_SAFE + "?"


def encode_url(url: str) -> str:
    """Percent-encode the path, query and fragment of ``url`` and IDNA-encode its host.

    ``http.client`` writes the request line as ASCII, so markdown targets such
    as ``/wiki/Straße`` or ``docs/日本語.md`` must be encoded before sending.
    Existing ``%XX`` escapes are kept. Raises ``UnicodeError`` for hosts that
    are not valid IDNA.
    """
    parts = urlsplit(url)
    return urlunsplit(
        (
            parts.scheme,
            _encode_netloc(parts.netloc),
            quote(parts.path, safe=_PATH_SAFE),
            quote(parts.query, safe=_QUERY_SAFE),
            quote(parts.fragment, safe=_QUERY_SAFE),
        )
    )


def _encode_netloc(netloc: str) -> str:
    if netloc.isascii():
        return netloc
    userinfo, at, hostport = netloc.rpartition("@")
    host, colon, port = hostport.partition(":")
    return f"{quote(userinfo, safe=':%')}{at}{host.encode('idna').decode('ascii')}{colon}{port}"


__all__ = ["encode_url"]
