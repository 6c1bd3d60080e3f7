"""Markdown link extraction."""

from __future__ import annotations

import re
from typing import List

from ..models import RawLink


class LinkParser:
    """Finds ``[label](target)`` tokens in markdown text."""

    # Nested brackets in labels are not supported; the target ends at the first ')'.
    _LINK_PATTERN = re.compile(r"\[([^\[\]]*?)\]\((.*?)\)")

    def parse(self, markdown: str) -> List[RawLink]:
        """Return every link token in document order."""
        return [
            RawLink(text=match.group(0), label=match.group(1), target=match.group(2).strip())
            for match in self._LINK_PATTERN.finditer(markdown)
        ]


__all__ = ["LinkParser"]
