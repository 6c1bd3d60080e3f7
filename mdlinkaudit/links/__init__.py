"""Link parsing, classification and validation."""

from .classifier import LinkClassifier, LinkContext, LinkRule, default_rules, resolve_host
from .parser import LinkParser
from .validator import LinkValidator

__all__ = [
    "LinkClassifier",
    "LinkContext",
    "LinkParser",
    "LinkRule",
    "LinkValidator",
    "default_rules",
    "resolve_host",
]
