"""Repository listing collaborators."""

from .client import GitHubClient, ListingError

__all__ = ["GitHubClient", "ListingError"]
