"""Audit the links in the markdown documentation of GitHub repositories."""

from .config import AuditConfig, RetryPolicy, load_config
from .coordinator import FleetCoordinator
from .models import RepositoryRef, RepositoryReport
from .processor import RepositoryProcessor

__all__ = [
    "AuditConfig",
    "FleetCoordinator",
    "RepositoryProcessor",
    "RepositoryRef",
    "RepositoryReport",
    "RetryPolicy",
    "load_config",
]

__version__ = "0.1.0"
