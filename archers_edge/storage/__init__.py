"""
Storage module for archery data.

Provides a unified interface for the document store backends:
- SQLite (local development, self-hosted)
- Memory (tests, offline sessions)

Usage:
    from archers_edge.storage import get_repository

    repo = get_repository()  # Uses DB_TYPE env var
    profiles = repo.get_profiles()
"""

from .base import RepositoryInterface
from .factory import get_repository, reset_repository
from .exceptions import (
    RepositoryError,
    ConfigurationError,
    SchemaError,
    QueryError,
    CorruptDocumentError,
)

__all__ = [
    'RepositoryInterface',
    'get_repository',
    'reset_repository',
    'RepositoryError',
    'ConfigurationError',
    'SchemaError',
    'QueryError',
    'CorruptDocumentError',
]
