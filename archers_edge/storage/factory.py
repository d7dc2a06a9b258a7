"""
Factory function to create the appropriate repository implementation.

Reads configuration from environment variables to determine which
backend to use.
"""

import logging
import os
from typing import Optional

from .base import RepositoryInterface
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Singleton instance
_repository: Optional[RepositoryInterface] = None


def get_repository() -> RepositoryInterface:
    """
    Get or create the repository instance.

    Uses the DB_TYPE environment variable to determine which implementation:
    - "sqlite" (default): Local SQLite document store under DATA_DIR
    - "memory": Process-local store, nothing persisted

    Returns:
        RepositoryInterface implementation

    Raises:
        ConfigurationError: If DB_TYPE is not recognized
    """
    global _repository

    if _repository is not None:
        return _repository

    db_type = os.environ.get('DB_TYPE', 'sqlite').lower()
    logger.info(f"Repository type: {db_type}")

    if db_type == 'sqlite':
        from .sqlite_db import SQLiteRepository

        data_dir = os.environ.get('DATA_DIR') or 'cache'
        _repository = SQLiteRepository(db_path=os.path.join(data_dir, 'archers_edge.db'))

    elif db_type == 'memory':
        from .memory_db import MemoryRepository
        _repository = MemoryRepository()

    else:
        raise ConfigurationError(
            f"Unknown DB_TYPE: {db_type}. "
            f"Valid options: sqlite, memory"
        )

    _repository.initialize()

    return _repository


def reset_repository() -> None:
    """
    Reset the repository singleton.

    Used for testing or when switching configurations.
    """
    global _repository
    if _repository is not None:
        _repository.close()
        _repository = None
