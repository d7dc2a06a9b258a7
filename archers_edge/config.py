"""
Application configuration.

Loads settings from environment variables with sensible defaults.
"""

import os
from functools import lru_cache

from pydantic import BaseModel


def _get_int(key: str, default: int) -> int:
    """Get integer from environment variable."""
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_str(key: str, default: str) -> str:
    """Get string from environment variable."""
    return os.environ.get(key, default)


# =============================================================================
# SERVER SETTINGS
# =============================================================================
PORT = _get_int('PORT', 8000)
HOST = _get_str('HOST', '0.0.0.0')

# =============================================================================
# STORAGE SETTINGS
# =============================================================================
# Repository backend: "sqlite" (default) or "memory"
DB_TYPE = _get_str('DB_TYPE', 'sqlite')

# Directory holding the SQLite document store
DATA_DIR = os.environ.get('DATA_DIR') or 'cache'

# =============================================================================
# BALE ASSIGNMENT DEFAULTS
# =============================================================================
DEFAULT_NUMBER_OF_BALES = _get_int('DEFAULT_NUMBER_OF_BALES', 8)

# Only 4 (targets A-D) and 6 (targets A-F) are meaningful
DEFAULT_MAX_ARCHERS_PER_BALE = _get_int('DEFAULT_MAX_ARCHERS_PER_BALE', 4)

# =============================================================================
# LOGGING
# =============================================================================
LOG_LEVEL = _get_str('LOG_LEVEL', 'INFO')


class Settings(BaseModel):
    """Snapshot cache lifetimes, in seconds."""

    CACHE_PROFILES_TTL: int = 3600
    CACHE_COMPETITIONS_TTL: int = 3600
    CACHE_SCORES_TTL: int = 300


@lru_cache
def get_settings() -> Settings:
    """Get the cached settings instance."""
    return Settings(
        CACHE_PROFILES_TTL=_get_int('CACHE_PROFILES_TTL', 3600),
        CACHE_COMPETITIONS_TTL=_get_int('CACHE_COMPETITIONS_TTL', 3600),
        CACHE_SCORES_TTL=_get_int('CACHE_SCORES_TTL', 300),
    )
