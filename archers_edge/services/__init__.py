"""Services for the Archer's Edge application."""

from archers_edge.services.cache import CacheService
from archers_edge.services.data_service import DataService

__all__ = ["CacheService", "DataService"]
