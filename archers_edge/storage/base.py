"""
Abstract base class defining the repository interface.

The scoring core never touches storage itself; callers load records through
this interface and hand plain data to the core. All implementations store
camelCase documents keyed by "id" and upsert on save (last write wins).
"""

from abc import ABC, abstractmethod
from typing import Optional, List, Dict, Any

from ..types import (
    CompetitionDict,
    EventAssignmentDict,
    ProfileDict,
    ScorecardDict,
)


class RepositoryInterface(ABC):
    """
    Abstract interface for archery data storage.

    All methods must be implemented by concrete repository classes.
    """

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    @abstractmethod
    def initialize(self) -> None:
        """
        Prepare the store.

        Should create tables/collections if they don't exist.
        Should be idempotent (safe to call multiple times).
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Release connections and other resources."""
        pass

    @abstractmethod
    def health_check(self) -> bool:
        """
        Check if the store is reachable.

        Returns:
            True if accessible, False otherwise
        """
        pass

    # =========================================================================
    # PROFILES
    # =========================================================================

    @abstractmethod
    def get_profiles(self) -> List[ProfileDict]:
        """
        Get all profiles (archers and staff).

        Returns:
            List of profile documents, ordered by last name then first name
        """
        pass

    @abstractmethod
    def save_profile(self, profile: ProfileDict) -> str:
        """
        Insert or replace a profile.

        Args:
            profile: Profile document, must have 'id'

        Returns:
            The profile id
        """
        pass

    @abstractmethod
    def delete_profile(self, profile_id: str) -> bool:
        """
        Delete a profile.

        Returns:
            True if a profile was deleted, False if not found
        """
        pass

    # =========================================================================
    # COMPETITIONS
    # =========================================================================

    @abstractmethod
    def get_competitions(self) -> List[CompetitionDict]:
        """
        Get all competitions.

        Returns:
            List of competition documents, newest date first
        """
        pass

    @abstractmethod
    def get_competition(self, competition_id: str) -> Optional[CompetitionDict]:
        """Get one competition, or None if not found."""
        pass

    @abstractmethod
    def save_competition(self, competition: CompetitionDict) -> str:
        """
        Insert or replace a competition.

        Returns:
            The competition id
        """
        pass

    # =========================================================================
    # SCORECARDS
    # =========================================================================

    @abstractmethod
    def get_scores(
        self,
        competition_id: Optional[str] = None,
        archer_id: Optional[str] = None
    ) -> List[ScorecardDict]:
        """
        Get scorecards with optional filtering.

        Filters are combined with AND logic.

        Args:
            competition_id: Exact match on competitionId
            archer_id: Exact match on archerId

        Returns:
            List of scorecard documents, in the order they were first saved
        """
        pass

    @abstractmethod
    def get_score(self, score_id: str) -> Optional[ScorecardDict]:
        """Get one scorecard by id, or None if not found."""
        pass

    @abstractmethod
    def save_score(self, scorecard: ScorecardDict) -> str:
        """
        Insert or replace a scorecard.

        Args:
            scorecard: Scorecard document; an id is generated if missing

        Returns:
            The scorecard id
        """
        pass

    # =========================================================================
    # EVENT ASSIGNMENTS
    # =========================================================================

    @abstractmethod
    def get_event_assignments(self, competition_id: Optional[str] = None) -> List[EventAssignmentDict]:
        """Get event assignments, optionally for one competition."""
        pass

    @abstractmethod
    def get_event_assignment(self, assignment_id: str) -> Optional[EventAssignmentDict]:
        """Get one event assignment, or None if not found."""
        pass

    @abstractmethod
    def save_event_assignment(self, assignment: EventAssignmentDict) -> str:
        """
        Insert or replace an event assignment.

        Returns:
            The assignment id (generated if missing)
        """
        pass

    @abstractmethod
    def update_event_assignment(self, assignment_id: str, updates: Dict[str, Any]) -> bool:
        """
        Merge fields into an existing assignment.

        Returns:
            True if updated, False if the assignment does not exist
        """
        pass

    @abstractmethod
    def delete_event_assignment(self, assignment_id: str) -> bool:
        """Delete an assignment. Returns False if not found."""
        pass

    # =========================================================================
    # MAINTENANCE
    # =========================================================================

    @abstractmethod
    def get_stats(self) -> Dict[str, int]:
        """
        Count documents per collection.

        Returns:
            Dictionary with 'profiles', 'competitions', 'scores', 'assignments'
        """
        pass

    @abstractmethod
    def clear_all(self) -> None:
        """
        Delete all documents.

        Used for testing or a complete resync.
        """
        pass
