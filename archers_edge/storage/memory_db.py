"""
In-memory document store.

Keeps every collection in a dict for the life of the process. Used by the
test-suite and as the local store for offline sessions that are synced to
the SQLite store later.
"""

import copy
import threading
import uuid
from typing import Optional, List, Dict, Any

from .base import RepositoryInterface


class MemoryRepository(RepositoryInterface):
    """Thread-safe dict-backed implementation of the RepositoryInterface."""

    def __init__(self) -> None:
        self._profiles: Dict[str, Dict[str, Any]] = {}
        self._competitions: Dict[str, Dict[str, Any]] = {}
        self._scores: Dict[str, Dict[str, Any]] = {}
        self._assignments: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.RLock()

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def initialize(self) -> None:
        pass

    def close(self) -> None:
        pass

    def health_check(self) -> bool:
        return True

    def _upsert(self, collection: Dict[str, Dict[str, Any]], doc: Dict[str, Any]) -> str:
        doc_id = doc.get('id') or uuid.uuid4().hex
        with self._lock:
            # dict keeps insertion order, so an update stays in place
            collection[doc_id] = copy.deepcopy({**doc, 'id': doc_id})
        return doc_id

    def _values(self, collection: Dict[str, Dict[str, Any]]) -> List[Dict[str, Any]]:
        with self._lock:
            return [copy.deepcopy(doc) for doc in collection.values()]

    # =========================================================================
    # PROFILES
    # =========================================================================

    def get_profiles(self) -> List[Dict[str, Any]]:
        profiles = self._values(self._profiles)
        profiles.sort(key=lambda p: (
            (p.get('lastName') or '').lower(),
            (p.get('firstName') or '').lower(),
        ))
        return profiles

    def save_profile(self, profile: Dict[str, Any]) -> str:
        return self._upsert(self._profiles, profile)

    def delete_profile(self, profile_id: str) -> bool:
        with self._lock:
            return self._profiles.pop(profile_id, None) is not None

    # =========================================================================
    # COMPETITIONS
    # =========================================================================

    def get_competitions(self) -> List[Dict[str, Any]]:
        competitions = self._values(self._competitions)
        competitions.sort(key=lambda c: c.get('name') or '')
        competitions.sort(key=lambda c: c.get('date') or '', reverse=True)
        return competitions

    def get_competition(self, competition_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            doc = self._competitions.get(competition_id)
            return copy.deepcopy(doc) if doc else None

    def save_competition(self, competition: Dict[str, Any]) -> str:
        return self._upsert(self._competitions, competition)

    # =========================================================================
    # SCORECARDS
    # =========================================================================

    def get_scores(
        self,
        competition_id: Optional[str] = None,
        archer_id: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        scores = self._values(self._scores)
        if competition_id:
            scores = [s for s in scores if s.get('competitionId') == competition_id]
        if archer_id:
            scores = [s for s in scores if s.get('archerId') == archer_id]
        return scores

    def get_score(self, score_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            doc = self._scores.get(score_id)
            return copy.deepcopy(doc) if doc else None

    def save_score(self, scorecard: Dict[str, Any]) -> str:
        return self._upsert(self._scores, scorecard)

    # =========================================================================
    # EVENT ASSIGNMENTS
    # =========================================================================

    def get_event_assignments(self, competition_id: Optional[str] = None) -> List[Dict[str, Any]]:
        assignments = self._values(self._assignments)
        if competition_id:
            assignments = [a for a in assignments if a.get('competitionId') == competition_id]
        return assignments

    def get_event_assignment(self, assignment_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            doc = self._assignments.get(assignment_id)
            return copy.deepcopy(doc) if doc else None

    def save_event_assignment(self, assignment: Dict[str, Any]) -> str:
        return self._upsert(self._assignments, assignment)

    def update_event_assignment(self, assignment_id: str, updates: Dict[str, Any]) -> bool:
        with self._lock:
            existing = self._assignments.get(assignment_id)
            if existing is None:
                return False
            self._upsert(self._assignments, {**existing, **updates, 'id': assignment_id})
            return True

    def delete_event_assignment(self, assignment_id: str) -> bool:
        with self._lock:
            return self._assignments.pop(assignment_id, None) is not None

    # =========================================================================
    # MAINTENANCE
    # =========================================================================

    def get_stats(self) -> Dict[str, int]:
        with self._lock:
            return {
                'profiles': len(self._profiles),
                'competitions': len(self._competitions),
                'scores': len(self._scores),
                'assignments': len(self._assignments),
            }

    def clear_all(self) -> None:
        with self._lock:
            self._profiles.clear()
            self._competitions.clear()
            self._scores.clear()
            self._assignments.clear()
