"""
Data Service - Loads records from the repository and runs the scoring core.

The core functions in scoring, bales and results only see validated models;
this layer owns every read and write, the snapshot fallback when the store
fails, and the per-competition isolation of statistics.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any

from pydantic import ValidationError

from ..exceptions import (
    AlreadyVerifiedError,
    AssignmentNotFoundError,
    EmptySelectionError,
    InvalidAssignmentTypeError,
)
from ..models import (
    Archer,
    ArcherPerformance,
    Competition,
    CompetitionResults,
    CompetitionStats,
    EventAssignment,
    Identity,
    Scorecard,
)
from ..models.scorecard import STATUS_VERIFIED
from ..storage import get_repository, RepositoryInterface
from .bales import generate_bales, validate_bale_capacity, ASSIGNMENT_TYPES
from .cache import CacheService
from .results import (
    aggregate_results,
    archer_performance,
    filter_scores_for_archer,
    summarize_scores,
)
from .scoring import assignment_to_scorecards, scorecard_to_record, verify_scorecard

logger = logging.getLogger(__name__)

ARCHER_ROLE = 'Archer'


class DataService:
    """
    Service layer between the repository and the scoring core.
    Uses the repository interface for storage and a snapshot cache for fallback.
    """

    def __init__(
        self,
        repository: Optional[RepositoryInterface] = None,
        cache: Optional[CacheService] = None
    ):
        # Get repository from factory (respects DB_TYPE env var)
        self.repo: RepositoryInterface = repository or get_repository()
        self.cache = cache or CacheService()

    # =========================================================================
    # BOUNDARY PARSING
    # =========================================================================

    @staticmethod
    def _parse(model, docs: List[Dict[str, Any]], label: str) -> list:
        """Validate documents, skipping (and logging) unusable ones."""
        parsed = []
        for doc in docs:
            try:
                parsed.append(model.model_validate(doc))
            except ValidationError as e:
                logger.warning(f"Skipping malformed {label} {doc.get('id', '?')}: {e.error_count()} errors")
        return parsed

    # =========================================================================
    # PROFILES
    # =========================================================================

    def load_profiles(self) -> List[Archer]:
        """
        Load all profiles.

        Refreshes the snapshot on success; when the repository raises,
        the last snapshot (or an empty roster) is used instead.
        """
        try:
            docs = self.repo.get_profiles()
        except Exception as e:
            logger.warning(f"Profile lookup failed, using cached snapshot: {e}")
            docs = self.cache.get('all', 'profiles') or []
        else:
            self.cache.set('all', docs, 'profiles')
        return self._parse(Archer, docs, 'profile')

    def load_archers(self, school: Optional[str] = None) -> List[Archer]:
        """Profiles with the Archer role, optionally for one school."""
        archers = [p for p in self.load_profiles() if p.role == ARCHER_ROLE]
        if school:
            archers = [a for a in archers if a.school == school]
        return archers

    def get_schools(self) -> List[str]:
        """Sorted unique schools of all archers."""
        return sorted({a.school for a in self.load_archers() if a.school})

    def save_profile(self, archer: Archer) -> str:
        profile_id = self.repo.save_profile(archer.model_dump(by_alias=True))
        self.cache.delete('all', 'profiles')
        return profile_id

    # =========================================================================
    # COMPETITIONS
    # =========================================================================

    def load_competitions(self) -> List[Competition]:
        """All competitions, falling back to the last snapshot when the store fails."""
        try:
            docs = self.repo.get_competitions()
        except Exception as e:
            logger.warning(f"Competition lookup failed, using cached snapshot: {e}")
            docs = self.cache.get('all', 'competitions') or []
        else:
            self.cache.set('all', docs, 'competitions')
        return self._parse(Competition, docs, 'competition')

    def get_competition(self, competition_id: str) -> Optional[Competition]:
        doc = self.repo.get_competition(competition_id)
        return Competition.model_validate(doc) if doc else None

    def save_competition(self, competition: Competition) -> str:
        competition_id = self.repo.save_competition(competition.model_dump(by_alias=True))
        self.cache.delete('all', 'competitions')
        return competition_id

    # =========================================================================
    # SCORECARDS
    # =========================================================================

    def load_scores(
        self,
        competition_id: Optional[str] = None,
        archer_id: Optional[str] = None
    ) -> List[Scorecard]:
        docs = self.repo.get_scores(competition_id=competition_id, archer_id=archer_id)
        return self._parse(Scorecard, docs, 'scorecard')

    def save_scorecard(self, scorecard: Scorecard) -> str:
        """
        Persist a scorecard as-is (used for in-progress autosave).

        Raises:
            AlreadyVerifiedError: A verified scorecard is stored under the same id
        """
        if scorecard.id:
            stored = self.repo.get_score(scorecard.id)
            if stored and stored.get('status') == STATUS_VERIFIED:
                raise AlreadyVerifiedError(
                    f"Scorecard {scorecard.id} has been verified and cannot be replaced."
                )
        score_id = self.repo.save_score(scorecard_to_record(scorecard))
        if scorecard.competition_id:
            self.cache.delete(scorecard.competition_id, 'scores')
        return score_id

    def submit_scorecard(
        self,
        scorecard: Scorecard,
        identity: Identity,
        paper_confirmed: bool = False
    ) -> Scorecard:
        """
        Verify a complete scorecard and store it.

        Raises:
            IncompleteScorecardError: Not all arrows are in
            AlreadyVerifiedError: Scorecard was already verified, or a verified card
                is stored under its id
        """
        verified = verify_scorecard(scorecard, identity, paper_confirmed=paper_confirmed)
        score_id = self.save_scorecard(verified)
        return verified.model_copy(update={'id': score_id})

    def get_score_history(self, archer_id: Optional[str] = None) -> List[Scorecard]:
        """Verified and in-progress rounds, optionally only one archer's."""
        scorecards = self.load_scores()
        if archer_id:
            scorecards = filter_scores_for_archer(scorecards, archer_id)
        return scorecards

    def get_archer_stats(self, archer_id: str) -> Dict[str, Any]:
        """
        Profile plus performance statistics for one archer.

        Returns:
            Dictionary with 'profile' (Archer or None), 'performance'
            (ArcherPerformance) and 'recentScores' (newest first, up to 10)
        """
        profile = next((p for p in self.load_profiles() if p.id == archer_id), None)
        scorecards = self.load_scores(archer_id=archer_id)
        performance: ArcherPerformance = archer_performance(scorecards)
        recent = sorted(scorecards, key=lambda sc: sc.verified_at or '', reverse=True)[:10]
        return {
            'profile': profile,
            'performance': performance,
            'recentScores': recent,
        }

    # =========================================================================
    # EVENT ASSIGNMENTS
    # =========================================================================

    def create_event_assignment(
        self,
        competition_id: str,
        archer_ids: List[str],
        assignment_type: str = 'school',
        number_of_bales: int = 8,
        max_archers_per_bale: int = 4,
        selected_school: Optional[str] = None,
        identity: Optional[Identity] = None
    ) -> EventAssignment:
        """
        Validate and store a draft assignment.

        Raises:
            EmptySelectionError: No competition or no archers
            InvalidAssignmentTypeError: Unknown assignment type
            CapacityExceededError: More archers than the bales hold
        """
        if not competition_id:
            raise EmptySelectionError("Please select a competition")
        if not archer_ids:
            raise EmptySelectionError("Please select at least one archer")
        if assignment_type not in ASSIGNMENT_TYPES:
            raise InvalidAssignmentTypeError(f"Unknown assignment type: {assignment_type}")
        validate_bale_capacity(len(archer_ids), number_of_bales, max_archers_per_bale)

        assignment = EventAssignment(
            competition_id=competition_id,
            assignment_type=assignment_type,
            selected_school=selected_school,
            archer_ids=list(archer_ids),
            number_of_bales=number_of_bales,
            max_archers_per_bale=max_archers_per_bale,
            status='draft',
            created_by=identity.profile_id if identity else None,
            created_at=datetime.now(timezone.utc).isoformat(),
        )
        assignment_id = self.repo.save_event_assignment(assignment.model_dump(by_alias=True))
        logger.info(f"Created {assignment_type} assignment {assignment_id} with {len(archer_ids)} archers")
        return assignment.model_copy(update={'id': assignment_id})

    def get_event_assignments(self, competition_id: Optional[str] = None) -> List[EventAssignment]:
        docs = self.repo.get_event_assignments(competition_id=competition_id)
        return self._parse(EventAssignment, docs, 'assignment')

    def get_event_assignment(self, assignment_id: str) -> EventAssignment:
        doc = self.repo.get_event_assignment(assignment_id)
        if doc is None:
            raise AssignmentNotFoundError(f"Assignment not found: {assignment_id}")
        return EventAssignment.model_validate(doc)

    def auto_assign_bales(self, assignment_id: str) -> EventAssignment:
        """
        Generate bales for a stored assignment and mark it assigned.

        Archer ids missing from the profile roster are skipped.
        """
        assignment = self.get_event_assignment(assignment_id)
        selected = set(assignment.archer_ids)
        archers = [p for p in self.load_profiles() if p.id in selected]
        if len(archers) < len(selected):
            logger.warning(
                f"Assignment {assignment_id}: {len(selected) - len(archers)} archers not found in profiles"
            )

        bales = generate_bales(
            archers,
            assignment.assignment_type,
            assignment.number_of_bales,
            assignment.max_archers_per_bale,
        )
        updated = assignment.model_copy(update={'bales': bales, 'status': 'assigned'})
        self.repo.update_event_assignment(assignment_id, {
            'bales': [b.model_dump(by_alias=True) for b in bales],
            'status': 'assigned',
        })
        return updated

    def assignment_scorecards(self, assignment_id: str) -> List[Scorecard]:
        """Fresh scorecards for every archer placed by an assignment."""
        assignment = self.get_event_assignment(assignment_id)
        competition = self.get_competition(assignment.competition_id)
        return assignment_to_scorecards(assignment, competition)

    # =========================================================================
    # RESULTS
    # =========================================================================

    def _load_competition_scores(self, competition_id: str) -> List[Scorecard]:
        """Scores for one competition, falling back to the last snapshot."""
        try:
            docs = self.repo.get_scores(competition_id=competition_id)
        except Exception as e:
            logger.warning(f"Score load failed for {competition_id}, using cached snapshot: {e}")
            docs = self.cache.get(competition_id, 'scores') or []
        else:
            self.cache.set(competition_id, docs, 'scores')
        return self._parse(Scorecard, docs, 'scorecard')

    def get_competition_results(self, competition_id: str) -> CompetitionResults:
        """Rankings and division standings, recomputed on every call."""
        scorecards = self._load_competition_scores(competition_id)
        return aggregate_results(scorecards, self.load_profiles())

    def get_competition_stats(self, competition_id: str) -> CompetitionStats:
        """
        Summary statistics for one competition.

        A failed score load yields the all-zero, hasScores=False shape.
        """
        try:
            docs = self.repo.get_scores(competition_id=competition_id)
        except Exception as e:
            logger.warning(f"Error loading scores for competition {competition_id}: {e}")
            return CompetitionStats(competition_id=competition_id)
        return summarize_scores(self._parse(Scorecard, docs, 'scorecard'), competition_id)

    def get_all_competition_stats(self) -> Dict[str, CompetitionStats]:
        """Stats for every competition; one failure does not affect the others."""
        return {
            competition.id: self.get_competition_stats(competition.id)
            for competition in self.load_competitions()
        }

    # =========================================================================
    # DATA SYNC
    # =========================================================================

    def sync_to(self, target: RepositoryInterface) -> Dict[str, int]:
        """
        Copy every document into another repository.

        Existing documents in the target are overwritten (last write wins).

        Returns:
            Number of documents copied per collection
        """
        counts = {'profiles': 0, 'competitions': 0, 'assignments': 0, 'scores': 0}
        for doc in self.repo.get_profiles():
            target.save_profile(doc)
            counts['profiles'] += 1
        for doc in self.repo.get_competitions():
            target.save_competition(doc)
            counts['competitions'] += 1
        for doc in self.repo.get_event_assignments():
            target.save_event_assignment(doc)
            counts['assignments'] += 1
        for doc in self.repo.get_scores():
            target.save_score(doc)
            counts['scores'] += 1
        logger.info(f"Synced {sum(counts.values())} documents: {counts}")
        return counts

    def get_storage_info(self) -> Dict[str, Any]:
        """Repository health, document counts and cache sizes."""
        return {
            'healthy': self.repo.health_check(),
            'stats': self.repo.get_stats(),
            'cache': self.cache.stats(),
        }
