"""
Results Service - Rankings, division standings and score statistics.

Pure functions over already-loaded scorecards and profiles. Loading (and
falling back when a store is unavailable) is DataService's job.
"""

from statistics import pstdev
from typing import Optional

from archers_edge.models.archer import Archer, Identity
from archers_edge.models.results import (
    ArcherPerformance,
    CompetitionResults,
    CompetitionStats,
    ResultEntry,
)
from archers_edge.models.scorecard import (
    ARROWS_PER_END,
    STATUS_IN_PROGRESS,
    STATUS_NOT_STARTED,
    STATUS_VERIFIED,
    TOTAL_ENDS,
    Scorecard,
    Totals,
)
from archers_edge.services.scoring import final_totals


UNKNOWN_DIVISION = "Unknown"

# Points per end used to estimate how far along a scorecard is
COMPLETED_END_POINTS = 30

MAX_ARROWS = TOTAL_ENDS * ARROWS_PER_END


def scorecard_totals(scorecard: Scorecard) -> Totals:
    """Stored totals if the record has them, otherwise computed from the ends."""
    if scorecard.totals is not None:
        return scorecard.totals
    return final_totals(scorecard)


def split_archer_name(archer_name: str) -> tuple[str, str]:
    """Split "First Last Name" into ("First", "Last Name")."""
    parts = (archer_name or "").split()
    if not parts:
        return "", ""
    return parts[0], " ".join(parts[1:])


def display_status(scorecard: Scorecard, total_score: int) -> str:
    """verified, in_progress (any points) or not_started."""
    if scorecard.status == STATUS_VERIFIED:
        return STATUS_VERIFIED
    if total_score > 0:
        return STATUS_IN_PROGRESS
    return STATUS_NOT_STARTED


def build_result_entry(scorecard: Scorecard, profiles_by_id: dict[str, Archer]) -> ResultEntry:
    """Enrich one scorecard with display name, school and progress fields."""
    totals = scorecard_totals(scorecard)

    profile = profiles_by_id.get(scorecard.archer_id) if scorecard.archer_id else None
    if profile is not None:
        first_name, last_name, school = profile.first_name, profile.last_name, profile.school
    else:
        first_name, last_name = split_archer_name(scorecard.archer_name)
        school = scorecard.school

    return ResultEntry(
        archer_id=scorecard.archer_id,
        archer_name=scorecard.archer_name,
        first_name=first_name,
        last_name=last_name,
        school=school,
        division=scorecard.division or UNKNOWN_DIVISION,
        gender=scorecard.gender,
        bale_number=scorecard.bale_number,
        target_assignment=scorecard.target_assignment,
        total_score=totals.total_score,
        total_tens=totals.total_tens,
        total_xs=totals.total_xs,
        status=display_status(scorecard, totals.total_score),
        # Estimate, not a count of finished ends
        completed_ends=totals.total_score // COMPLETED_END_POINTS,
        average=f"{totals.total_score / MAX_ARROWS:.1f}",
    )


def aggregate_results(scorecards: list[Scorecard], profiles: list[Archer]) -> CompetitionResults:
    """
    Rank a competition's scorecards overall and per division.

    Args:
        scorecards: All scorecards submitted for the competition
        profiles: Profile roster used to resolve names and schools

    Returns:
        CompetitionResults with rankings (all entries, best first) and
        divisions (division label -> entries, best first). Ties keep
        their input order.
    """
    profiles_by_id = {p.id: p for p in profiles}
    entries = [build_result_entry(sc, profiles_by_id) for sc in scorecards]

    divisions: dict[str, list[ResultEntry]] = {}
    for entry in entries:
        divisions.setdefault(entry.division, []).append(entry)
    for division in divisions:
        divisions[division].sort(key=lambda e: e.total_score, reverse=True)

    # Ranked on the scorecard totals directly
    order = sorted(
        range(len(scorecards)),
        key=lambda i: scorecard_totals(scorecards[i]).total_score,
        reverse=True,
    )
    rankings = [entries[i] for i in order]

    return CompetitionResults(rankings=rankings, divisions=divisions)


def summarize_scores(
    scorecards: list[Scorecard],
    competition_id: Optional[str] = None,
) -> CompetitionStats:
    """
    Competition-wide totals.

    Returns all-zero stats with has_scores=False when there are no scorecards.
    """
    if not scorecards:
        return CompetitionStats(competition_id=competition_id)

    scores = [scorecard_totals(sc).total_score for sc in scorecards]
    total = sum(scores)
    return CompetitionStats(
        competition_id=competition_id,
        total_archers=len(scores),
        total_score=total,
        average_score=round(total / len(scores), 2),
        max_score=max(scores),
        min_score=min(scores),
        has_scores=True,
    )


# =============================================================================
# SCORE HISTORY
# =============================================================================

def filter_scores_for_archer(scorecards: list[Scorecard], archer_id: str) -> list[Scorecard]:
    """Only the rounds shot by one archer."""
    return [sc for sc in scorecards if sc.archer_id == archer_id]


def find_my_profile(
    profiles: list[Archer],
    identity: Optional[Identity] = None,
    email: Optional[str] = None,
) -> Optional[Archer]:
    """
    Pick the acting user's own profile.

    Priority: the identity's profile id, a profile tagged isMe, a
    case-insensitive email match, then the first profile.
    """
    if not profiles:
        return None

    if identity is not None:
        for profile in profiles:
            if profile.id == identity.profile_id:
                return profile

    for profile in profiles:
        if profile.is_me:
            return profile

    if email:
        for profile in profiles:
            if profile.email and profile.email.lower() == email.lower():
                return profile

    return profiles[0]


def archer_performance(scorecards: list[Scorecard]) -> ArcherPerformance:
    """
    Statistics across an archer's rounds.

    averageScore is per arrow over all arrows shot; consistency is the
    population standard deviation of the round totals.
    """
    if not scorecards:
        return ArcherPerformance()

    all_totals = [scorecard_totals(sc) for sc in scorecards]
    round_scores = [t.total_score for t in all_totals]
    total_arrows = sum(t.total_arrows for t in all_totals)
    points = sum(round_scores)

    return ArcherPerformance(
        total_rounds=len(all_totals),
        average_score=f"{points / total_arrows:.1f}" if total_arrows else "0.0",
        best_score=max(round_scores),
        total_tens=sum(t.total_tens for t in all_totals),
        total_xs=sum(t.total_xs for t in all_totals),
        total_arrows=total_arrows,
        consistency=f"{pstdev(round_scores):.1f}",
    )
