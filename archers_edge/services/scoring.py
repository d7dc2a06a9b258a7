"""
Scoring Service - Arrow values, end totals and round totals.

Covers the life of a scorecard: created with 12 empty ends, filled arrow by
arrow, complete once all 36 slots hold a token, and verified (frozen) after
that. All functions are pure apart from record_arrow, which edits the
scorecard it is given.
"""

import logging
from datetime import datetime, timezone
from typing import Iterable, Optional, Union

from archers_edge.exceptions import (
    AlreadyVerifiedError,
    IncompleteScorecardError,
    InvalidScoreTokenError,
)
from archers_edge.models.archer import Archer, Identity
from archers_edge.models.competition import Competition, EventAssignment
from archers_edge.models.scorecard import (
    ARROW_TOKENS,
    ARROWS_PER_END,
    STATUS_COMPLETE,
    STATUS_IN_PROGRESS,
    STATUS_VERIFIED,
    TOTAL_ENDS,
    End,
    Scorecard,
    Totals,
    end_key,
)

logger = logging.getLogger(__name__)

PRACTICE_ROUND_NAME = "Practice Round"
ROUND_TARGETS = ["A", "B", "C", "D", "E", "F", "G", "H"]

_NUMERIC_TOKENS = {str(n): n for n in range(0, 11)}


# =============================================================================
# ARROW TOKENS
# =============================================================================

def normalize_token(token: Union[str, int, None]) -> str:
    """Upper-case and trim a raw token; None becomes ""."""
    if token is None:
        return ""
    return str(token).strip().upper()


def is_valid_score_input(token: Union[str, int, None]) -> bool:
    """
    Check a token against the closed set of arrow values.

    Empty (not yet shot), X, M and the integers 0-10 are valid.
    """
    return normalize_token(token) in ARROW_TOKENS


def parse_score_value(token: Union[str, int, None], strict: bool = False) -> int:
    """
    Convert one arrow token to its point value.

    Args:
        token: "X", "10".."0", "M", "" or None
        strict: Raise instead of returning 0 for unknown tokens

    Returns:
        10 for X and 10, the number for 9..1, 0 for M, 0 and empty

    Raises:
        InvalidScoreTokenError: Only when strict and the token is unknown
    """
    if isinstance(token, int) and not isinstance(token, bool):
        if 0 <= token <= 10:
            return token
    else:
        normalized = normalize_token(token)
        if normalized == "X":
            return 10
        if normalized in ("M", ""):
            return 0
        if normalized in _NUMERIC_TOKENS:
            return _NUMERIC_TOKENS[normalized]

    if strict:
        raise InvalidScoreTokenError(f"Invalid score: {token!r}. Use X, M or 0-10.")
    return 0


def format_score(value: int) -> str:
    """Render a point value the way it is written on a paper card."""
    if value == 10:
        return "X"
    if value == 0:
        return "M"
    return str(value)


def calculate_total_score(tokens: Iterable[Union[str, int, None]]) -> int:
    """Sum the point values of a flat list of tokens."""
    return sum(parse_score_value(t) for t in tokens)


def calculate_average_score(tokens: list) -> float:
    """Mean point value of a flat list of tokens (0 for an empty list)."""
    if not tokens:
        return 0
    return calculate_total_score(tokens) / len(tokens)


# =============================================================================
# END AND RUNNING TOTALS
# =============================================================================

def end_total(end: Optional[End]) -> int:
    """Sum of the end's arrows; unset arrows and missing ends count 0."""
    if end is None:
        return 0
    return calculate_total_score(end.arrows)


def end_tens_and_xs(end: Optional[End]) -> tuple[int, int]:
    """
    Count tens and Xs in an end.

    An X counts toward both totals.
    """
    tens = 0
    xs = 0
    if end is None:
        return tens, xs
    for token in end.arrows:
        normalized = normalize_token(token)
        if normalized == "X":
            tens += 1
            xs += 1
        elif normalized == "10":
            tens += 1
    return tens, xs


def end_average(end: Optional[End]) -> str:
    """Live per-end average over the arrows entered so far."""
    if end is None:
        return "0.0"
    entered = [t for t in end.arrows if t != ""]
    if not entered:
        return "0.0"
    return f"{calculate_average_score(entered):.1f}"


def running_total(scorecard: Scorecard, through_end_number: int) -> int:
    """Sum of end totals for ends 1..through_end_number inclusive."""
    return sum(
        end_total(scorecard.get_end(n))
        for n in range(1, through_end_number + 1)
    )


def running_average(scorecard: Scorecard, through_end_number: int) -> str:
    """
    Average per arrow slot through an end, one decimal.

    The divisor is the slot capacity (3 per end), not the arrows actually
    entered, so a partly shot end still divides by 3.
    """
    total = running_total(scorecard, through_end_number)
    if total > 0:
        return f"{total / (through_end_number * ARROWS_PER_END):.1f}"
    return "0.0"


def final_totals(scorecard: Scorecard) -> Totals:
    """
    Compute round totals over all 12 ends.

    Unlike running_average, the average here divides by the arrows
    actually shot.
    """
    total_score = 0
    total_tens = 0
    total_xs = 0
    total_arrows = 0

    for n in range(1, TOTAL_ENDS + 1):
        end = scorecard.get_end(n)
        if end is None:
            continue
        for token in end.arrows:
            if token == "":
                continue
            total_arrows += 1
            total_score += parse_score_value(token)
        tens, xs = end_tens_and_xs(end)
        total_tens += tens
        total_xs += xs

    average = f"{total_score / total_arrows:.1f}" if total_arrows > 0 else "0.0"
    return Totals(
        total_score=total_score,
        total_tens=total_tens,
        total_xs=total_xs,
        total_arrows=total_arrows,
        average=average,
    )


# =============================================================================
# SCORECARD LIFECYCLE
# =============================================================================

def is_complete(scorecard: Scorecard) -> bool:
    """A scorecard is complete when every end has all three arrows."""
    for n in range(1, TOTAL_ENDS + 1):
        end = scorecard.get_end(n)
        if end is None or not end.is_complete():
            return False
    return True


def scorecard_state(scorecard: Scorecard) -> str:
    """Get in_progress, complete or verified."""
    if scorecard.is_verified():
        return STATUS_VERIFIED
    if is_complete(scorecard):
        return STATUS_COMPLETE
    return STATUS_IN_PROGRESS


def new_scorecard(
    archer: Archer,
    bale_number: Optional[int] = None,
    target_assignment: Optional[str] = None,
    competition: Optional[Competition] = None,
) -> Scorecard:
    """Create an in-progress scorecard with 12 empty ends."""
    return Scorecard(
        archer_id=archer.id,
        archer_name=archer.get_full_name(),
        school=archer.school,
        bale_number=bale_number,
        target_assignment=target_assignment,
        division=archer.get_classification() or "V",
        gender=archer.gender or "M",
        competition_id=competition.id if competition else None,
        competition_name=competition.name if competition else PRACTICE_ROUND_NAME,
        is_practice_round=competition is None,
        ends={end_key(n): End(end_number=n) for n in range(1, TOTAL_ENDS + 1)},
    )


def start_bale_round(
    archers: list[Archer],
    bale_number: int,
    competition: Optional[Competition] = None,
) -> list[Scorecard]:
    """
    Create one scorecard per archer shooting on a bale.

    Archers that already carry a target letter keep it; the rest are
    lettered A, B, C... in the order given.
    """
    scorecards = []
    for index, archer in enumerate(archers):
        target = getattr(archer, "target_assignment", None) or ROUND_TARGETS[index % len(ROUND_TARGETS)]
        scorecards.append(new_scorecard(archer, bale_number, target, competition))
    return scorecards


def assignment_to_scorecards(
    assignment: EventAssignment,
    competition: Optional[Competition] = None,
) -> list[Scorecard]:
    """Expand every bale of an assignment into fresh scorecards."""
    scorecards = []
    for bale in assignment.bales:
        scorecards.extend(start_bale_round(bale.archers, bale.bale_number, competition))
    return scorecards


def record_arrow(scorecard: Scorecard, end_number: int, arrow_index: int, token: Union[str, int, None]) -> End:
    """
    Store one arrow token on a scorecard in place.

    Args:
        scorecard: The scorecard being scored
        end_number: 1..12
        arrow_index: 1..3
        token: Raw input, validated and normalized (e.g. "x" -> "X")

    Returns:
        The updated End

    Raises:
        AlreadyVerifiedError: Scorecard is frozen
        InvalidScoreTokenError: Token is not X, M, 0-10 or empty
        ValueError: End or arrow index out of range
    """
    if scorecard.is_verified():
        raise AlreadyVerifiedError("This scorecard has been verified and cannot be changed.")
    if not 1 <= end_number <= TOTAL_ENDS:
        raise ValueError(f"End number must be 1-{TOTAL_ENDS}, got {end_number}")
    if not 1 <= arrow_index <= ARROWS_PER_END:
        raise ValueError(f"Arrow index must be 1-{ARROWS_PER_END}, got {arrow_index}")
    if not is_valid_score_input(token):
        raise InvalidScoreTokenError(f"Invalid score: {token!r}. Use X, M or 0-10.")

    key = end_key(end_number)
    end = scorecard.ends.get(key)
    if end is None:
        end = End(end_number=end_number)
        scorecard.ends[key] = end
    setattr(end, f"arrow{arrow_index}", normalize_token(token))

    scorecard.status = STATUS_COMPLETE if is_complete(scorecard) else STATUS_IN_PROGRESS
    return end


def verify_scorecard(
    scorecard: Scorecard,
    identity: Identity,
    verified_at: Optional[datetime] = None,
    paper_confirmed: bool = False,
) -> Scorecard:
    """
    Freeze a complete scorecard.

    Returns a new verified Scorecard with each end annotated (tens, xs,
    endTotal, runningTotal, average) and totals stored. The input is not
    modified.

    Raises:
        AlreadyVerifiedError: Scorecard was verified before
        IncompleteScorecardError: Not all 36 arrows are filled
        InvalidScoreTokenError: An end holds a token outside X, M and 0-10
    """
    if scorecard.is_verified():
        raise AlreadyVerifiedError("This scorecard has already been verified.")
    if not is_complete(scorecard):
        raise IncompleteScorecardError(
            f"Scorecard for {scorecard.archer_name or 'archer'} is incomplete. "
            f"All {TOTAL_ENDS} ends need {ARROWS_PER_END} arrows before it can be verified."
        )

    # Ends edited in place skip model validation
    for n in range(1, TOTAL_ENDS + 1):
        for token in scorecard.get_end(n).arrows:
            parse_score_value(token, strict=True)

    stamp = verified_at or datetime.now(timezone.utc)
    annotated = {}
    for n in range(1, TOTAL_ENDS + 1):
        end = scorecard.get_end(n)
        tens, xs = end_tens_and_xs(end)
        annotated[end_key(n)] = end.model_copy(update={
            "tens": tens,
            "xs": xs,
            "end_total": end_total(end),
            "running_total": running_total(scorecard, n),
            "average": running_average(scorecard, n),
        })

    verified = scorecard.model_copy(update={
        "ends": annotated,
        "totals": final_totals(scorecard),
        "status": STATUS_VERIFIED,
        "verified_at": stamp.isoformat(),
        "verified_by": identity.profile_id,
        "paper_confirmed": paper_confirmed,
    })
    logger.info(
        f"Verified scorecard for {verified.archer_name} "
        f"({verified.totals.total_score} points) by {identity.profile_id}"
    )
    return verified


def scorecard_to_record(scorecard: Scorecard) -> dict:
    """Serialize to the camelCase document stored by the repository."""
    return scorecard.model_dump(by_alias=True)
