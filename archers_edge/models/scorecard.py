"""Scorecard data model for a 12-end, 3-arrow OAS round."""

from typing import Any, Optional
from pydantic import BaseModel, Field, field_validator

TOTAL_ENDS = 12
ARROWS_PER_END = 3
ROUND_TYPE = "OAS Qualification Round"

STATUS_NOT_STARTED = "not_started"
STATUS_IN_PROGRESS = "in_progress"
STATUS_COMPLETE = "complete"
STATUS_VERIFIED = "verified"

# Empty means not shot yet
ARROW_TOKENS = frozenset(["", "X", "M"] + [str(n) for n in range(0, 11)])


def end_key(end_number: int) -> str:
    """Document key for an end, e.g. "end7"."""
    return f"end{end_number}"


class End(BaseModel):
    """Three arrow tokens shot as one end, plus annotations stored at verification."""

    end_number: int = Field(..., alias="endNumber", ge=1, le=TOTAL_ENDS)
    arrow1: str = ""
    arrow2: str = ""
    arrow3: str = ""

    # These are added when the scorecard is verified
    tens: Optional[int] = None
    xs: Optional[int] = None
    end_total: Optional[int] = Field(default=None, alias="endTotal")
    running_total: Optional[int] = Field(default=None, alias="runningTotal")
    average: Optional[str] = None

    class Config:
        """Pydantic configuration."""

        populate_by_name = True

    @field_validator("arrow1", "arrow2", "arrow3", mode="before")
    @classmethod
    def _normalize_token(cls, value: Any) -> str:
        token = "" if value is None else str(value).strip().upper()
        if token not in ARROW_TOKENS:
            raise ValueError(f"Invalid score: {value!r}. Use X, M or 0-10.")
        return token

    @property
    def arrows(self) -> list[str]:
        return [self.arrow1, self.arrow2, self.arrow3]

    def is_complete(self) -> bool:
        """True when all three arrow slots hold a token."""
        return all(token != "" for token in self.arrows)


class Totals(BaseModel):
    """Round totals derived from the ends."""

    total_score: int = Field(default=0, alias="totalScore")
    total_tens: int = Field(default=0, alias="totalTens")
    total_xs: int = Field(default=0, alias="totalXs")
    total_arrows: int = Field(default=0, alias="totalArrows")
    average: str = "0.0"

    class Config:
        """Pydantic configuration."""

        populate_by_name = True


class Scorecard(BaseModel):
    """One archer's record for one round."""

    id: Optional[str] = None
    archer_id: Optional[str] = Field(default=None, alias="archerId")
    archer_name: str = Field(default="", alias="archerName")
    school: Optional[str] = None
    bale_number: Optional[int] = Field(default=None, alias="baleNumber")
    target_assignment: Optional[str] = Field(default=None, alias="targetAssignment")
    division: Optional[str] = None
    gender: Optional[str] = None

    # None for a practice round
    competition_id: Optional[str] = Field(default=None, alias="competitionId")
    competition_name: Optional[str] = Field(default=None, alias="competitionName")
    is_practice_round: bool = Field(default=False, alias="isPracticeRound")

    round_type: str = Field(default=ROUND_TYPE, alias="roundType")
    total_ends: int = Field(default=TOTAL_ENDS, alias="totalEnds")
    arrows_per_end: int = Field(default=ARROWS_PER_END, alias="arrowsPerEnd")
    ends: dict[str, End] = {}
    totals: Optional[Totals] = None

    status: str = STATUS_IN_PROGRESS  # in_progress, complete, verified
    verified_at: Optional[str] = Field(default=None, alias="verifiedAt")
    verified_by: Optional[str] = Field(default=None, alias="verifiedBy")
    paper_confirmed: bool = Field(default=False, alias="paperConfirmed")

    class Config:
        """Pydantic configuration."""

        populate_by_name = True

    def get_end(self, end_number: int) -> Optional[End]:
        """Get an end by number, or None if nothing was recorded for it."""
        return self.ends.get(end_key(end_number))

    def is_verified(self) -> bool:
        return self.status == STATUS_VERIFIED
