"""Derived competition results and statistics models."""

from typing import Optional
from pydantic import BaseModel, Field


class ResultEntry(BaseModel):
    """A scorecard enriched for results display."""

    archer_id: Optional[str] = Field(default=None, alias="archerId")
    archer_name: str = Field(default="", alias="archerName")
    first_name: str = Field(default="", alias="firstName")
    last_name: str = Field(default="", alias="lastName")
    school: Optional[str] = None
    division: str = "Unknown"
    gender: Optional[str] = None
    bale_number: Optional[int] = Field(default=None, alias="baleNumber")
    target_assignment: Optional[str] = Field(default=None, alias="targetAssignment")
    total_score: int = Field(default=0, alias="totalScore")
    total_tens: int = Field(default=0, alias="totalTens")
    total_xs: int = Field(default=0, alias="totalXs")
    status: str = "not_started"  # not_started, in_progress, verified
    completed_ends: int = Field(default=0, alias="completedEnds")
    average: str = "0.0"

    class Config:
        """Pydantic configuration."""

        populate_by_name = True


class CompetitionResults(BaseModel):
    """Overall rankings and per-division standings for one competition."""

    rankings: list[ResultEntry] = []
    divisions: dict[str, list[ResultEntry]] = {}


class CompetitionStats(BaseModel):
    """Competition-wide score summary."""

    competition_id: Optional[str] = Field(default=None, alias="competitionId")
    total_archers: int = Field(default=0, alias="totalArchers")
    total_score: int = Field(default=0, alias="totalScore")
    average_score: float = Field(default=0, alias="averageScore")
    max_score: int = Field(default=0, alias="maxScore")
    min_score: int = Field(default=0, alias="minScore")
    has_scores: bool = Field(default=False, alias="hasScores")

    class Config:
        """Pydantic configuration."""

        populate_by_name = True


class ArcherPerformance(BaseModel):
    """Statistics for one archer across a set of rounds."""

    total_rounds: int = Field(default=0, alias="totalRounds")
    average_score: str = Field(default="0.0", alias="averageScore")
    best_score: int = Field(default=0, alias="bestScore")
    total_tens: int = Field(default=0, alias="totalTens")
    total_xs: int = Field(default=0, alias="totalXs")
    total_arrows: int = Field(default=0, alias="totalArrows")
    consistency: str = "0.0"

    class Config:
        """Pydantic configuration."""

        populate_by_name = True
