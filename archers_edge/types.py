"""
Type definitions for Archer's Edge.

Provides TypedDict classes describing the records exchanged with storage.
Keys are camelCase because the documents are shared with the browser client.
"""

from typing import TypedDict, Optional, List, Dict


class ProfileDict(TypedDict, total=False):
    """Archer or staff profile."""
    id: str
    firstName: str
    lastName: str
    gender: str  # M, F
    school: str
    defaultClassification: str  # V, JV, MS
    division: str
    role: str  # Archer, Coach, Event Manager, Referee, System Admin
    email: str
    isMe: bool
    isFavorite: bool


class EndDict(TypedDict, total=False):
    """One end of a persisted scorecard."""
    endNumber: int
    arrow1: str
    arrow2: str
    arrow3: str
    tens: int
    xs: int
    endTotal: int
    runningTotal: int
    average: str


class TotalsDict(TypedDict):
    """Derived round totals."""
    totalScore: int
    totalTens: int
    totalXs: int
    totalArrows: int
    average: str


class ScorecardDict(TypedDict, total=False):
    """
    Scorecard document.

    Core fields written at verification plus optional metadata.
    """
    id: str
    archerName: str
    archerId: str
    school: str
    baleNumber: int
    targetAssignment: str
    division: str
    gender: str
    competitionId: Optional[str]
    competitionName: str
    isPracticeRound: bool
    roundType: str
    totalEnds: int
    arrowsPerEnd: int
    ends: Dict[str, EndDict]
    totals: TotalsDict
    status: str  # in_progress, complete, verified
    verifiedAt: Optional[str]
    verifiedBy: Optional[str]
    paperConfirmed: bool


class CompetitionDict(TypedDict, total=False):
    """Competition."""
    id: str
    name: str
    date: str
    location: str
    divisions: List[str]
    type: str


class BaleArcherDict(ProfileDict, total=False):
    """Profile placed on a bale."""
    targetAssignment: str


class BaleDict(TypedDict):
    """Bale produced by auto-assignment."""
    baleNumber: int
    division: str
    archers: List[BaleArcherDict]


class EventAssignmentDict(TypedDict, total=False):
    """Coach/event assignment of archers to bales."""
    id: str
    competitionId: str
    assignmentType: str  # school, mixed, school-vs-school
    selectedSchool: str
    archerIds: List[str]
    numberOfBales: int
    maxArchersPerBale: int
    bales: List[BaleDict]
    status: str  # draft, assigned
    createdBy: Optional[str]
    createdAt: str


class CompetitionStatsDict(TypedDict):
    """Competition-wide score summary."""
    competitionId: str
    totalArchers: int
    totalScore: int
    averageScore: float
    maxScore: int
    minScore: int
    hasScores: bool
