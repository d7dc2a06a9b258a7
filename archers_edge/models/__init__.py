"""Data models for the Archer's Edge application."""

from archers_edge.models.archer import Archer, Identity
from archers_edge.models.scorecard import End, Totals, Scorecard
from archers_edge.models.bale import Bale, BaleArcher
from archers_edge.models.competition import Competition, EventAssignment
from archers_edge.models.results import (
    ResultEntry,
    CompetitionResults,
    CompetitionStats,
    ArcherPerformance,
)

__all__ = [
    "Archer", "Identity", "End", "Totals", "Scorecard", "Bale", "BaleArcher",
    "Competition", "EventAssignment", "ResultEntry", "CompetitionResults",
    "CompetitionStats", "ArcherPerformance",
]
