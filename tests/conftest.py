"""
Shared test fixtures and configuration.

Provides reusable fixtures for all test files including repository
instances, sample profiles and scorecards, and a data service wired to an
in-memory store.
"""

import os

# The API module builds its DataService at import time
os.environ.setdefault('DB_TYPE', 'memory')

import pytest
import shutil
import tempfile
from typing import Dict, Any, List
from unittest.mock import patch

from archers_edge.models import Archer, Scorecard
from archers_edge.services.cache import CacheService
from archers_edge.services.data_service import DataService
from archers_edge.services.scoring import new_scorecard, record_arrow
from archers_edge.storage import get_repository, reset_repository
from archers_edge.storage.memory_db import MemoryRepository


# =============================================================================
# REPOSITORY FIXTURES
# =============================================================================

@pytest.fixture
def test_data_dir():
    """Provide a temporary directory for test data."""
    temp_dir = tempfile.mkdtemp(prefix="archers_edge_test_")
    yield temp_dir

    # Cleanup
    if os.path.exists(temp_dir):
        try:
            shutil.rmtree(temp_dir)
        except PermissionError:
            pass  # Windows file locking, ignore


@pytest.fixture
def sqlite_repo(test_data_dir):
    """Provide a clean SQLite repository from the factory."""
    with patch.dict(os.environ, {'DB_TYPE': 'sqlite', 'DATA_DIR': test_data_dir}, clear=False):
        reset_repository()
        repo = get_repository()
        yield repo
        reset_repository()  # Close connection before cleanup


@pytest.fixture
def memory_repo():
    """Provide an empty in-memory repository."""
    return MemoryRepository()


@pytest.fixture
def data_service(memory_repo):
    """Provide a DataService over an in-memory repository."""
    return DataService(repository=memory_repo, cache=CacheService())


# =============================================================================
# SAMPLE DATA FIXTURES
# =============================================================================

@pytest.fixture
def sample_profile_data() -> List[Dict[str, Any]]:
    """Provide sample profile documents (camelCase, as stored)."""
    return [
        {
            'id': 'p_alice',
            'firstName': 'Alice',
            'lastName': 'Archer',
            'gender': 'F',
            'school': 'WDV',
            'defaultClassification': 'V',
            'role': 'Archer',
            'email': 'alice@example.com',
        },
        {
            'id': 'p_bob',
            'firstName': 'Bob',
            'lastName': 'Bowman',
            'gender': 'M',
            'school': 'WDV',
            'defaultClassification': 'V',
            'role': 'Archer',
        },
        {
            'id': 'p_carl',
            'firstName': 'Carl',
            'lastName': 'Crane',
            'gender': 'M',
            'school': 'BHS',
            'defaultClassification': 'V',
            'role': 'Archer',
        },
        {
            'id': 'p_coach',
            'firstName': 'Cora',
            'lastName': 'Coach',
            'gender': 'F',
            'school': 'WDV',
            'role': 'Coach',
            'isMe': True,
        },
    ]


@pytest.fixture
def sample_competition_data() -> Dict[str, Any]:
    """Provide a sample competition document."""
    return {
        'id': 'comp_spring',
        'name': 'Spring Invitational',
        'date': '2025-04-12',
        'location': 'West Des Moines',
        'divisions': ['BV', 'GV'],
    }


def make_archer(archer_id: str, gender: str = 'M', classification: str = 'V', school: str = 'WDV') -> Archer:
    """Build an archer profile for bale tests."""
    return Archer(
        id=archer_id,
        first_name=archer_id.upper(),
        last_name='Test',
        gender=gender,
        school=school,
        default_classification=classification,
    )


def fill_scorecard(scorecard: Scorecard, tokens: List[str]) -> Scorecard:
    """Record tokens end by end, three per end, starting at end 1."""
    for i, token in enumerate(tokens):
        record_arrow(scorecard, i // 3 + 1, i % 3 + 1, token)
    return scorecard


def full_scorecard(total: int, archer_id: str = 'p_test', **fields) -> Scorecard:
    """
    Build a complete 36-arrow scorecard worth exactly `total` points (max 324).

    Arrows are 9s until the remainder, then misses.
    """
    archer = Archer(id=archer_id, first_name='Test', last_name=archer_id)
    scorecard = new_scorecard(archer)
    remaining = total
    tokens = []
    for _ in range(36):
        value = min(9, remaining)
        tokens.append(str(value) if value else 'M')
        remaining -= value
    fill_scorecard(scorecard, tokens)
    return scorecard.model_copy(update=fields)


@pytest.fixture
def archer_factory():
    """Provide the make_archer builder."""
    return make_archer


@pytest.fixture
def fill():
    """Provide the fill_scorecard helper."""
    return fill_scorecard


@pytest.fixture
def make_scorecard():
    """Provide the full_scorecard builder."""
    return full_scorecard


@pytest.fixture
def identity_data() -> Dict[str, Any]:
    """Provide an acting identity document."""
    return {'profileId': 'p_coach', 'role': 'Coach'}
