"""Tests for storage module."""

import pytest
import os
from unittest.mock import patch

from archers_edge.storage import get_repository, reset_repository, RepositoryInterface
from archers_edge.storage.exceptions import ConfigurationError, CorruptDocumentError, QueryError
from archers_edge.storage.memory_db import MemoryRepository
from archers_edge.storage.sqlite_db import SQLiteRepository


class TestFactory:
    """Tests for factory function."""

    def setup_method(self):
        """Reset singleton before each test."""
        reset_repository()

    def teardown_method(self):
        """Clean up after each test."""
        reset_repository()

    def test_sqlite_type(self, test_data_dir):
        """DB_TYPE=sqlite builds a SQLite store under DATA_DIR."""
        with patch.dict(os.environ, {'DB_TYPE': 'sqlite', 'DATA_DIR': test_data_dir}, clear=False):
            repo = get_repository()
            assert isinstance(repo, SQLiteRepository)
            assert str(repo.db_path).startswith(test_data_dir)
            reset_repository()  # Close before cleanup

    def test_memory_type(self):
        """DB_TYPE=memory builds an in-memory store."""
        with patch.dict(os.environ, {'DB_TYPE': 'memory'}, clear=False):
            assert isinstance(get_repository(), MemoryRepository)

    def test_invalid_db_type_raises(self):
        """Invalid DB_TYPE raises ConfigurationError."""
        with patch.dict(os.environ, {'DB_TYPE': 'invalid'}, clear=False):
            with pytest.raises(ConfigurationError):
                get_repository()

    def test_singleton_returns_same_instance(self):
        """Factory returns same instance on subsequent calls."""
        with patch.dict(os.environ, {'DB_TYPE': 'memory'}, clear=False):
            assert get_repository() is get_repository()


@pytest.fixture(params=['memory', 'sqlite'])
def repo(request, test_data_dir):
    """Run each repository test against both backends."""
    if request.param == 'memory':
        repository = MemoryRepository()
    else:
        repository = SQLiteRepository(os.path.join(test_data_dir, 'test.db'))
    repository.initialize()
    yield repository
    repository.close()


class TestRepository:
    """Behaviour shared by every RepositoryInterface implementation."""

    def test_implements_interface(self, repo):
        """Both backends implement RepositoryInterface."""
        assert isinstance(repo, RepositoryInterface)
        assert repo.health_check() is True

    def test_profiles_sorted_by_name(self, repo, sample_profile_data):
        """Profiles come back ordered by last then first name."""
        for profile in sample_profile_data:
            repo.save_profile(profile)

        names = [p['lastName'] for p in repo.get_profiles()]
        assert names == ['Archer', 'Bowman', 'Coach', 'Crane']

    def test_save_profile_generates_id(self, repo):
        """A profile without an id gets one."""
        profile_id = repo.save_profile({'firstName': 'New', 'lastName': 'Archer'})
        assert profile_id
        assert repo.get_profiles()[0]['id'] == profile_id

    def test_profile_upsert_and_delete(self, repo, sample_profile_data):
        """Saving an existing id replaces it; delete removes it."""
        repo.save_profile(sample_profile_data[0])
        repo.save_profile({**sample_profile_data[0], 'school': 'BHS'})

        profiles = repo.get_profiles()
        assert len(profiles) == 1
        assert profiles[0]['school'] == 'BHS'
        assert repo.delete_profile('p_alice') is True
        assert repo.delete_profile('p_alice') is False

    def test_competitions_newest_first(self, repo):
        """Competitions are ordered by date, newest first."""
        repo.save_competition({'id': 'c_old', 'name': 'Fall', 'date': '2024-10-01'})
        repo.save_competition({'id': 'c_new', 'name': 'Spring', 'date': '2025-04-12'})

        assert [c['id'] for c in repo.get_competitions()] == ['c_new', 'c_old']
        assert repo.get_competition('c_old')['name'] == 'Fall'
        assert repo.get_competition('missing') is None

    def test_scores_filter_and_order(self, repo):
        """Scores filter by competition and archer and keep insert order."""
        repo.save_score({'id': 's1', 'competitionId': 'c1', 'archerId': 'a1'})
        repo.save_score({'id': 's2', 'competitionId': 'c2', 'archerId': 'a1'})
        repo.save_score({'id': 's3', 'competitionId': 'c1', 'archerId': 'a2'})

        assert [s['id'] for s in repo.get_scores()] == ['s1', 's2', 's3']
        assert [s['id'] for s in repo.get_scores(competition_id='c1')] == ['s1', 's3']
        assert [s['id'] for s in repo.get_scores(archer_id='a1')] == ['s1', 's2']
        assert [s['id'] for s in repo.get_scores(competition_id='c1', archer_id='a2')] == ['s3']

    def test_get_score_by_id(self, repo):
        """Single scores are looked up by id."""
        repo.save_score({'id': 's1', 'archerId': 'a1', 'status': 'verified'})

        assert repo.get_score('s1')['status'] == 'verified'
        assert repo.get_score('missing') is None

    def test_score_update_keeps_position(self, repo):
        """Re-saving a score does not move it to the end."""
        repo.save_score({'id': 's1', 'status': 'in_progress'})
        repo.save_score({'id': 's2', 'status': 'in_progress'})
        repo.save_score({'id': 's1', 'status': 'verified', 'totals': {'totalScore': 300}})

        scores = repo.get_scores()
        assert [s['id'] for s in scores] == ['s1', 's2']
        assert scores[0]['status'] == 'verified'

    def test_event_assignment_lifecycle(self, repo):
        """Assignments can be saved, updated, filtered and deleted."""
        assignment_id = repo.save_event_assignment({'competitionId': 'c1', 'status': 'draft'})
        repo.save_event_assignment({'id': 'other', 'competitionId': 'c2', 'status': 'draft'})

        assert repo.update_event_assignment(assignment_id, {'status': 'assigned', 'bales': []}) is True
        assert repo.get_event_assignment(assignment_id)['status'] == 'assigned'
        assert repo.update_event_assignment('missing', {'status': 'assigned'}) is False
        assert [a['id'] for a in repo.get_event_assignments(competition_id='c1')] == [assignment_id]
        assert repo.delete_event_assignment(assignment_id) is True
        assert repo.get_event_assignment(assignment_id) is None

    def test_returned_documents_are_copies(self, repo):
        """Editing a returned document does not change the store."""
        repo.save_competition({'id': 'c1', 'name': 'Spring', 'divisions': ['BV']})
        doc = repo.get_competition('c1')
        doc['divisions'].append('GV')

        assert repo.get_competition('c1')['divisions'] == ['BV']

    def test_stats_and_clear(self, repo, sample_profile_data):
        """get_stats counts documents; clear_all removes them."""
        for profile in sample_profile_data:
            repo.save_profile(profile)
        repo.save_score({'id': 's1'})

        assert repo.get_stats() == {'profiles': 4, 'competitions': 0, 'scores': 1, 'assignments': 0}
        repo.clear_all()
        assert repo.get_stats() == {'profiles': 0, 'competitions': 0, 'scores': 0, 'assignments': 0}


class TestSQLiteRepository:
    """Tests specific to the SQLite implementation."""

    def test_data_persists_across_instances(self, test_data_dir):
        """A second instance on the same file sees the data."""
        path = os.path.join(test_data_dir, 'persist.db')
        first = SQLiteRepository(path)
        first.initialize()
        first.save_profile({'id': 'p1', 'firstName': 'Ann', 'lastName': 'Lee'})
        first.close()

        second = SQLiteRepository(path)
        second.initialize()
        assert second.get_profiles()[0]['firstName'] == 'Ann'
        second.close()

    def test_initialize_creates_directory(self, test_data_dir):
        """Parent directories are created on initialize."""
        path = os.path.join(test_data_dir, 'nested', 'dir', 'test.db')
        repo = SQLiteRepository(path)
        repo.initialize()
        assert os.path.exists(os.path.dirname(path))
        repo.close()

    def test_sqlite_errors_are_wrapped(self, test_data_dir):
        """sqlite3 errors inside a transaction surface as QueryError."""
        repo = SQLiteRepository(os.path.join(test_data_dir, 'test.db'))
        repo.initialize()
        with pytest.raises(QueryError):
            with repo.transaction() as conn:
                conn.execute("SELECT * FROM no_such_table")
        repo.close()

    def test_unreadable_document_raises(self, test_data_dir):
        """A data column that is not JSON surfaces as CorruptDocumentError."""
        repo = SQLiteRepository(os.path.join(test_data_dir, 'test.db'))
        repo.initialize()
        with repo.transaction() as conn:
            conn.execute("INSERT INTO scores (id, data) VALUES ('s1', '{not json')")

        with pytest.raises(CorruptDocumentError) as exc_info:
            repo.get_scores()
        assert exc_info.value.table == 'scores'
        with pytest.raises(QueryError):
            repo.get_score('s1')
        repo.close()
