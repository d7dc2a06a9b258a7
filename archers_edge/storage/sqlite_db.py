"""
SQLite Document Store for Archer's Edge.

Stores profiles, competitions, scorecards and event assignments as JSON
documents with a few indexed columns for filtering:
- Upserts keep a record's original position (ON CONFLICT DO UPDATE)
- Atomic transactions for data safety
- Concurrent read access via WAL mode

This is the SQLite implementation of the RepositoryInterface.
"""

import sqlite3
import json
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Optional, Iterator, List, Dict, Any
import threading

from .base import RepositoryInterface
from .exceptions import CorruptDocumentError, QueryError, SchemaError


class SQLiteRepository(RepositoryInterface):
    """
    SQLite repository for archery data.
    Thread-safe with connection per thread.

    Implements the RepositoryInterface abstract base class.
    """

    SCHEMA_VERSION = 1

    def __init__(self, db_path: str = "cache/archers_edge.db"):
        """
        Create SQLite repository instance.

        Args:
            db_path: Path to the SQLite database file
        """
        self.db_path = Path(db_path)
        self._local = threading.local()
        self._initialized = False

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def initialize(self) -> None:
        """Initialize the database connection and schema."""
        if self._initialized:
            return

        # Ensure parent directory exists
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._init_schema()
        self._initialized = True

    def close(self) -> None:
        """Close database connections and clean up resources."""
        if hasattr(self._local, 'conn') and self._local.conn is not None:
            self._local.conn.close()
            self._local.conn = None

    def health_check(self) -> bool:
        """Check if the database connection is healthy."""
        try:
            conn = self._get_connection()
            conn.execute("SELECT 1")
            return True
        except sqlite3.Error:
            return False

    # =========================================================================
    # CONNECTION MANAGEMENT
    # =========================================================================

    def _get_connection(self) -> sqlite3.Connection:
        """Get thread-local database connection."""
        if not hasattr(self._local, 'conn') or self._local.conn is None:
            self._local.conn = sqlite3.connect(
                str(self.db_path),
                check_same_thread=False,
                timeout=30.0
            )
            self._local.conn.row_factory = sqlite3.Row
            # Enable WAL mode for better concurrent access
            self._local.conn.execute("PRAGMA journal_mode=WAL")
            self._local.conn.execute("PRAGMA synchronous=NORMAL")
        return self._local.conn

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Context manager for database transactions."""
        conn = self._get_connection()
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise QueryError(str(e)) from e
        except Exception:
            conn.rollback()
            raise

    def _init_schema(self) -> None:
        """Initialize database schema."""
        try:
            with self.transaction() as conn:
                conn.executescript('''
                    -- Metadata table
                    CREATE TABLE IF NOT EXISTS metadata (
                        key TEXT PRIMARY KEY,
                        value TEXT,
                        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    );

                    -- Profiles (archers, coaches, staff)
                    CREATE TABLE IF NOT EXISTS profiles (
                        id TEXT PRIMARY KEY,
                        first_name TEXT,
                        last_name TEXT,
                        school TEXT,
                        role TEXT,
                        data JSON NOT NULL,
                        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    );

                    -- Competitions
                    CREATE TABLE IF NOT EXISTS competitions (
                        id TEXT PRIMARY KEY,
                        name TEXT NOT NULL,
                        date TEXT,
                        data JSON NOT NULL,
                        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    );

                    -- Scorecards (main data table)
                    CREATE TABLE IF NOT EXISTS scores (
                        id TEXT PRIMARY KEY,
                        competition_id TEXT,
                        archer_id TEXT,
                        status TEXT,
                        total_score INTEGER,
                        data JSON NOT NULL,
                        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    );

                    -- Event assignments
                    CREATE TABLE IF NOT EXISTS event_assignments (
                        id TEXT PRIMARY KEY,
                        competition_id TEXT,
                        status TEXT,
                        data JSON NOT NULL,
                        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    );

                    -- Indexes for fast queries
                    CREATE INDEX IF NOT EXISTS idx_scores_competition ON scores(competition_id);
                    CREATE INDEX IF NOT EXISTS idx_scores_archer ON scores(archer_id);
                    CREATE INDEX IF NOT EXISTS idx_assignments_competition ON event_assignments(competition_id);
                    CREATE INDEX IF NOT EXISTS idx_profiles_school ON profiles(school);
                ''')
                conn.execute(
                    "INSERT OR REPLACE INTO metadata (key, value) VALUES ('schema_version', ?)",
                    (str(self.SCHEMA_VERSION),)
                )
        except QueryError as e:
            raise SchemaError(self.db_path, str(e)) from e

    @staticmethod
    def _load_doc(table: str, row: sqlite3.Row) -> Dict[str, Any]:
        try:
            return json.loads(row['data'])
        except json.JSONDecodeError as e:
            raise CorruptDocumentError(table, str(e)) from e

    def _rows_to_docs(self, table: str, rows: List[sqlite3.Row]) -> List[Dict[str, Any]]:
        return [self._load_doc(table, row) for row in rows]

    # =========================================================================
    # PROFILES
    # =========================================================================

    def get_profiles(self) -> List[Dict[str, Any]]:
        conn = self._get_connection()
        rows = conn.execute(
            "SELECT data FROM profiles ORDER BY last_name COLLATE NOCASE, first_name COLLATE NOCASE"
        ).fetchall()
        return self._rows_to_docs('profiles', rows)

    def save_profile(self, profile: Dict[str, Any]) -> str:
        profile_id = profile.get('id') or uuid.uuid4().hex
        doc = {**profile, 'id': profile_id}
        with self.transaction() as conn:
            conn.execute('''
                INSERT INTO profiles (id, first_name, last_name, school, role, data)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    first_name = excluded.first_name,
                    last_name = excluded.last_name,
                    school = excluded.school,
                    role = excluded.role,
                    data = excluded.data,
                    updated_at = CURRENT_TIMESTAMP
            ''', (
                profile_id,
                doc.get('firstName', ''),
                doc.get('lastName', ''),
                doc.get('school'),
                doc.get('role', 'Archer'),
                json.dumps(doc),
            ))
        return profile_id

    def delete_profile(self, profile_id: str) -> bool:
        with self.transaction() as conn:
            cursor = conn.execute("DELETE FROM profiles WHERE id = ?", (profile_id,))
            return cursor.rowcount > 0

    # =========================================================================
    # COMPETITIONS
    # =========================================================================

    def get_competitions(self) -> List[Dict[str, Any]]:
        conn = self._get_connection()
        rows = conn.execute(
            "SELECT data FROM competitions ORDER BY date DESC, name"
        ).fetchall()
        return self._rows_to_docs('competitions', rows)

    def get_competition(self, competition_id: str) -> Optional[Dict[str, Any]]:
        conn = self._get_connection()
        row = conn.execute(
            "SELECT data FROM competitions WHERE id = ?", (competition_id,)
        ).fetchone()
        return self._load_doc('competitions', row) if row else None

    def save_competition(self, competition: Dict[str, Any]) -> str:
        competition_id = competition.get('id') or uuid.uuid4().hex
        doc = {**competition, 'id': competition_id}
        with self.transaction() as conn:
            conn.execute('''
                INSERT INTO competitions (id, name, date, data)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    name = excluded.name,
                    date = excluded.date,
                    data = excluded.data,
                    updated_at = CURRENT_TIMESTAMP
            ''', (competition_id, doc.get('name', ''), doc.get('date'), json.dumps(doc)))
        return competition_id

    # =========================================================================
    # SCORECARDS
    # =========================================================================

    def get_scores(
        self,
        competition_id: Optional[str] = None,
        archer_id: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        query = "SELECT data FROM scores WHERE 1=1"
        params: List[Any] = []

        if competition_id:
            query += " AND competition_id = ?"
            params.append(competition_id)
        if archer_id:
            query += " AND archer_id = ?"
            params.append(archer_id)

        query += " ORDER BY rowid"

        conn = self._get_connection()
        return self._rows_to_docs('scores', conn.execute(query, params).fetchall())

    def get_score(self, score_id: str) -> Optional[Dict[str, Any]]:
        conn = self._get_connection()
        row = conn.execute("SELECT data FROM scores WHERE id = ?", (score_id,)).fetchone()
        return self._load_doc('scores', row) if row else None

    def save_score(self, scorecard: Dict[str, Any]) -> str:
        score_id = scorecard.get('id') or uuid.uuid4().hex
        doc = {**scorecard, 'id': score_id}
        totals = doc.get('totals') or {}
        with self.transaction() as conn:
            conn.execute('''
                INSERT INTO scores (id, competition_id, archer_id, status, total_score, data)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    competition_id = excluded.competition_id,
                    archer_id = excluded.archer_id,
                    status = excluded.status,
                    total_score = excluded.total_score,
                    data = excluded.data,
                    updated_at = CURRENT_TIMESTAMP
            ''', (
                score_id,
                doc.get('competitionId'),
                doc.get('archerId'),
                doc.get('status'),
                totals.get('totalScore', 0),
                json.dumps(doc),
            ))
        return score_id

    # =========================================================================
    # EVENT ASSIGNMENTS
    # =========================================================================

    def get_event_assignments(self, competition_id: Optional[str] = None) -> List[Dict[str, Any]]:
        conn = self._get_connection()
        if competition_id:
            rows = conn.execute(
                "SELECT data FROM event_assignments WHERE competition_id = ? ORDER BY rowid",
                (competition_id,)
            ).fetchall()
        else:
            rows = conn.execute("SELECT data FROM event_assignments ORDER BY rowid").fetchall()
        return self._rows_to_docs('event_assignments', rows)

    def get_event_assignment(self, assignment_id: str) -> Optional[Dict[str, Any]]:
        conn = self._get_connection()
        row = conn.execute(
            "SELECT data FROM event_assignments WHERE id = ?", (assignment_id,)
        ).fetchone()
        return self._load_doc('event_assignments', row) if row else None

    def save_event_assignment(self, assignment: Dict[str, Any]) -> str:
        assignment_id = assignment.get('id') or uuid.uuid4().hex
        doc = {**assignment, 'id': assignment_id}
        with self.transaction() as conn:
            conn.execute('''
                INSERT INTO event_assignments (id, competition_id, status, data)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    competition_id = excluded.competition_id,
                    status = excluded.status,
                    data = excluded.data,
                    updated_at = CURRENT_TIMESTAMP
            ''', (assignment_id, doc.get('competitionId'), doc.get('status'), json.dumps(doc)))
        return assignment_id

    def update_event_assignment(self, assignment_id: str, updates: Dict[str, Any]) -> bool:
        existing = self.get_event_assignment(assignment_id)
        if existing is None:
            return False
        self.save_event_assignment({**existing, **updates, 'id': assignment_id})
        return True

    def delete_event_assignment(self, assignment_id: str) -> bool:
        with self.transaction() as conn:
            cursor = conn.execute("DELETE FROM event_assignments WHERE id = ?", (assignment_id,))
            return cursor.rowcount > 0

    # =========================================================================
    # MAINTENANCE
    # =========================================================================

    def get_stats(self) -> Dict[str, int]:
        conn = self._get_connection()
        stats = {}
        for key, table in [
            ('profiles', 'profiles'),
            ('competitions', 'competitions'),
            ('scores', 'scores'),
            ('assignments', 'event_assignments'),
        ]:
            stats[key] = conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
        return stats

    def clear_all(self) -> None:
        with self.transaction() as conn:
            conn.executescript('''
                DELETE FROM profiles;
                DELETE FROM competitions;
                DELETE FROM scores;
                DELETE FROM event_assignments;
            ''')
