"""
Errors raised by the document store backends.

DataService treats any of these as a failed read and falls back to the
last snapshot; they never reach the HTTP layer as policy errors.
"""


class RepositoryError(Exception):
    """A document store operation failed."""
    pass


class ConfigurationError(RepositoryError):
    """DB_TYPE does not name a known backend."""
    pass


class SchemaError(RepositoryError):
    """The SQLite tables could not be created."""

    def __init__(self, db_path: str, reason: str):
        super().__init__(f"Failed to initialize schema at {db_path}: {reason}")
        self.db_path = db_path


class QueryError(RepositoryError):
    """A statement against the store failed and was rolled back."""
    pass


class CorruptDocumentError(QueryError):
    """A stored row holds a data column that is not valid JSON."""

    def __init__(self, table: str, reason: str):
        super().__init__(f"Unreadable document in {table}: {reason}")
        self.table = table
