"""
Database connection management.
Handles SQLite connection lifecycle and configuration.
"""

import sqlite3
import logging
import threading
from pathlib import Path
from typing import Optional, Union
from contextlib import contextmanager

from ..exceptions import StoreError

logger = logging.getLogger(__name__)

MEMORY_DATABASE = ":memory:"


class DatabaseConnectionManager:
    """
    Manages the benchmark database connection.

    The connection is opened lazily. All statements go through ``execute`` so
    that sqlite failures surface as ``StoreError``.
    """

    def __init__(self, db_path: Union[str, Path] = "cloneeval.db"):
        """
        Initialize connection manager.

        Args:
            db_path: Path to SQLite database file, or ":memory:"
        """
        self.db_path = str(db_path)
        self._connection: Optional[sqlite3.Connection] = None
        self._lock = threading.RLock()

    @property
    def connection(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._connection is None:
            self._connection = self._create_connection()
        return self._connection

    def _create_connection(self) -> sqlite3.Connection:
        """Create and configure a new database connection."""
        if self.db_path != MEMORY_DATABASE and not Path(self.db_path).parent.exists():
            raise StoreError(f"Database directory does not exist: {self.db_path}")
        try:
            conn = sqlite3.connect(self.db_path, check_same_thread=False)
            conn.row_factory = sqlite3.Row  # Enable column access by name

            conn.execute("PRAGMA foreign_keys = ON")
            if self.db_path != MEMORY_DATABASE:
                conn.execute("PRAGMA journal_mode = WAL")
                conn.execute("PRAGMA synchronous = NORMAL")

            # Set busy timeout to 5 seconds to handle concurrent access
            conn.execute("PRAGMA busy_timeout = 5000")

            logger.info(f"Created database connection: {self.db_path}")
            return conn

        except sqlite3.Error as e:
            logger.error(f"Failed to create database connection: {e}")
            raise StoreError(f"Cannot open database {self.db_path}: {e}") from e

    def execute(self, query: str, params: Optional[tuple] = None) -> sqlite3.Cursor:
        """
        Execute a database query.

        Args:
            query: SQL query to execute
            params: Query parameters

        Returns:
            Cursor with query results
        """
        with self._lock:
            try:
                cursor = self.connection.cursor()
                if params:
                    return cursor.execute(query, params)
                return cursor.execute(query)
            except sqlite3.OperationalError as e:
                # Left to with_retry, which knows about lock contention.
                if "database is locked" in str(e):
                    raise
                raise StoreError(f"Query failed: {e}") from e
            except sqlite3.Error as e:
                raise StoreError(f"Query failed: {e}") from e

    def fetch_all(self, query: str, params: Optional[tuple] = None) -> list:
        with self._lock:
            return self.execute(query, params).fetchall()

    def fetch_one(self, query: str, params: Optional[tuple] = None) -> Optional[sqlite3.Row]:
        with self._lock:
            return self.execute(query, params).fetchone()

    def commit(self):
        """Commit current transaction."""
        if self._connection:
            self._connection.commit()

    def rollback(self):
        """Rollback current transaction."""
        if self._connection:
            self._connection.rollback()

    @contextmanager
    def transaction(self):
        """
        Context manager for database transactions.

        Automatically commits on success, rolls back on error.
        """
        with self._lock:
            try:
                yield self
                self.commit()
            except Exception:
                self.rollback()
                raise

    def close(self):
        """Close database connection."""
        if self._connection:
            self._connection.close()
            self._connection = None
            logger.debug("Database connection closed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
