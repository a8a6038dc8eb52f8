"""Client-side persistent key-value store for session state."""

import datetime
import json
import logging
import sqlite3
from contextlib import contextmanager
from typing import Any, Generator, Optional

CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS session_state (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at INTEGER NOT NULL
);
"""


class SessionStore:
    """Handles session state persistence with proper connection management and error handling"""

    def __init__(self, db_file_path: str):
        self.db_file = db_file_path
        self.logger = logging.getLogger(self.__class__.__name__)
        self._init_db()

    def _init_db(self) -> None:
        """Initialize the database with required tables"""
        try:
            with self._get_connection() as conn:
                conn.executescript(CREATE_TABLE_SQL)
                conn.commit()
                self.logger.info(f"Session store initialized: {self.db_file}")
        except sqlite3.Error as e:
            self.logger.critical(
                f"Failed to initialize session store {self.db_file}: {str(e)}"
            )
            raise

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Context manager for database connections with proper error handling"""
        conn = None
        try:
            conn = sqlite3.connect(self.db_file)
            conn.row_factory = sqlite3.Row
            yield conn
        except sqlite3.Error as e:
            self.logger.error(f"Database error ({self.db_file}): {str(e)}")
            raise
        finally:
            if conn:
                conn.close()

    def get_json(self, key: str) -> Optional[Any]:
        """Return the decoded value stored under key, or None."""
        try:
            with self._get_connection() as conn:
                row = conn.execute(
                    "SELECT value FROM session_state WHERE key = ?", (key,)
                ).fetchone()
        except sqlite3.Error:
            return None
        if row is None:
            return None
        try:
            return json.loads(row["value"])
        except json.JSONDecodeError as e:
            self.logger.warning(f"Discarding unreadable value for key '{key}': {e}")
            return None

    def set_json(self, key: str, value: Any) -> None:
        """Store value under key, replacing any previous value."""
        now = int(datetime.datetime.now(datetime.timezone.utc).timestamp())
        with self._get_connection() as conn:
            with conn:  # Transaction
                conn.execute(
                    """
                    INSERT INTO session_state (key, value, updated_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET
                        value = excluded.value,
                        updated_at = excluded.updated_at
                    """,
                    (key, json.dumps(value), now),
                )
        self.logger.debug(f"Stored session key '{key}'")

    def delete(self, key: str) -> bool:
        """Remove key. Returns True when something was deleted."""
        with self._get_connection() as conn:
            with conn:
                cursor = conn.execute(
                    "DELETE FROM session_state WHERE key = ?", (key,)
                )
                deleted = cursor.rowcount > 0
        if deleted:
            self.logger.debug(f"Deleted session key '{key}'")
        return deleted
