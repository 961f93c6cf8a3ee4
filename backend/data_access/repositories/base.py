"""
Base repository for the settings store.

Every call opens its own SQLite connection and closes it on the way out, so
repositories can be shared between Flask request threads. Writes commit on
success and roll back on any exception.
"""

from contextlib import contextmanager
from typing import Generator, Any
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from database import get_connection


class BaseRepository:
    """
    Base class for all repositories.

    Subclasses use self.connection() for writes, self.read_connection() for
    plain lookups and self.exclusive_connection() for read-modify-write.
    """

    @contextmanager
    def connection(self, auto_commit: bool = True, begin: str = None) -> Generator[Any, None, None]:
        """
        Yield (connection, cursor) inside a transaction.

        Args:
            auto_commit: Commit when the block exits cleanly.
            begin: Optional explicit BEGIN statement, e.g. "BEGIN IMMEDIATE"
                to take the write lock before the first read.

        Example:
            with self.connection() as (conn, cursor):
                cursor.execute("DELETE FROM settings WHERE key = ?", (key,))
        """
        conn = get_connection()
        cursor = conn.cursor()
        try:
            if begin:
                cursor.execute(begin)
            yield conn, cursor
            if auto_commit:
                conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

    @contextmanager
    def exclusive_connection(self) -> Generator[Any, None, None]:
        """
        Like connection(), but holds SQLite's write lock from the start so a
        value read inside the block cannot change before it is written back.
        """
        with self.connection(begin="BEGIN IMMEDIATE") as handles:
            yield handles

    @contextmanager
    def read_connection(self) -> Generator[Any, None, None]:
        """Yield (connection, cursor) for lookups; nothing is committed."""
        conn = get_connection()
        cursor = conn.cursor()
        try:
            yield conn, cursor
        finally:
            cursor.close()
            conn.close()
