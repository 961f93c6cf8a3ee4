"""
Settings repository for keyed scalar values (best score, mute flag).
"""

from typing import Optional

from .base import BaseRepository
from database import SETTINGS_SCHEMA, get_database_path


class SettingsRepository(BaseRepository):
    """
    Repository for settings table operations.
    """

    def __init__(self):
        # Database files whose settings table is known to exist
        self._ready_paths = set()

    def ensure_table(self) -> None:
        with self.connection() as (conn, cursor):
            cursor.execute(SETTINGS_SCHEMA)
        self._ready_paths.add(get_database_path())

    def _ensure_table_once(self) -> None:
        if get_database_path() not in self._ready_paths:
            self.ensure_table()

    def get_value(self, key: str) -> Optional[str]:
        """
        Get a stored value.

        Args:
            key: The fixed setting identifier

        Returns:
            The stored string, or None if the key was never written
        """
        self._ensure_table_once()
        with self.read_connection() as (conn, cursor):
            cursor.execute("SELECT value FROM settings WHERE key = ?", (key,))
            row = cursor.fetchone()
            return row["value"] if row else None

    def set_value(self, key: str, value: str) -> None:
        """Insert or overwrite a stored value."""
        self._ensure_table_once()
        with self.connection() as (conn, cursor):
            cursor.execute(
                """
                INSERT INTO settings (key, value, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = CURRENT_TIMESTAMP
                """,
                (key, value),
            )

    def set_if_greater(self, key: str, value: int) -> bool:
        """
        Store value only when it beats the current integer for key.

        Holds the write lock across the read and the write, so concurrent
        writers never lower the record.

        Returns:
            True if the stored value was replaced
        """
        self._ensure_table_once()
        with self.exclusive_connection() as (conn, cursor):
            cursor.execute("SELECT value FROM settings WHERE key = ?", (key,))
            row = cursor.fetchone()
            current = parse_int_value(row["value"]) if row else 0
            if value <= current:
                return False
            cursor.execute(
                """
                INSERT INTO settings (key, value, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = CURRENT_TIMESTAMP
                """,
                (key, str(value)),
            )
            return True


def parse_int_value(raw: Optional[str]) -> int:
    try:
        return max(int(raw), 0)
    except (TypeError, ValueError):
        return 0
