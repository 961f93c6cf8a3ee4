"""
SQLite settings store for SnakeNeon.

The backend persists exactly two scalars (the best score and the mute flag)
in one keyed table. The file location depends on where the process runs:
an explicit SNAKE_DB_PATH, the Railway volume, or the backend directory.
"""

import logging
import os
import sqlite3
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()
logger = logging.getLogger(__name__)

RAILWAY_DB_PATH = '/data/snakeneon.db'
LOCAL_DB_NAME = 'snakeneon.db'

# Seconds to wait on a locked database before giving up
CONNECT_TIMEOUT = 5.0

SETTINGS_SCHEMA = """
    CREATE TABLE IF NOT EXISTS settings (
        key TEXT PRIMARY KEY,
        value TEXT NOT NULL,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
"""


def get_database_path() -> str:
    """
    Pick the database file for this environment.

    Returns:
        - SNAKE_DB_PATH if set
        - /data/snakeneon.db when RAILWAY_ENVIRONMENT is set
        - backend/snakeneon.db otherwise
    """
    explicit = os.getenv('SNAKE_DB_PATH')
    if explicit:
        return explicit

    if os.getenv('RAILWAY_ENVIRONMENT'):
        os.makedirs(os.path.dirname(RAILWAY_DB_PATH), exist_ok=True)
        return RAILWAY_DB_PATH

    return str(Path(__file__).parent / LOCAL_DB_NAME)


def get_connection() -> sqlite3.Connection:
    """Open a connection whose rows support access by column name."""
    conn = sqlite3.connect(get_database_path(), timeout=CONNECT_TIMEOUT)
    conn.row_factory = sqlite3.Row
    return conn


def init_database() -> None:
    """
    Create the settings table if it is missing.
    Safe to call repeatedly.
    """
    db_path = get_database_path()
    logger.info("Initializing database at: %s", db_path)

    conn = get_connection()
    try:
        conn.execute(SETTINGS_SCHEMA)
        conn.commit()
    except sqlite3.Error:
        conn.rollback()
        logger.exception("Could not create the settings table in %s", db_path)
        raise
    finally:
        conn.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_database()
    print(f"Database ready at: {get_database_path()}")
