"""
SQLite backing for the correction store.
"""

import sqlite3
from contextlib import contextmanager
from typing import Generator
from .config import DB_PATH, ensure_db_directory

@contextmanager
def get_db(db_path: str = None) -> Generator[sqlite3.Connection, None, None]:
    """Get a SQLite database connection."""
    path = db_path or DB_PATH
    ensure_db_directory(path)
    conn = sqlite3.connect(path)
    try:
        yield conn
    finally:
        conn.close()

def init_db(db_path: str = None):
    """Initialize the database with required tables."""
    with get_db(db_path) as conn:
        cursor = conn.cursor()

        # Corrections table; rowid order is the store iteration order
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS corrections (
                id TEXT PRIMARY KEY,
                original TEXT NOT NULL,
                suggestion TEXT NOT NULL,
                context TEXT,
                status TEXT NOT NULL DEFAULT 'pending',
                embedding TEXT,   -- JSON array, NULL until first computed
                created_at TIMESTAMP NOT NULL,
                approved_at TIMESTAMP
            )
        ''')

        cursor.execute('CREATE INDEX IF NOT EXISTS idx_corrections_status ON corrections(status)')

        conn.commit()

def health_check(db_path: str = None):
    """Check database health."""
    try:
        with get_db(db_path) as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT name FROM sqlite_master WHERE type='table';")
            tables = cursor.fetchall()

            table_names = [table[0] for table in tables]
            return 'corrections' in table_names
    except Exception:
        return False
