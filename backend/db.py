"""
Database module for SmartNotes
Opaque keyed blob store on SQLite with direct SQL (no ORM)
"""

import sqlite3
from pathlib import Path
from typing import Dict, Optional
from contextlib import contextmanager
import logging

from utils.config import DB_PATH

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


SCHEMA = """
CREATE TABLE IF NOT EXISTS blob (
    key TEXT PRIMARY KEY,
    value BLOB NOT NULL,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);
"""


class SqliteBlobStore:
    """Keyed blob store; every set() overwrites the whole value for its key"""

    def __init__(self, db_path: Path = DB_PATH):
        self.db_path = Path(db_path)
        self.init_database()

    def ensure_db_directory(self):
        """Ensure the database directory exists with proper permissions"""
        db_dir = self.db_path.parent
        db_dir.mkdir(parents=True, exist_ok=True)
        db_dir.chmod(0o700)

    @contextmanager
    def get_db_connection(self):
        """Context manager for database connections"""
        self.ensure_db_directory()
        try:
            conn = sqlite3.connect(str(self.db_path))
            try:
                yield conn
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.error(f"Error in get_db_connection: {type(e).__name__}: {str(e)}")
            raise

    def init_database(self):
        """Initialize the database with the schema"""
        with self.get_db_connection() as conn:
            conn.executescript(SCHEMA)
            conn.commit()

    def get(self, key: str) -> Optional[bytes]:
        with self.get_db_connection() as conn:
            row = conn.execute("SELECT value FROM blob WHERE key = ?", (key,)).fetchone()
        if row is None:
            return None
        return bytes(row[0])

    def set(self, key: str, value: bytes):
        with self.get_db_connection() as conn:
            try:
                conn.execute("""
                    INSERT INTO blob (key, value, updated_at)
                    VALUES (?, ?, CURRENT_TIMESTAMP)
                    ON CONFLICT(key) DO UPDATE SET
                        value = excluded.value,
                        updated_at = excluded.updated_at
                """, (key, sqlite3.Binary(value)))
                conn.commit()
            except Exception as e:
                conn.rollback()
                raise RuntimeError(f"Failed to write key {key}: {str(e)}") from e
        logger.debug(f"Wrote {len(value)} bytes to {key}")

    def remove(self, key: str):
        with self.get_db_connection() as conn:
            conn.execute("DELETE FROM blob WHERE key = ?", (key,))
            conn.commit()


class MemoryBlobStore:
    """In-process blob store with the same interface, used by tests and scripts"""

    def __init__(self, initial: Optional[Dict[str, bytes]] = None):
        self._data: Dict[str, bytes] = dict(initial or {})

    def get(self, key: str) -> Optional[bytes]:
        return self._data.get(key)

    def set(self, key: str, value: bytes):
        self._data[key] = bytes(value)

    def remove(self, key: str):
        self._data.pop(key, None)

    def keys(self):
        return list(self._data)
