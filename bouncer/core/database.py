"""
Bouncer - Database
==================

SQLite store for moderator warnings.

Attempt tracking deliberately does not live here: tracking records are
kept in the log channel. This database only backs the warn/warnings
commands.

Single database file: data/bouncer.db (override with BOUNCER_DB_PATH)
"""

import os
import sqlite3
import threading
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from bouncer.core.logger import logger


# =============================================================================
# Constants
# =============================================================================

DATA_DIR: Path = Path(__file__).parent.parent.parent / "data"
DB_PATH: Path = Path(os.getenv("BOUNCER_DB_PATH", str(DATA_DIR / "bouncer.db")))


# =============================================================================
# Database Manager
# =============================================================================

class DatabaseManager:
    """
    Database manager with thread-safe operations.

    DESIGN: One connection guarded by a lock. WAL mode so reads from the
    warnings command do not block writes from warn.
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path: Path = Path(path) if path else DB_PATH
        self._db_lock: threading.Lock = threading.Lock()
        self._conn: Optional[sqlite3.Connection] = None

        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._connect()
        self._init_tables()

        logger.tree("Database Manager Initialized", [
            ("Path", str(self.path)),
            ("WAL Mode", "Enabled"),
        ], emoji="🗄️")

    # =========================================================================
    # Connection Management
    # =========================================================================

    def _connect(self) -> None:
        try:
            self._conn = sqlite3.connect(
                str(self.path),
                check_same_thread=False,
                timeout=30.0,
            )
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.execute("PRAGMA synchronous=NORMAL")
            self._conn.row_factory = sqlite3.Row
        except sqlite3.Error as e:
            logger.error("Database Connection Failed", [("Error", str(e))])
            raise

    def _ensure_connection(self) -> sqlite3.Connection:
        """Ensure connection is valid, reconnect if needed."""
        if self._conn is None:
            self._connect()
        try:
            self._conn.execute("SELECT 1")
        except sqlite3.Error:
            self._connect()
        return self._conn

    def execute(
        self,
        query: str,
        params: Tuple = (),
        commit: bool = True
    ) -> sqlite3.Cursor:
        """Execute a query with thread safety."""
        with self._db_lock:
            conn = self._ensure_connection()
            cursor = conn.cursor()
            cursor.execute(query, params)
            if commit:
                conn.commit()
            return cursor

    def fetchone(self, query: str, params: Tuple = ()) -> Optional[sqlite3.Row]:
        cursor = self.execute(query, params, commit=False)
        return cursor.fetchone()

    def fetchall(self, query: str, params: Tuple = ()) -> List[sqlite3.Row]:
        cursor = self.execute(query, params, commit=False)
        return cursor.fetchall()

    def close(self) -> None:
        """Close database connection."""
        with self._db_lock:
            if self._conn:
                self._conn.close()
                self._conn = None
                logger.info("Database Connection Closed")

    # =========================================================================
    # Table Initialization
    # =========================================================================

    def _init_tables(self) -> None:
        conn = self._ensure_connection()
        conn.execute("""
            CREATE TABLE IF NOT EXISTS warnings (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id INTEGER NOT NULL,
                guild_id INTEGER NOT NULL,
                moderator_id INTEGER NOT NULL,
                reason TEXT,
                created_at REAL NOT NULL
            )
        """)
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_warnings_user ON warnings(user_id, guild_id)"
        )
        conn.commit()

    # =========================================================================
    # Warning Operations
    # =========================================================================

    def add_warning(
        self,
        user_id: int,
        guild_id: int,
        moderator_id: int,
        reason: Optional[str] = None,
    ) -> int:
        """
        Add a warning to the database.

        Args:
            user_id: Discord user ID being warned.
            guild_id: Guild where warning was issued.
            moderator_id: Moderator who issued warning.
            reason: Optional reason for warning.

        Returns:
            Row ID of the warning record.
        """
        cursor = self.execute(
            """INSERT INTO warnings (user_id, guild_id, moderator_id, reason, created_at)
               VALUES (?, ?, ?, ?, ?)""",
            (user_id, guild_id, moderator_id, reason, time.time())
        )
        return cursor.lastrowid

    def get_warn_count(self, user_id: int, guild_id: int) -> int:
        """Total number of warnings for a user in a guild."""
        row = self.fetchone(
            "SELECT COUNT(*) as count FROM warnings WHERE user_id = ? AND guild_id = ?",
            (user_id, guild_id)
        )
        return row["count"] if row else 0

    def get_user_warnings(
        self,
        user_id: int,
        guild_id: int,
        limit: int = 25,
    ) -> List[Dict[str, Any]]:
        """
        Get warnings for a user in a guild, newest first.

        Args:
            user_id: Discord user ID.
            guild_id: Guild ID.
            limit: Maximum number of warnings to return.
        """
        rows = self.fetchall(
            """SELECT id, user_id, guild_id, moderator_id, reason, created_at
               FROM warnings
               WHERE user_id = ? AND guild_id = ?
               ORDER BY created_at DESC, id DESC
               LIMIT ?""",
            (user_id, guild_id, limit)
        )
        return [dict(row) for row in rows]


# =============================================================================
# Global Instance
# =============================================================================

_db: Optional[DatabaseManager] = None


def get_db() -> DatabaseManager:
    """Get the global database manager instance."""
    global _db
    if _db is None:
        _db = DatabaseManager()
    return _db


__all__ = ["DatabaseManager", "get_db", "DB_PATH", "DATA_DIR"]
