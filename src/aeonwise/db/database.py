"""SQLite database connection and schema management.

A Database object owns one database file and hands out connections
through a context manager; repositories receive it explicitly.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Generator

import structlog

logger = structlog.get_logger(__name__)

# Default database location
DEFAULT_DB_PATH = Path("db/aeonwise.db")


def utc_now() -> str:
    """Current UTC time as ISO 8601 text."""
    return datetime.now(timezone.utc).isoformat()


class Database:
    """Handle to a SQLite database file."""

    def __init__(self, path: Path | None = None):
        self.path = Path(path) if path is not None else DEFAULT_DB_PATH

    @contextmanager
    def connect(self) -> Generator[sqlite3.Connection, None, None]:
        """Get database connection as context manager.

        Commits on success, rolls back on error.

        Yields:
            SQLite connection with row factory set to sqlite3.Row

        Example:
            with db.connect() as conn:
                rows = conn.execute("SELECT * FROM profiles").fetchall()
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(self.path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")

        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def __repr__(self) -> str:
        return f"Database({str(self.path)!r})"


def init_db(db_path: Path | None = None) -> Database:
    """Initialize database with schema.

    Creates the database file and all required tables if they don't exist.

    Args:
        db_path: Path to database file. Defaults to db/aeonwise.db

    Returns:
        Database handle for the initialized file
    """
    db = Database(db_path)

    with db.connect() as conn:
        _create_schema(conn)

    logger.info("database.initialized", path=str(db.path))
    return db


def _create_schema(conn: sqlite3.Connection) -> None:
    """Create database schema.

    Uses IF NOT EXISTS for idempotency. List and record fields are
    stored as JSON text.
    """
    conn.executescript(
        """
        -- Credentials for username/password sign-in
        CREATE TABLE IF NOT EXISTS users (
            id TEXT PRIMARY KEY,
            username TEXT NOT NULL UNIQUE,
            password_hash TEXT NOT NULL,
            salt TEXT NOT NULL,
            created_at TEXT NOT NULL
        );

        -- Public profile; points are stored as submitted
        CREATE TABLE IF NOT EXISTS profiles (
            id TEXT PRIMARY KEY,
            username TEXT NOT NULL UNIQUE,
            bio TEXT NOT NULL DEFAULT '',
            skills TEXT NOT NULL DEFAULT '[]',
            learning_goals TEXT NOT NULL DEFAULT '[]',
            work_experience TEXT NOT NULL DEFAULT '[]',
            projects TEXT NOT NULL DEFAULT '[]',
            certifications TEXT NOT NULL DEFAULT '[]',
            points INTEGER NOT NULL DEFAULT 0,
            avatar_url TEXT,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );

        -- One row per (user, course, lesson); writes are upserts
        CREATE TABLE IF NOT EXISTS course_progress (
            user_id TEXT NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
            course_id TEXT NOT NULL,
            lesson_id TEXT NOT NULL,
            code TEXT NOT NULL DEFAULT '',
            completed INTEGER NOT NULL DEFAULT 0,
            completion_time TEXT,
            updated_at TEXT NOT NULL,
            UNIQUE (user_id, course_id, lesson_id)
        );

        -- Points ledger
        CREATE TABLE IF NOT EXISTS rank_points (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id TEXT NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
            source TEXT NOT NULL,
            points INTEGER NOT NULL,
            details TEXT NOT NULL DEFAULT '{}',
            created_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS mentorship_profiles (
            user_id TEXT PRIMARY KEY REFERENCES profiles(id) ON DELETE CASCADE,
            specialty TEXT NOT NULL,
            category TEXT NOT NULL DEFAULT '',
            bio TEXT NOT NULL DEFAULT '',
            price REAL NOT NULL DEFAULT 0,
            currency TEXT NOT NULL DEFAULT 'USD',
            session_length INTEGER NOT NULL DEFAULT 60,
            availability TEXT NOT NULL DEFAULT '',
            rating REAL NOT NULL DEFAULT 0,
            sessions INTEGER NOT NULL DEFAULT 0,
            updated_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS matches (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id TEXT NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
            matched_user_id TEXT NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
            match_score INTEGER NOT NULL,
            status TEXT NOT NULL DEFAULT 'pending'
                CHECK(status IN ('pending', 'accepted', 'completed')),
            created_at TEXT NOT NULL,
            UNIQUE (user_id, matched_user_id)
        );

        -- Indexes
        CREATE INDEX IF NOT EXISTS idx_profiles_points ON profiles(points);
        CREATE INDEX IF NOT EXISTS idx_progress_user_course ON course_progress(user_id, course_id);
        CREATE INDEX IF NOT EXISTS idx_rank_points_user ON rank_points(user_id);
        """
    )
