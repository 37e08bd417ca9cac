"""SQLite database connection and schema management.

Each content collection is one table. Scalar fields are columns; nested
lists (homework question sets, past paper sections, topic subtopics) are
stored as JSON text and queried with SQLite's JSON1 functions.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

import structlog

from proacademics.config.app_config import load_app_config

logger = structlog.get_logger(__name__)

# Current database file (set by init_db)
_db_path: Path | None = None


def _default_db_path() -> Path:
    return Path(load_app_config().database.path)


def current_db_path() -> Path:
    """Path of the database used by get_db()."""
    return _db_path or _default_db_path()


def init_db(db_path: Path | None = None) -> None:
    """Initialize database with schema.

    Creates the database file and all required tables if they don't exist.

    Args:
        db_path: Path to database file. Defaults to the configured path
    """
    global _db_path
    _db_path = Path(db_path) if db_path else _default_db_path()

    _db_path.parent.mkdir(parents=True, exist_ok=True)

    with get_db() as conn:
        _create_schema(conn)

    logger.info("database.initialized", path=str(_db_path))


@contextmanager
def get_db() -> Generator[sqlite3.Connection, None, None]:
    """Get database connection as context manager.

    Yields:
        SQLite connection with row factory set to sqlite3.Row

    Example:
        with get_db() as conn:
            rows = conn.execute("SELECT * FROM lessons").fetchall()
    """
    db_path = current_db_path()
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    # SQLite's LOWER() only folds ASCII; search uses this instead
    conn.create_function("casefold", 1, _casefold, deterministic=True)

    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def _casefold(value):
    return value.casefold() if isinstance(value, str) else value


def ping() -> bool:
    """Return True if the database answers a trivial query."""
    try:
        with get_db() as conn:
            conn.execute("SELECT 1").fetchone()
    except sqlite3.Error as e:
        logger.warning("database.ping_failed", error=str(e))
        return False
    return True


def _create_schema(conn: sqlite3.Connection) -> None:
    """Create database schema.

    Uses IF NOT EXISTS for idempotency.
    """
    conn.executescript(
        """
        -- Subjects and their programs (one subject -> many programs)
        CREATE TABLE IF NOT EXISTS subjects (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            color TEXT NOT NULL,
            is_active INTEGER NOT NULL DEFAULT 1,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS programs (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            subject_id TEXT NOT NULL REFERENCES subjects(id) ON DELETE CASCADE,
            color TEXT NOT NULL,
            is_active INTEGER NOT NULL DEFAULT 1,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS homework (
            id TEXT PRIMARY KEY,
            homework_name TEXT NOT NULL,
            subject TEXT NOT NULL,
            program TEXT NOT NULL,
            topic TEXT NOT NULL,
            subtopic TEXT NOT NULL,
            level TEXT NOT NULL CHECK(level IN ('easy', 'medium', 'hard')),
            teacher TEXT NOT NULL,
            date_assigned TEXT NOT NULL,
            due_date TEXT NOT NULL,
            estimated_time INTEGER NOT NULL DEFAULT 30,
            xp_awarded INTEGER NOT NULL DEFAULT 100,
            question_set TEXT NOT NULL DEFAULT '[]',
            total_questions INTEGER NOT NULL DEFAULT 0,
            completed_questions INTEGER NOT NULL DEFAULT 0,
            completion_status TEXT NOT NULL DEFAULT 'not_started',
            xp_earned INTEGER NOT NULL DEFAULT 0,
            status TEXT NOT NULL DEFAULT 'draft' CHECK(status IN ('draft', 'active')),
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS lessons (
            id TEXT PRIMARY KEY,
            title TEXT NOT NULL,
            subject TEXT NOT NULL,
            program TEXT NOT NULL DEFAULT '',
            subtopic TEXT NOT NULL DEFAULT '',
            type TEXT NOT NULL DEFAULT 'Lesson',
            teacher TEXT NOT NULL DEFAULT '',
            duration TEXT NOT NULL DEFAULT '',
            description TEXT NOT NULL DEFAULT '',
            video_url TEXT NOT NULL DEFAULT '',
            zoom_link TEXT NOT NULL DEFAULT '',
            scheduled_date TEXT NOT NULL DEFAULT '',
            time TEXT NOT NULL DEFAULT '',
            week TEXT NOT NULL DEFAULT '',
            grade TEXT NOT NULL DEFAULT '',
            status TEXT NOT NULL DEFAULT 'draft' CHECK(status IN ('draft', 'active')),
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS pastpapers (
            id TEXT PRIMARY KEY,
            paper_name TEXT NOT NULL,
            board TEXT NOT NULL,
            year INTEGER NOT NULL,
            subject TEXT NOT NULL,
            program TEXT NOT NULL,
            status TEXT NOT NULL DEFAULT 'draft' CHECK(status IN ('draft', 'active')),
            papers TEXT NOT NULL DEFAULT '[]',
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );

        -- Topic vault: topic containers with ordered video subtopics
        CREATE TABLE IF NOT EXISTS topics (
            id TEXT PRIMARY KEY,
            topic_name TEXT NOT NULL,
            subject TEXT NOT NULL,
            program TEXT NOT NULL,
            description TEXT NOT NULL DEFAULT '',
            status TEXT NOT NULL DEFAULT 'draft' CHECK(status IN ('draft', 'active')),
            subtopics TEXT NOT NULL DEFAULT '[]',
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );

        CREATE INDEX IF NOT EXISTS idx_programs_subject ON programs(subject_id);
        CREATE INDEX IF NOT EXISTS idx_homework_subject_program ON homework(subject, program);
        CREATE INDEX IF NOT EXISTS idx_lessons_subject_program ON lessons(subject, program);
        CREATE INDEX IF NOT EXISTS idx_pastpapers_subject ON pastpapers(subject);
        CREATE INDEX IF NOT EXISTS idx_topics_subject_program ON topics(subject, program);
        """
    )
