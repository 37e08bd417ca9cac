"""Database module for SQLite persistence.

Provides:
- Database connection management
- Schema initialization
- Repository functions per content collection (subjects/programs,
  homework, lessons, past papers, topic vault)
"""

from proacademics.db.database import get_db, init_db

__all__ = ["get_db", "init_db"]
