"""Database module for SQLite persistence.

Provides:
- Database handle and schema initialization
- Repository functions for users, profiles and the points ledger
- Course progress and mentorship repositories
"""

from aeonwise.db.database import Database, init_db

__all__ = ["Database", "init_db"]
