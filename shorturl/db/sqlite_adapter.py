"""
SQLite Database Adapter

This module implements the DatabaseAdapter interface for SQLite.
All SQLite-specific configuration and behavior is encapsulated here.

SQLite is a file-based database that's perfect for:
- Local development
- Testing
- Single-instance deployments

Key characteristics:
- File-based (single .db file)
- Single writer at a time (file locking)
- Excellent for reads, limited concurrent writes
"""

from typing import Any

from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.pool import NullPool
from sqlalchemy.sql.dml import Insert

from shorturl.db.interface import DatabaseAdapter

# Seconds a writer waits for the file lock before failing with "database is locked"
SQLITE_BUSY_TIMEOUT = 30


class SQLiteAdapter(DatabaseAdapter):
    """
    SQLite database adapter implementation.

    Every session gets its own connection (NullPool); SQLite's file lock
    serialises writers and the busy timeout makes concurrent writers queue
    instead of failing.
    """

    def get_pool_class(self) -> type[NullPool]:
        """
        Get the connection pool class for SQLite.

        Returns:
            NullPool class
        """
        return NullPool

    def get_connect_args(self) -> dict[str, Any]:
        """
        Get SQLite-specific connection arguments.

        - check_same_thread=False: Required for async SQLite operations
        - timeout: busy timeout while another connection holds the write lock
        """
        return {
            "check_same_thread": False,
            "timeout": SQLITE_BUSY_TIMEOUT,
        }

    def get_engine_kwargs(self) -> dict[str, Any]:
        return {
            "echo": False  # Set to True only for SQL debugging in development
        }

    def insert_ignore(self, table: Any, values: dict[str, Any]) -> Insert:
        """Build INSERT ... ON CONFLICT DO NOTHING for SQLite."""
        return sqlite_insert(table).values(**values).on_conflict_do_nothing()

    def get_dialect_name(self) -> str:
        return "sqlite"
