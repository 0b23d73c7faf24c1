"""
Database module with abstraction layer.

This module provides:
- DatabaseAdapter interface: Abstract base class for database implementations
- SQLiteAdapter / PostgreSQLAdapter: dialect-specific implementations
- Session management: engine and session factory creation

To add a new database backend:
1. Create a new adapter class inheriting from DatabaseAdapter
2. Implement all abstract methods
3. Register it in get_database_adapter() in session.py
"""

from shorturl.db.interface import DatabaseAdapter
from shorturl.db.session import (
    build_engine,
    build_session_maker,
    create_tables,
    get_database_adapter,
)

__all__ = [
    "DatabaseAdapter",
    "build_engine",
    "build_session_maker",
    "create_tables",
    "get_database_adapter",
]
