"""
Database Session Management

This module builds the async engine and session factory used by the stores.
It uses the database abstraction layer to support different backends.

Key Features:
- Database abstraction: the adapter is chosen from the DATABASE_URL dialect
- Explicit ownership: the app factory builds one engine per application
  and disposes it on shutdown, nothing is created at import time
- Short-lived sessions: every store operation opens, commits and closes its
  own session, so a caller never holds a transaction across an await on
  something else (e.g. the reachability check)
"""

import logging

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession as SQLModelAsyncSession

from shorturl.db import models  # noqa: F401  (registers tables on SQLModel.metadata)
from shorturl.db.interface import DatabaseAdapter
from shorturl.db.postgres_adapter import PostgreSQLAdapter
from shorturl.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)

_ADAPTERS: dict[str, type[DatabaseAdapter]] = {
    "sqlite": SQLiteAdapter,
    "postgresql": PostgreSQLAdapter,
}


def get_database_adapter(database_url: str) -> DatabaseAdapter:
    """
    Factory function to get the database adapter for a connection string.

    Args:
        database_url: SQLAlchemy URL, e.g. sqlite+aiosqlite:///./shorturl.db

    Returns:
        DatabaseAdapter instance

    Raises:
        ValueError: If the dialect has no adapter
    """
    dialect = make_url(database_url).get_backend_name()
    try:
        return _ADAPTERS[dialect]()
    except KeyError:
        raise ValueError(
            f"Unsupported database dialect '{dialect}'. "
            f"Supported: {', '.join(sorted(_ADAPTERS))}"
        ) from None


def build_engine(database_url: str) -> tuple[AsyncEngine, DatabaseAdapter]:
    """Create the async engine for a connection string along with its adapter."""
    db_adapter = get_database_adapter(database_url)
    engine = db_adapter.create_engine(database_url)
    logger.info(f"Database engine created for dialect '{db_adapter.get_dialect_name()}'")
    return engine, db_adapter


def build_session_maker(engine: AsyncEngine) -> async_sessionmaker:
    """
    Create async session factory.

    expire_on_commit=False keeps returned records readable after the
    session that loaded them is closed.
    """
    return async_sessionmaker(
        engine,
        class_=SQLModelAsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def create_tables(engine: AsyncEngine) -> None:
    """Create any missing tables. Existing tables are left untouched."""
    async with engine.begin() as connection:
        await connection.run_sync(SQLModel.metadata.create_all)
    logger.info("Database tables ensured")
