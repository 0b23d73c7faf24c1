"""
Counter Stores

Durable sources of the integers that short codes are generated from.

Contract shared by every backend:
- next() returns the current value and durably stores current + 1 before
  any other caller can observe a result, so no value is ever handed out
  twice and none is skipped on the success path
- if the increment cannot be persisted, next() raises instead of returning
- a missing counter starts at 0; an unreadable one raises
  CounterCorruptedError and is never reset

Backends:
- DatabaseCounterStore: a row in the `counters` table, advanced with a
  compare-and-swap UPDATE so several processes can share one database
- FileCounterStore: a flat file holding the decimal value, replaced
  atomically on every increment (single process only)
"""

import asyncio
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from shorturl.core.exceptions import CounterCorruptedError, StoreUnavailableError
from shorturl.db.interface import DatabaseAdapter
from shorturl.db.models import Counter

logger = logging.getLogger(__name__)

# Lost CAS races before giving up; each loss means another writer made progress
MAX_CAS_ATTEMPTS = 50


def _validate_counter_value(raw: Any) -> int:
    """Return raw as a counter value, or raise CounterCorruptedError."""
    if isinstance(raw, bool) or not isinstance(raw, int) or raw < 0:
        raise CounterCorruptedError(raw)
    return raw


class CounterStore(ABC):
    """Durable, strictly increasing integer sequence."""

    @abstractmethod
    async def next(self) -> int:
        """
        Allocate the next counter value.

        Returns:
            A value no other caller has received or will receive

        Raises:
            StoreUnavailableError: If the increment could not be persisted
            CounterCorruptedError: If the persisted value is invalid
        """
        pass

    @abstractmethod
    async def peek(self) -> int:
        """Return the value the next call to next() would allocate, without allocating it."""
        pass


class DatabaseCounterStore(CounterStore):
    """
    Counter persisted as a named row in the `counters` table.

    Callers inside one process are serialised by an asyncio.Lock. Across
    processes the advance is a compare-and-swap: the UPDATE only matches if
    the row still holds the value we read, otherwise we lost a race and read
    again.
    """

    def __init__(
        self,
        session_maker: async_sessionmaker,
        db_adapter: DatabaseAdapter,
        name: str = "short_code"
    ):
        """
        Initialize the counter store.

        Args:
            session_maker: Factory for short-lived database sessions
            db_adapter: Adapter for the database dialect (insert-or-ignore)
            name: Counter row name
        """
        self.session_maker = session_maker
        self.db_adapter = db_adapter
        self.name = name
        self._lock = asyncio.Lock()

    async def _read(self, session) -> Optional[int]:
        statement = select(Counter.value).where(Counter.name == self.name)
        result = await session.execute(statement)
        row = result.first()
        if row is None:
            return None
        return _validate_counter_value(row[0])

    async def _create_row(self, session) -> None:
        statement = self.db_adapter.insert_ignore(Counter.__table__, {"name": self.name, "value": 0})
        await session.execute(statement)
        await session.commit()
        logger.info(f"Counter '{self.name}' initialised at 0")

    async def next(self) -> int:
        async with self._lock:
            for attempt in range(1, MAX_CAS_ATTEMPTS + 1):
                async with self.session_maker() as session:
                    try:
                        current = await self._read(session)
                        if current is None:
                            await self._create_row(session)
                            continue

                        statement = (
                            update(Counter)
                            .where(Counter.name == self.name, Counter.value == current)
                            .values(value=current + 1)
                            .execution_options(synchronize_session=False)
                        )
                        result = await session.execute(statement)
                        if result.rowcount != 1:
                            await session.rollback()
                            logger.debug(
                                f"Counter '{self.name}' moved past {current}, retrying "
                                f"(attempt {attempt})"
                            )
                            continue

                        await session.commit()
                        logger.debug(f"Counter '{self.name}' allocated {current}")
                        return current
                    except SQLAlchemyError as e:
                        await session.rollback()
                        logger.error(f"Failed to advance counter '{self.name}': {e}", exc_info=True)
                        raise StoreUnavailableError(
                            f"failed to advance counter '{self.name}'",
                            original_error=e
                        ) from e

            raise StoreUnavailableError(
                f"counter '{self.name}' is under too much contention "
                f"({MAX_CAS_ATTEMPTS} lost updates)"
            )

    async def peek(self) -> int:
        async with self.session_maker() as session:
            try:
                current = await self._read(session)
            except SQLAlchemyError as e:
                raise StoreUnavailableError(
                    f"failed to read counter '{self.name}'",
                    original_error=e
                ) from e
        return 0 if current is None else current


class FileCounterStore(CounterStore):
    """
    Counter persisted as a decimal number in a flat file.

    The new value is written to a sibling temp file, fsynced, then renamed
    over the counter file, so a crash leaves either the old or the new
    value on disk, never a torn write. File I/O runs in a worker thread to
    keep the event loop free.

    Only safe for a single process: the lock is in-memory.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._tmp_path = self.path.with_name(self.path.name + ".tmp")
        self._lock = asyncio.Lock()

    def _read_sync(self) -> int:
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            return 0
        except OSError as e:
            raise StoreUnavailableError(f"cannot read counter file {self.path}", original_error=e) from e

        try:
            text = raw.decode("ascii").strip()
        except UnicodeDecodeError:
            raise CounterCorruptedError(raw) from None

        # An empty file is corruption, not a fresh counter
        if not text.isdigit():
            raise CounterCorruptedError(raw)
        return int(text)

    def _write_sync(self, value: int) -> None:
        try:
            with open(self._tmp_path, "w", encoding="ascii") as fh:
                fh.write(str(value))
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(self._tmp_path, self.path)
        except OSError as e:
            raise StoreUnavailableError(f"cannot write counter file {self.path}", original_error=e) from e

    def _advance_sync(self) -> int:
        current = self._read_sync()
        self._write_sync(current + 1)
        return current

    async def next(self) -> int:
        async with self._lock:
            try:
                current = await asyncio.to_thread(self._advance_sync)
            except StoreUnavailableError as e:
                logger.error(f"Failed to advance counter file {self.path}: {e}", exc_info=True)
                raise
        logger.debug(f"Counter file {self.path} allocated {current}")
        return current

    async def peek(self) -> int:
        return await asyncio.to_thread(self._read_sync)
