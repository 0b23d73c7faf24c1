"""
URL Record Store

Keyed access to ShortURL records in both directions (url -> code and
code -> url) plus the one write the core needs: insert-if-absent.

Uniqueness of original_url and short_code is enforced by the table's
unique indexes. insert_if_absent therefore does not look before it leaps:
it inserts and lets the database reject the loser of a race.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from shorturl.core.exceptions import ConflictError, StoreUnavailableError
from shorturl.db.models import ShortURL

logger = logging.getLogger(__name__)


class URLRecordStore:
    """
    Durable url <-> short code mapping.

    Records are immutable once stored; there is no update or delete.
    """

    def __init__(self, session_maker: async_sessionmaker):
        """
        Initialize the record store.

        Args:
            session_maker: Factory for short-lived database sessions
        """
        self.session_maker = session_maker

    async def _find_one(self, *criteria) -> Optional[ShortURL]:
        statement = select(ShortURL).where(*criteria).limit(1)
        async with self.session_maker() as session:
            try:
                result = await session.execute(statement)
                return result.scalars().first()
            except SQLAlchemyError as e:
                logger.error(f"Record lookup failed: {e}", exc_info=True)
                raise StoreUnavailableError("record lookup failed", original_error=e) from e

    async def find_by_url(self, url: str) -> Optional[ShortURL]:
        """
        Look up the record for an original URL (exact string match).

        Returns:
            ShortURL if found, None otherwise

        Raises:
            StoreUnavailableError: If the database cannot be queried
        """
        return await self._find_one(ShortURL.original_url == url)

    async def find_by_code(self, code: str) -> Optional[ShortURL]:
        """
        Look up the record for a short code.

        Returns:
            ShortURL if found, None otherwise

        Raises:
            StoreUnavailableError: If the database cannot be queried
        """
        return await self._find_one(ShortURL.short_code == code)

    async def insert_if_absent(self, url: str, code: str) -> ShortURL:
        """
        Store a new url -> code record unless the URL is already stored.

        Args:
            url: The original URL
            code: Freshly allocated short code

        Returns:
            The stored record

        Raises:
            ConflictError: If a record for url already exists (carries it)
            StoreUnavailableError: On database failure, or if code was
                already issued to a different URL
        """
        record = ShortURL(original_url=url, short_code=code)

        async with self.session_maker() as session:
            try:
                session.add(record)
                await session.commit()
                await session.refresh(record)
                return record
            except IntegrityError as e:
                await session.rollback()
                integrity_error = e
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"Failed to insert record for {url}: {e}", exc_info=True)
                raise StoreUnavailableError(
                    f"failed to insert record for {url}",
                    original_error=e
                ) from e

        # A unique index rejected the row: find out which one
        existing = await self.find_by_url(url)
        if existing is not None:
            logger.debug(f"Insert for {url} lost a race to code '{existing.short_code}'")
            raise ConflictError(url, existing=existing)

        logger.error(f"Short code '{code}' is already assigned to another URL")
        raise StoreUnavailableError(
            f"short code '{code}' was already issued; the counter may have been reset",
            original_error=integrity_error
        )
