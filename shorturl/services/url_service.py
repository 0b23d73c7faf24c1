"""
URL Shortening Service

This service handles the core business logic for URL shortening:
- Validating that a URL is well formed and reachable
- Returning the existing record for an already shortened URL
- Otherwise allocating a counter value, turning it into a short code
  and storing the new record atomically
- Resolving short codes back to records for redirects

Lifecycle of a shortening request:

    Unvalidated -> Validating -> Invalid                      (ValidationFailedError)
                              -> Valid -> Existing             (stored record)
                                       -> Allocating -> Created (new record)
                                                     -> Existing (lost a race)

Design Decisions:
- Counter-based: every code comes from a durable counter, so codes never collide
- Lookup before allocating: resubmitting a URL costs no counter value
- Races on the same URL are settled by the record store's unique index; the
  loser returns the winner's record, so shortening is idempotent
- URLs are compared as exact strings, no normalisation
"""

import logging
from typing import Optional

from shorturl.core.exceptions import ConflictError, ValidationFailedError
from shorturl.core.validators import has_supported_scheme
from shorturl.db.models import ShortURL
from shorturl.services.code_generator import generate
from shorturl.services.counter_store import CounterStore
from shorturl.services.reachability import CheckResult, ReachabilityChecker
from shorturl.services.record_store import URLRecordStore

logger = logging.getLogger(__name__)


class URLShorteningService:
    """
    Core business logic for URL shortening.

    Owns no state of its own: the counter, record store and checker are
    handed in, and all mutation goes through them.
    """

    def __init__(
        self,
        records: URLRecordStore,
        counter: CounterStore,
        checker: ReachabilityChecker
    ):
        """
        Initialize the URL shortening service.

        Args:
            records: Store of url <-> code records
            counter: Durable source of counter values
            checker: Reachability probe run before anything is stored
        """
        self.records = records
        self.counter = counter
        self.checker = checker

    async def validate(self, url: str) -> None:
        """
        Check that a URL may be shortened.

        Raises:
            ValidationFailedError: If the scheme is missing or the URL is not reachable
        """
        if not has_supported_scheme(url):
            raise ValidationFailedError(
                url,
                reason="URL must begin with http:// or https://"
            )

        result = await self.checker.check(url)
        if result is not CheckResult.OK:
            logger.debug(f"Validation failed for {url}: {result.value}")
            raise ValidationFailedError(url, reason=f"URL is not reachable ({result.value})")

    async def create_short_url(self, original_url: str) -> ShortURL:
        """
        Create a new short URL or return existing one if URL was already shortened.

        Args:
            original_url: The long URL to shorten

        Returns:
            ShortURL record for the URL

        Raises:
            ValidationFailedError: If the URL is malformed or unreachable
            StoreUnavailableError: If the counter or record store fails
            CounterCorruptedError: If the persisted counter is invalid
        """
        await self.validate(original_url)

        existing = await self.records.find_by_url(original_url)
        if existing is not None:
            logger.debug(f"Returning existing code '{existing.short_code}' for {original_url}")
            return existing

        counter_value = await self.counter.next()
        short_code = generate(counter_value)

        try:
            short_url = await self.records.insert_if_absent(original_url, short_code)
        except ConflictError as e:
            existing = e.existing
            logger.info(
                f"Concurrent request stored {original_url} first; "
                f"returning '{existing.short_code}', counter value {counter_value} unused"
            )
            return existing

        logger.info(f"Shortened {original_url} to '{short_code}' (counter {counter_value})")
        return short_url

    async def get_original_url(self, short_code: str) -> Optional[ShortURL]:
        """
        Retrieve the record for a given short code.

        Args:
            short_code: The short code to look up

        Returns:
            ShortURL object if found, None otherwise
        """
        return await self.records.find_by_code(short_code)
