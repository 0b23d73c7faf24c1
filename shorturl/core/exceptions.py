"""
Custom Exceptions

This module defines the error taxonomy of the shortening core.

- ValidationFailedError: the URL is malformed or not reachable (client error)
- StoreUnavailableError: counter or record storage failed (server error)
- ConflictError: a concurrent request stored the URL first (internal only)
- CounterCorruptedError: the persisted counter cannot be trusted (fatal)
"""

from typing import Any, Optional


class URLShortenerException(Exception):
    """Base exception for URL shortener service."""
    pass


class ValidationFailedError(URLShortenerException):
    """Raised when a URL is malformed or its reachability check fails."""

    def __init__(self, url: str, reason: str = "URL is not reachable"):
        self.url = url
        self.reason = reason
        super().__init__(f"{reason}: {url}")


class StoreUnavailableError(URLShortenerException):
    """Raised when the counter or record store cannot complete an operation."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.original_error = original_error
        super().__init__(f"Store unavailable: {message}")


class ConflictError(URLShortenerException):
    """
    Raised by insert_if_absent when a record for the URL already exists.

    Carries the record that won the race so callers do not need a second
    round trip. Never surfaced to HTTP clients.
    """

    def __init__(self, url: str, existing: Any = None):
        self.url = url
        self.existing = existing
        super().__init__(f"A record already exists for URL: {url}")


class CounterCorruptedError(URLShortenerException):
    """Raised when the persisted counter value is unreadable or invalid."""

    def __init__(self, raw_value: Any):
        self.raw_value = raw_value
        super().__init__(
            f"Persisted counter value {raw_value!r} is not a non-negative integer; "
            "refusing to allocate short codes until it is repaired"
        )
