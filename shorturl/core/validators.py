"""
Input Validators

Cheap syntactic checks applied before any storage or network work.
Reachability (is the URL actually fetchable) is handled by the
reachability checker, not here.
"""

from typing import Optional

from shorturl.services.code_generator import ALPHABET

SUPPORTED_SCHEMES = ("http://", "https://")

# 83**16 is far beyond any counter value a 64-bit store can hold
MAX_SHORT_CODE_LENGTH = 16

_ALPHABET_SET = frozenset(ALPHABET)


def has_supported_scheme(url: str) -> bool:
    """
    Check that a URL begins with http:// or https://.

    The comparison is an exact prefix match; scheme case is not normalised.
    """
    return bool(url) and url.startswith(SUPPORTED_SCHEMES)


def sanitize_short_code(short_code: str) -> Optional[str]:
    """
    Validate short code format.

    A code can only be one we could have issued: non-empty, bounded in
    length and made only of alphabet characters.

    Args:
        short_code: The short code taken from the request path

    Returns:
        The short code if it is well formed, None otherwise
    """
    if not short_code or not isinstance(short_code, str):
        return None

    if len(short_code) > MAX_SHORT_CODE_LENGTH:
        return None

    if not set(short_code) <= _ALPHABET_SET:
        return None

    return short_code
