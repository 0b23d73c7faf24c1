"""
Short Code Generator

Turns counter values into short codes.

The alphabet mixes digits, both letter cases and URL-tolerant punctuation,
so codes stay short: one character covers the first 83 URLs, two characters
the next ~6800. Digit 0 of the alphabet is "1", so counter value 0 maps to
"1" and no code is ever empty.

Encoding is positional, most significant digit first, and emits at least one
digit. Because the leading digit of a multi-digit code is never the zero
digit, distinct counter values always produce distinct codes.
"""

ALPHABET = "1234567890qwertyuiopasdfghjklzxcvbnmQWERTYUIOPASDFGHJKLZXCVBNM~!@$%&*()-_=+[];:',./"
ALPHABET_LENGTH = len(ALPHABET)


def generate(counter_value: int) -> str:
    """
    Encode a counter value as a short code.

    Args:
        counter_value: Non-negative integer issued by a counter store

    Returns:
        Short code string

    Example:
        generate(0) -> "1"
        generate(1) -> "2"
        generate(83) -> "21"
    """
    if counter_value < 0:
        raise ValueError(f"counter value must be non-negative, got {counter_value}")

    digits = []
    while True:
        counter_value, remainder = divmod(counter_value, ALPHABET_LENGTH)
        digits.append(ALPHABET[remainder])
        if counter_value == 0:
            break

    return ''.join(reversed(digits))
