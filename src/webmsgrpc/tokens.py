"""Token generation for call correlation and callback naming."""

from __future__ import annotations

import secrets
import time
from typing import Final

_ALPHABET: Final[str] = "0123456789abcdefghijklmnopqrstuvwxyz"

# Random component length in base-36 digits (~62 bits of entropy)
RANDOM_DIGITS: Final[int] = 12


def to_base36(value: int) -> str:
    """Encode a non-negative integer in lowercase base 36."""
    if value < 0:
        msg = f"Cannot encode negative value: {value}"
        raise ValueError(msg)
    if value == 0:
        return "0"
    digits: list[str] = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_ALPHABET[rem])
    return "".join(reversed(digits))


def generate_token() -> str:
    """Generate an opaque token: millisecond timestamp plus random suffix.

    Both parts are base 36, so tokens look like the ones produced by
    JavaScript peers (``Date.now().toString(36) + random``).
    """
    timestamp = to_base36(time.time_ns() // 1_000_000)
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(RANDOM_DIGITS))
    return timestamp + suffix
