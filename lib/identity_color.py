"""Deterministic card color from a user's stable identifier."""

import hashlib

COLOR_DIGITS = 5
DEFAULT_COLOR = 0


def identity_key(user_id: int) -> str:
    """Stable identifier string for a Discord snowflake (lowercase hex)."""
    return format(user_id, "x")


def derive_color(stable_id: str) -> int:
    """Map an identifier to a color in [0, 99999].

    The first 8 bytes of the SHA-256 digest are read as a big-endian
    unsigned integer, and the first five decimal digits of that number
    become the color.
    """
    digest = hashlib.sha256(stable_id.encode("utf-8")).digest()
    number = int.from_bytes(digest[:8], "big")
    try:
        return int(str(number)[:COLOR_DIGITS])
    except ValueError:
        return DEFAULT_COLOR
