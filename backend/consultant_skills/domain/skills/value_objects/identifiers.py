"""Identifier generation and skill-name normalization."""

import secrets
import string
import time

_BASE36_DIGITS = string.digits + string.ascii_uppercase

RECORD_CODE_PREFIX = "SKR-"
COURSE_ID_PREFIX = "CRS-"


def to_base36(value: int) -> str:
    """Encode a non-negative integer in upper-case base 36."""
    if value < 0:
        raise ValueError(f"Cannot base36-encode negative value {value}")
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36_DIGITS[remainder])
    return "".join(reversed(digits))


def generate_record_code(now_ms: int | None = None) -> str:
    """
    Generate a human-readable skill record code.

    Format: ``SKR-<base36 millisecond timestamp><6 hex chars>``, upper case.
    Uniqueness is guaranteed by the store's unique index, not by this function.
    """
    now_ms = int(time.time() * 1000) if now_ms is None else now_ms
    return f"{RECORD_CODE_PREFIX}{to_base36(now_ms)}{secrets.token_hex(3).upper()}"


def generate_object_id() -> str:
    """Generate an opaque 24-hex-character store key."""
    return secrets.token_hex(12)


def generate_course_id(now_ms: int | None = None) -> str:
    now_ms = int(time.time() * 1000) if now_ms is None else now_ms
    return f"{COURSE_ID_PREFIX}{now_ms}"


def normalize_skill_name(name: str) -> str:
    """Normalize a skill name for uniqueness checks and matching."""
    return name.strip().lower()


def is_object_id(value: str) -> bool:
    """Check whether a value looks like an opaque store key."""
    return len(value) == 24 and all(c in string.hexdigits for c in value)
