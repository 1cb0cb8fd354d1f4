"""
Argument validation helpers shared by the OTP engine and the URI builder.
"""

import hmac
import re
from typing import Optional, Union

from core.errors import InvalidArgument

# 8-byte big-endian counter (RFC 4226 §5.2)
MAX_COUNTER = 2**64 - 1

_INT_RE = re.compile(r"[+-]?\d+")


# ── Integer coercion ──────────────────────────────────────────────────────────

def as_int(value: object) -> Optional[int]:
    """
    Return ``value`` as an ``int`` if it represents a whole number.

    Accepts ints, integral floats and decimal strings. Booleans are rejected
    even though ``bool`` subclasses ``int``.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str) and _INT_RE.fullmatch(value.strip()):
        return int(value.strip())
    return None


# ── Validation ────────────────────────────────────────────────────────────────

def validate_counter(value: object, field: str = "counter") -> int:
    """
    Validate an HOTP counter (or a counter-like window size).

    Raises:
        InvalidArgument: If ``value`` is not an integer in ``0 .. 2**64-1``.
    """
    counter = as_int(value)
    if counter is None or counter < 0 or counter > MAX_COUNTER:
        raise InvalidArgument(f"Invalid {field} supplied: {value!r}")
    return counter


def validate_digits(digits: object) -> int:
    value = as_int(digits)
    if value not in (6, 8):
        raise InvalidArgument(f"Digits must be 6 or 8, got {digits!r}")
    return value


def validate_period(period: object) -> int:
    value = as_int(period)
    if value is None or value < 1:
        raise InvalidArgument(f"Period must be a positive integer, got {period!r}")
    return value


def validate_offset(offset: object) -> int:
    value = as_int(offset)
    if value is None:
        raise InvalidArgument(f"Offset must be an integer, got {offset!r}")
    return value


# ── Secrets / codes ───────────────────────────────────────────────────────────

def to_key(secret: Union[bytes, str]) -> bytes:
    """
    Return the raw HMAC key for ``secret``.

    Strings are UTF-8 encoded as-is; no base32 decoding is attempted.
    """
    if isinstance(secret, (bytes, bytearray)):
        return bytes(secret)
    if isinstance(secret, str):
        return secret.encode("utf-8")
    raise InvalidArgument(f"Secret must be bytes or str, got {type(secret).__name__}")


def normalise_code(code: Union[str, int], digits: int) -> str:
    """Strip a user-typed code, or zero-pad an integer one to ``digits``."""
    if isinstance(code, int) and not isinstance(code, bool):
        return str(code).zfill(digits)
    return str(code).strip()


def constant_time_compare(a: str, b: str) -> bool:
    """Return True if *a* == *b* in constant time (timing-safe)."""
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))
