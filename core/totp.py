"""
TOTP (Time-based One-Time Password) implementation following RFC 6238.

Produces codes identical to Google Authenticator.
"""

import math
import time
from typing import Optional, Union

from core.hotp import Algorithm, generate_hotp
from core.utils import validate_offset, validate_period


def _now(timestamp: Optional[float]) -> float:
    return timestamp if timestamp is not None else time.time()


def counter_from_time(timestamp: float, period: int = 30, offset: int = 0) -> int:
    """Return ``floor((timestamp + offset) / period)``."""
    period = validate_period(period)
    offset = validate_offset(offset)
    return math.floor((timestamp + offset) / period)


def generate_totp(
    secret: Union[bytes, str],
    digits: int = 6,
    period: int = 30,
    algorithm: Union[Algorithm, str] = Algorithm.SHA1,
    timestamp: Optional[float] = None,
    offset: int = 0,
) -> str:
    """
    Generate a TOTP code.

    Args:
        secret:    Raw secret bytes.
        digits:    Number of digits in the OTP (default 6).
        period:    Time step in seconds (default 30).
        algorithm: HMAC algorithm (default SHA1 for GA compatibility).
        timestamp: Override Unix timestamp (uses time.time() if None).
        offset:    Seconds added to the timestamp before dividing.

    Returns:
        OTP string, zero-padded to ``digits`` characters.
    """
    counter = counter_from_time(_now(timestamp), period, offset)
    return generate_hotp(secret, counter, digits, algorithm)


def remaining_seconds(
    period: int = 30,
    timestamp: Optional[float] = None,
    offset: int = 0,
) -> int:
    """Return seconds until the current TOTP window expires."""
    period = validate_period(period)
    t = int(math.floor(_now(timestamp))) + validate_offset(offset)
    return period - (t % period)
