"""
Window-search verification of HOTP / TOTP codes.

``check_totp`` answers yes/no; ``check_hotp_resync`` returns the absolute
counter that matched so the caller can persist it.
"""

import logging
from typing import Optional, Union

from core.errors import InvalidArgument
from core.hotp import Algorithm, _hotp_value
from core.totp import _now, counter_from_time
from core.utils import (
    MAX_COUNTER,
    as_int,
    constant_time_compare,
    normalise_code,
    to_key,
    validate_counter,
    validate_digits,
)

logger = logging.getLogger(__name__)

DEFAULT_RESYNC_WINDOW = 2


def check_hotp(
    secret: Union[bytes, str],
    counter: int,
    code: Union[str, int],
    digits: int = 6,
    algorithm: Union[Algorithm, str] = Algorithm.SHA1,
) -> bool:
    """Return True if ``code`` is the HOTP value for exactly ``counter``."""
    counter = validate_counter(counter)
    digits = validate_digits(digits)
    expected = _hotp_value(to_key(secret), counter, digits, Algorithm.parse(algorithm))
    return constant_time_compare(normalise_code(code, digits), expected)


def check_totp(
    secret: Union[bytes, str],
    code: Union[str, int],
    time_drift: int = 0,
    digits: int = 6,
    period: int = 30,
    algorithm: Union[Algorithm, str] = Algorithm.SHA1,
    timestamp: Optional[float] = None,
    offset: int = 0,
) -> bool:
    """
    Validate a TOTP code within ±``time_drift`` time steps.

    Args:
        secret:     Raw secret bytes.
        code:       Code to validate.
        time_drift: Allowed skew in steps. 0 accepts the current step only.
        digits:     Expected number of digits.
        period:     Time step in seconds.
        algorithm:  HMAC algorithm.
        timestamp:  Override Unix timestamp.
        offset:     Seconds added to the timestamp before dividing.

    Returns:
        True if the code matches any step in the window.

    Raises:
        InvalidArgument: If ``time_drift`` is negative or not an integer.
    """
    drift = as_int(time_drift)
    if drift is None or drift < 0:
        raise InvalidArgument(f"Invalid time drift supplied: {time_drift!r}")
    digits = validate_digits(digits)
    alg = Algorithm.parse(algorithm)
    key = to_key(secret)
    current = counter_from_time(_now(timestamp), period, offset)
    candidate = normalise_code(code, digits)

    for step in range(-drift, drift + 1):
        counter = current + step
        if counter < 0 or counter > MAX_COUNTER:
            continue
        if constant_time_compare(candidate, _hotp_value(key, counter, digits, alg)):
            if step:
                logger.debug("TOTP accepted at drift %+d step(s)", step)
            return True
    return False


def check_hotp_resync(
    secret: Union[bytes, str],
    counter: int,
    code: Union[str, int],
    counter_window: int = DEFAULT_RESYNC_WINDOW,
    digits: int = 6,
    algorithm: Union[Algorithm, str] = Algorithm.SHA1,
) -> Optional[int]:
    """
    Look ahead from ``counter`` for a matching HOTP code.

    Only ``counter .. counter + counter_window`` is searched; codes for
    earlier counters never match.

    Returns:
        The matching counter value, or None if no step in the window matches.

    Raises:
        InvalidArgument: If ``counter`` or ``counter_window`` is not a
            non-negative integer.
    """
    counter = validate_counter(counter)
    window = validate_counter(counter_window, field="counter_window")
    digits = validate_digits(digits)
    alg = Algorithm.parse(algorithm)
    key = to_key(secret)
    candidate = normalise_code(code, digits)

    for current in range(counter, min(counter + window, MAX_COUNTER) + 1):
        if constant_time_compare(candidate, _hotp_value(key, current, digits, alg)):
            if current != counter:
                logger.debug("HOTP resynchronised %d step(s) ahead", current - counter)
            return current
    return None
