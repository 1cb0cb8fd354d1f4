"""
Random shared secrets and recovery codes.

Both draw from :mod:`secrets` (the OS CSPRNG).
"""

import secrets
from typing import List

from core.errors import InvalidArgument
from core.utils import as_int

# ── Constants ────────────────────────────────────────────────────────────────

BASE32_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ234567"
SECRET_LENGTH = 16          # 80 bits of base32
RECOVERY_CODE_LENGTH = 9


def _positive(value: object, field: str) -> int:
    number = as_int(value)
    if number is None or number < 1:
        raise InvalidArgument(f"{field} must be a positive integer, got {value!r}")
    return number


def generate_secret(length: int = SECRET_LENGTH) -> str:
    """Return a random base32 string (``A-Z2-7``) of ``length`` characters."""
    length = _positive(length, "length")
    return "".join(secrets.choice(BASE32_ALPHABET) for _ in range(length))


def generate_recovery_codes(
    count: int = 1,
    length: int = RECOVERY_CODE_LENGTH,
) -> List[str]:
    """
    Return ``count`` distinct numeric recovery codes of ``length`` digits.

    Raises:
        InvalidArgument: If ``count`` or ``length`` is not positive, or more
            distinct codes are requested than ``length`` digits allow.
    """
    count = _positive(count, "count")
    length = _positive(length, "length")
    if count > 10**length:
        raise InvalidArgument(
            f"Cannot generate {count} distinct codes of {length} digit(s)"
        )

    codes: List[str] = []
    seen = set()
    while len(codes) < count:
        code = str(secrets.randbelow(10**length)).zfill(length)
        if code not in seen:
            seen.add(code)
            codes.append(code)
    return codes
