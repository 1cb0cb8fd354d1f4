"""
HOTP (HMAC-based One-Time Password) implementation following RFC 4226.
"""

import hmac
import struct
from enum import Enum
from typing import Union

from core.errors import InvalidArgument
from core.utils import to_key, validate_counter, validate_digits


class Algorithm(str, Enum):
    """Supported HMAC algorithms."""

    SHA1 = "SHA1"
    SHA256 = "SHA256"
    SHA512 = "SHA512"

    @classmethod
    def parse(cls, name: Union["Algorithm", str]) -> "Algorithm":
        """Look up an algorithm by name, case-insensitively."""
        if isinstance(name, cls):
            return name
        try:
            return cls(str(name).upper().replace("-", ""))
        except ValueError:
            supported = ", ".join(a.value for a in cls)
            raise InvalidArgument(
                f"Unsupported algorithm {name!r}. Supported: {supported}."
            ) from None

    @property
    def hash_name(self) -> str:
        """hashlib name of the digest (``sha1`` / ``sha256`` / ``sha512``)."""
        return _ALG_MAP[self]


_ALG_MAP: dict[str, str] = {
    Algorithm.SHA1: "sha1",
    Algorithm.SHA256: "sha256",
    Algorithm.SHA512: "sha512",
}


def dynamic_truncate(digest: bytes) -> int:
    """
    Dynamic truncation (RFC 4226 §5.3).

    Picks four bytes at the offset given by the low nibble of the last byte
    and clears the top bit, yielding a 31-bit integer.
    """
    offset = digest[-1] & 0x0F
    return (
        (digest[offset] & 0x7F) << 24
        | (digest[offset + 1] & 0xFF) << 16
        | (digest[offset + 2] & 0xFF) << 8
        | (digest[offset + 3] & 0xFF)
    )


def _hotp_value(key: bytes, counter: int, digits: int, algorithm: Algorithm) -> str:
    # Inputs are already validated by the caller.
    msg = struct.pack(">Q", counter)
    digest = hmac.new(key, msg, algorithm.hash_name).digest()
    otp = dynamic_truncate(digest) % (10**digits)
    return str(otp).zfill(digits)


def generate_hotp(
    secret: Union[bytes, str],
    counter: int,
    digits: int = 6,
    algorithm: Union[Algorithm, str] = Algorithm.SHA1,
) -> str:
    """
    Generate an HOTP code.

    Args:
        secret:    Raw secret bytes (a str is UTF-8 encoded, not base32-decoded).
        counter:   Synchronisation counter value.
        digits:    Number of OTP digits (6 or 8).
        algorithm: HMAC algorithm.

    Returns:
        Zero-padded OTP string.

    Raises:
        InvalidArgument: If the counter is negative, non-numeric or wider
            than 64 bits, or digits/algorithm are unsupported.
    """
    counter = validate_counter(counter)
    digits = validate_digits(digits)
    return _hotp_value(to_key(secret), counter, digits, Algorithm.parse(algorithm))
