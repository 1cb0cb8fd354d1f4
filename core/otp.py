"""
Engine facade bundling an immutable :class:`OtpConfig` with the HOTP / TOTP
generators and verifiers.

Every call reads ``self._config`` once and works on that snapshot, so a
concurrent ``set_*`` call never changes parameters halfway through a
computation.
"""

import dataclasses
from dataclasses import dataclass
from typing import Optional, Union

from core.hotp import Algorithm, generate_hotp
from core.totp import generate_totp
from core.utils import validate_digits, validate_offset, validate_period
from core.verify import DEFAULT_RESYNC_WINDOW, check_hotp, check_hotp_resync, check_totp

# ── Constants ────────────────────────────────────────────────────────────────

DEFAULT_DIGITS = 6
DEFAULT_PERIOD = 30


# ── Configuration ────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class OtpConfig:
    """Validated OTP parameters."""

    algorithm: Algorithm = Algorithm.SHA1
    digits: int = DEFAULT_DIGITS
    period: int = DEFAULT_PERIOD
    totp_offset: int = 0

    def __post_init__(self) -> None:
        # Frozen: normalise through object.__setattr__.
        object.__setattr__(self, "algorithm", Algorithm.parse(self.algorithm))
        object.__setattr__(self, "digits", validate_digits(self.digits))
        object.__setattr__(self, "period", validate_period(self.period))
        object.__setattr__(self, "totp_offset", validate_offset(self.totp_offset))

    def replace(self, **changes) -> "OtpConfig":
        """Return a revalidated copy with ``changes`` applied."""
        return dataclasses.replace(self, **changes)


# ── Engine ───────────────────────────────────────────────────────────────────

class Otp:
    """
    HOTP / TOTP generator and verifier.

    Usage::

        otp = Otp().set_digits(8)
        code = otp.totp(b"12345678901234567890", timestamp=59)
        assert otp.check_totp(b"12345678901234567890", code, timestamp=59)
    """

    def __init__(self, config: Optional[OtpConfig] = None) -> None:
        self._config = config or OtpConfig()

    # ── Configuration ────────────────────────────────────────────────────

    @property
    def config(self) -> OtpConfig:
        return self._config

    @property
    def algorithm(self) -> str:
        """hashlib name of the configured digest, e.g. ``sha1``."""
        return self._config.algorithm.hash_name

    @property
    def digits(self) -> int:
        return self._config.digits

    @property
    def period(self) -> int:
        return self._config.period

    @property
    def totp_offset(self) -> int:
        return self._config.totp_offset

    def set_algorithm(self, algorithm: Union[Algorithm, str]) -> "Otp":
        self._config = self._config.replace(algorithm=algorithm)
        return self

    def set_digits(self, digits: int) -> "Otp":
        self._config = self._config.replace(digits=digits)
        return self

    def set_period(self, period: int) -> "Otp":
        self._config = self._config.replace(period=period)
        return self

    def set_totp_offset(self, offset: int) -> "Otp":
        self._config = self._config.replace(totp_offset=offset)
        return self

    # ── Generation ───────────────────────────────────────────────────────

    def hotp(self, secret: Union[bytes, str], counter: int) -> str:
        cfg = self._config
        return generate_hotp(secret, counter, cfg.digits, cfg.algorithm)

    def totp(self, secret: Union[bytes, str], timestamp: Optional[float] = None) -> str:
        """TOTP code for ``timestamp`` (current time if None)."""
        cfg = self._config
        return generate_totp(
            secret,
            digits=cfg.digits,
            period=cfg.period,
            algorithm=cfg.algorithm,
            timestamp=timestamp,
            offset=cfg.totp_offset,
        )

    # ── Verification ─────────────────────────────────────────────────────

    def check_hotp(self, secret: Union[bytes, str], counter: int, code: Union[str, int]) -> bool:
        cfg = self._config
        return check_hotp(secret, counter, code, cfg.digits, cfg.algorithm)

    def check_totp(
        self,
        secret: Union[bytes, str],
        code: Union[str, int],
        time_drift: int = 0,
        timestamp: Optional[float] = None,
    ) -> bool:
        cfg = self._config
        return check_totp(
            secret,
            code,
            time_drift,
            digits=cfg.digits,
            period=cfg.period,
            algorithm=cfg.algorithm,
            timestamp=timestamp,
            offset=cfg.totp_offset,
        )

    def check_hotp_resync(
        self,
        secret: Union[bytes, str],
        counter: int,
        code: Union[str, int],
        counter_window: int = DEFAULT_RESYNC_WINDOW,
    ) -> Optional[int]:
        """
        Search ``counter .. counter + counter_window`` for ``code``.

        Returns the matching counter (persist it as the new synchronised
        value) or None.
        """
        cfg = self._config
        return check_hotp_resync(
            secret, counter, code, counter_window, cfg.digits, cfg.algorithm
        )
