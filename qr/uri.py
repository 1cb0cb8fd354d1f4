"""
Build otpauth:// URIs as defined by the Google Authenticator Key URI Format,
and chart-service URLs that render them as QR codes.

Reference: https://github.com/google/google-authenticator/wiki/Key-Uri-Format
"""

import dataclasses
import logging
import urllib.parse
from collections import defaultdict, deque
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple, Union

from core.errors import InvalidArgument
from core.utils import as_int, validate_counter

logger = logging.getLogger(__name__)

ALLOWED_TYPES = ("hotp", "totp")
DEFAULT_QR_SIZE = 200
QR_URL_TEMPLATE = (
    "https://chart.googleapis.com/chart?chs={width}x{height}"
    "&cht=qr&chld=M|0&chl={data}"
)

_FIXED_FIELDS = ("issuer", "algorithm", "digits", "period", "image", "width", "height")
# Consumed by build_qr_url, never written into the otpauth query string.
_QR_ONLY = ("width", "height")


@dataclass(frozen=True)
class KeyUriOptions:
    """
    Optional otpauth parameters.

    ``extra`` holds any other ``(key, value)`` pairs to pass through.
    ``order`` records the caller's key order; :meth:`items` follows it so the
    query string is emitted exactly as supplied.
    """

    issuer: Optional[str] = None
    algorithm: Optional[str] = None
    digits: Optional[Union[int, str]] = None
    period: Optional[Union[int, str]] = None
    image: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    extra: Tuple[Tuple[str, object], ...] = ()
    order: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        extra = tuple((str(key), value) for key, value in self.extra)
        for key, _ in extra:
            if key in _FIXED_FIELDS:
                raise InvalidArgument(f"Option {key!r} must be set as a field, not in extra")
        object.__setattr__(self, "extra", extra)
        object.__setattr__(self, "order", tuple(str(key) for key in self.order))

    @classmethod
    def from_mapping(
        cls,
        options: Union[None, "KeyUriOptions", Mapping, Iterable],
    ) -> "KeyUriOptions":
        """Build options from a mapping or an iterable of ``(key, value)`` pairs."""
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        pairs = options.items() if isinstance(options, Mapping) else options

        fixed: dict = {}
        extra = []
        order = []
        for key, value in pairs:
            key = str(key)
            order.append(key)
            if key in _FIXED_FIELDS:
                if key in fixed:
                    raise InvalidArgument(f"Duplicate option {key!r}")
                fixed[key] = value
            else:
                extra.append((key, value))
        return cls(extra=tuple(extra), order=tuple(order), **fixed)

    def items(self) -> Iterator[Tuple[str, object]]:
        """
        Yield set ``(key, value)`` pairs, caller order first.

        Repeated ``extra`` keys are emitted once per occurrence, by position.
        """
        slots = defaultdict(deque)
        for index, (key, _) in enumerate(self.extra):
            slots[key].append(index)

        picks = []
        done = set()
        taken = set()
        for key in self.order:
            if key in _FIXED_FIELDS:
                if key not in done:
                    done.add(key)
                    picks.append((key, getattr(self, key)))
            elif slots[key]:
                index = slots[key].popleft()
                taken.add(index)
                picks.append(self.extra[index])
        picks += [(k, getattr(self, k)) for k in _FIXED_FIELDS if k not in done]
        picks += [pair for i, pair in enumerate(self.extra) if i not in taken]

        for key, value in picks:
            if value is not None:
                yield key, value

    def without_size(self) -> "KeyUriOptions":
        return dataclasses.replace(self, width=None, height=None)


def _encode(value: object, safe: str = "") -> str:
    return urllib.parse.quote(str(value), safe=safe)


def build_key_uri(
    otp_type: str,
    label: str,
    secret: str,
    counter: Optional[int] = None,
    options: Union[None, KeyUriOptions, Mapping, Iterable] = None,
) -> str:
    """
    Build an ``otpauth://`` provisioning URI.

    Args:
        otp_type: ``"hotp"`` or ``"totp"``.
        label:    ``account`` or ``issuer:account``; at most one colon.
        secret:   Shared secret as the authenticator should see it (base32).
        counter:  Initial counter, required for hotp and ignored for totp.
        options:  Extra query parameters, emitted in the order given.

    Returns:
        ``otpauth://{type}/{label}?secret=...[&counter=...][&key=value...]``

    Raises:
        InvalidArgument: On the first failed check, in this order: type,
            empty label, colons in label, secret, hotp counter, digits.
    """
    if otp_type not in ALLOWED_TYPES:
        raise InvalidArgument(
            f"Type has to be of allowed types list ({', '.join(ALLOWED_TYPES)}), "
            f"{otp_type!r} given"
        )
    if not isinstance(label, str) or not label or not label.isprintable():
        raise InvalidArgument("Label has to be one or more printable characters")
    if label.count(":") > 1:
        raise InvalidArgument(f"Account name contains illegal colon characters: {label!r}")
    if isinstance(secret, bytes):
        try:
            secret = secret.decode("ascii")
        except UnicodeDecodeError:
            raise InvalidArgument(f"Secret must be ASCII text, got {secret!r}") from None
    if not secret:
        raise InvalidArgument("No secret present")
    if otp_type == "hotp":
        if counter is None:
            raise InvalidArgument("Counter required for hotp")
        counter = validate_counter(counter)

    opts = KeyUriOptions.from_mapping(options)
    if opts.digits is not None:
        digits = as_int(opts.digits)
        if digits not in (6, 8):
            raise InvalidArgument(
                f"Digits can only have the values 6 or 8, {opts.digits} given"
            )
        opts = dataclasses.replace(opts, digits=digits)

    query = [f"secret={_encode(secret)}"]
    if otp_type == "hotp":
        query.append(f"counter={counter}")
    for key, value in opts.items():
        if key in _QR_ONLY:
            continue
        query.append(f"{key}={_encode(value)}")

    logger.debug("Built %s key URI with %d parameter(s)", otp_type, len(query))
    return f"otpauth://{otp_type}/{_encode(label, safe='@')}?{'&'.join(query)}"


def _size(value: object, field: str) -> int:
    if value is None:
        return DEFAULT_QR_SIZE
    size = as_int(value)
    if size is None or size < 1:
        raise InvalidArgument(f"QR {field} must be a positive integer, got {value!r}")
    return size


def build_qr_url(
    otp_type: str,
    label: str,
    secret: str,
    counter: Optional[int] = None,
    options: Union[None, KeyUriOptions, Mapping, Iterable] = None,
) -> str:
    """
    Return a chart-service URL rendering the key URI as a QR code.

    ``width`` / ``height`` options (default 200) size the image and are not
    forwarded to the otpauth URI.
    """
    opts = KeyUriOptions.from_mapping(options)
    uri = build_key_uri(otp_type, label, secret, counter, opts.without_size())
    return QR_URL_TEMPLATE.format(
        width=_size(opts.width, "width"),
        height=_size(opts.height, "height"),
        data=_encode(uri),
    )
