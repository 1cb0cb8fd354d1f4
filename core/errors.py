"""
Exception types raised by the OTP engine and the key URI builder.
"""


class InvalidArgument(ValueError):
    """
    A caller supplied a malformed counter, period, digit count, offset,
    window, label, secret or option.

    Raised before any computation starts, so engine state is never left
    half-updated.
    """
