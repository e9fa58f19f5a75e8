"""
Random code generators - pure, side-effect-free functions.

All generators use the cryptographically secure ``secrets`` module.
"""

from __future__ import annotations

import secrets

OTP_MIN = 100_000
OTP_MAX = 999_999


def generate_otp_code() -> str:
    """Generate a cryptographically secure six-digit OTP.

    ``secrets.randbelow`` draws uniformly from ``[0, 900000)`` by rejection
    sampling, so every code in 100000..999999 is equally likely and the
    value never starts with a zero.

    Returns:
        Six-character string of decimal digits.
    """
    return str(OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1))


def generate_row_suffix(nbytes: int = 4) -> str:
    """Random hex suffix that keeps same-millisecond row keys distinct."""
    return secrets.token_hex(nbytes)


def generate_etag() -> str:
    """Opaque version marker attached to every stored row."""
    return secrets.token_urlsafe(12)
