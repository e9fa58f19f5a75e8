"""
Date/time helpers - framework-agnostic.

Services never call ``datetime.now`` directly; they take a ``Clock`` so
expiry and rate-window arithmetic can be driven from tests.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable

Clock = Callable[[], datetime]

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Return *dt* in UTC; naive datetimes are assumed to already be UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_epoch_millis(dt: datetime) -> int:
    """Milliseconds since the Unix epoch for *dt*."""
    return (ensure_utc(dt) - _EPOCH) // timedelta(milliseconds=1)
