"""
OTP row models.

Both kinds share the subject key as partition key:

- OtpRecord       - fixed row ``"current"``; at most one per subject.
  hashed_code stores SHA-256(otp_code) - the plain OTP is never stored.
  attempt_count counts every verification attempt and never goes down.
- GenerationEvent - one row per issued code, row key
  ``gen_<15-digit epoch millis>_<hex suffix>`` so a lexical range scan
  returns events in creation order.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field, field_validator

from schemas.models.base import TableRowModel
from shared.datetime_utils import ensure_utc, to_epoch_millis
from shared.generators import generate_row_suffix

OTP_ROW_KEY = "current"
GENERATION_ROW_PREFIX = "gen_"
# Sorts after every generation row key ("~" > digits and "_")
GENERATION_ROW_UPPER = GENERATION_ROW_PREFIX + "~"
_MILLIS_WIDTH = 15


class Channel(str, Enum):
    """Out-of-band route a passcode is delivered through."""

    EMAIL = "email"
    PHONE = "phone"


def generation_row_key(created_at: datetime, suffix: str = "") -> str:
    """Sortable generation-event row key for *created_at*.

    Without *suffix* the result is a range bound: every event created at or
    after *created_at* sorts at or after it.
    """
    key = f"{GENERATION_ROW_PREFIX}{to_epoch_millis(created_at):0{_MILLIS_WIDTH}d}"
    return f"{key}_{suffix}" if suffix else key


class OtpRecord(TableRowModel):
    """The current passcode for a subject."""

    hashed_code: str
    expires_at: datetime
    attempt_count: int = Field(default=0, ge=0)
    # Version marker from the last read; never persisted as a property
    concurrency_token: Optional[str] = Field(default=None, exclude=True)

    @field_validator("expires_at")
    @classmethod
    def expires_at_in_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @property
    def row_key(self) -> str:
        return OTP_ROW_KEY

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at


class GenerationEvent(TableRowModel):
    """Marks one passcode issuance; only read by the rate-window scan."""

    created_at: datetime
    event_id: str = Field(default_factory=generate_row_suffix)

    @field_validator("created_at")
    @classmethod
    def created_at_in_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @property
    def row_key(self) -> str:
        return generation_row_key(self.created_at, self.event_id)
