"""
Owns the single current-passcode row of each subject.

issue() overwrites the row unconditionally, superseding any earlier code.
verify() runs one attempt through a fixed sequence:

1. point read; nothing stored → False
2. expired → delete, False
3. attempt budget already spent → delete, False
4. bump attempt_count with a write guarded by the etag read in step 1;
   a concurrent attempt changed the row → False (no retry, no re-read)
5. compare digests; match → delete, True. Mismatch → False, and the row is
   deleted when that attempt used up the budget.

Callers only ever see the boolean; the reason is logged.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Callable

from infrastructure.storage.protocol import TableStore
from schemas.models.otp import OTP_ROW_KEY, OtpRecord
from shared.crypto import hash_token, verify_token
from shared.datetime_utils import Clock, utc_now
from shared.generators import generate_otp_code
from shared.logging import get_logger, hash_subject

log = get_logger(__name__)

OTP_TTL_SECONDS = 180
MAX_ATTEMPTS = 5

# Extra lifetime of the stored row past expires_at, so expiry is normally
# observed (and logged) by verify() rather than by the store's TTL
_ROW_GRACE_SECONDS = 60


class CredentialStore:
    def __init__(
        self,
        store: TableStore,
        *,
        ttl_seconds: int = OTP_TTL_SECONDS,
        max_attempts: int = MAX_ATTEMPTS,
        clock: Clock = utc_now,
        code_generator: Callable[[], str] = generate_otp_code,
    ) -> None:
        self._store = store
        self.ttl = timedelta(seconds=ttl_seconds)
        self.max_attempts = max_attempts
        self._clock = clock
        self._generate_code = code_generator

    async def issue(self, subject_key: str) -> str:
        """Store a fresh passcode for *subject_key* and return its plaintext."""
        code = self._generate_code()
        record = OtpRecord(
            subject_key=subject_key,
            hashed_code=hash_token(code),
            expires_at=self._clock() + self.ttl,
            attempt_count=0,
        )
        await self._store.upsert_entity(
            record.to_entity(),
            ttl_seconds=int(self.ttl.total_seconds()) + _ROW_GRACE_SECONDS,
        )
        log.info(
            "otp_issued",
            subject=hash_subject(subject_key),
            expires_at=record.expires_at.isoformat(),
        )
        return code

    async def verify(self, subject_key: str, candidate: str) -> bool:
        record = OtpRecord.from_entity(
            await self._store.get_entity(subject_key, OTP_ROW_KEY)
        )
        if record is None:
            return self._reject(subject_key, "absent")

        if record.is_expired(self._clock()):
            await self.clear(subject_key)
            return self._reject(subject_key, "expired")

        if record.attempt_count >= self.max_attempts:
            await self.clear(subject_key)
            return self._reject(subject_key, "locked_out")

        attempted = record.model_copy(
            update={"attempt_count": record.attempt_count + 1}
        )
        if not await self._store.update_entity(
            attempted.to_entity(), etag=record.concurrency_token
        ):
            return self._reject(subject_key, "conflict")

        if not verify_token(candidate, record.hashed_code):
            if attempted.attempt_count >= self.max_attempts:
                await self.clear(subject_key)
                return self._reject(
                    subject_key, "locked_out", attempts=attempted.attempt_count
                )
            return self._reject(
                subject_key, "mismatch", attempts=attempted.attempt_count
            )

        await self.clear(subject_key)
        log.info(
            "otp_verified",
            subject=hash_subject(subject_key),
            attempts=attempted.attempt_count,
        )
        return True

    async def clear(self, subject_key: str) -> None:
        """Invalidate the current passcode, if any."""
        await self._store.delete_entity(subject_key, OTP_ROW_KEY)

    def _reject(self, subject_key: str, reason: str, **extra) -> bool:
        log.info("otp_verify_failed", subject=hash_subject(subject_key), reason=reason, **extra)
        return False
