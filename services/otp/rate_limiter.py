"""
Sliding-window limiter on passcode generation.

Every issued code leaves a GenerationEvent row under the subject's partition.
A request is allowed while fewer than ``max_generations`` events fall inside
the last ``window_seconds``; the scan stops as soon as the limit is reached.

The count-then-insert is not atomic: two concurrent requests for the same
subject can both see ``max_generations - 1`` events and both be admitted, so
a burst may overshoot the limit by the number of racing requests. Admitted
requests are still bounded by the notifier and by the next window.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta
from typing import Optional

from errors import RateLimitExceededError
from infrastructure.storage.protocol import TableStore
from schemas.models.otp import (
    GENERATION_ROW_UPPER,
    GenerationEvent,
    generation_row_key,
)
from shared.datetime_utils import Clock, utc_now
from shared.logging import get_logger, hash_subject

log = get_logger(__name__)

RATE_WINDOW_SECONDS = 600
MAX_GENERATIONS = 3

# Event rows outlive the window slightly so the store TTL never drops an
# event the window still counts
_ROW_GRACE_SECONDS = 60


class RateLimiter:
    def __init__(
        self,
        store: TableStore,
        *,
        window_seconds: int = RATE_WINDOW_SECONDS,
        max_generations: int = MAX_GENERATIONS,
        clock: Clock = utc_now,
    ) -> None:
        self._store = store
        self.window = timedelta(seconds=window_seconds)
        self.max_generations = max_generations
        self._clock = clock

    def window_start(self, now: datetime) -> datetime:
        return now - self.window

    async def check_and_record(self, subject_key: str) -> GenerationEvent:
        """Admit one generation for *subject_key* or raise.

        Returns:
            The GenerationEvent recorded for this request.

        Raises:
            RateLimitExceededError: ``max_generations`` events already exist in
                the window; nothing is recorded.
        """
        now = self._clock()
        count = 0
        oldest: Optional[datetime] = None

        async for entity in self._store.query_entities(
            subject_key,
            row_key_from=generation_row_key(self.window_start(now)),
            row_key_to=GENERATION_ROW_UPPER,
        ):
            event = GenerationEvent.from_entity(entity)
            if oldest is None:
                oldest = event.created_at
            count += 1
            if count >= self.max_generations:
                retry_after = max(
                    1, math.ceil((oldest + self.window - now).total_seconds())
                )
                log.warning(
                    "otp_rate_limited",
                    subject=hash_subject(subject_key),
                    count=count,
                    retry_after_seconds=retry_after,
                )
                raise RateLimitExceededError(
                    "Too many codes requested. Please try again later.",
                    retry_after_seconds=retry_after,
                )

        event = GenerationEvent(subject_key=subject_key, created_at=now)
        await self._store.upsert_entity(
            event.to_entity(),
            ttl_seconds=int(self.window.total_seconds()) + _ROW_GRACE_SECONDS,
        )
        log.debug("otp_generation_recorded", subject=hash_subject(subject_key), count=count + 1)
        return event
