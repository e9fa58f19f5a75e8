"""
Best-effort removal of generation events that left the rate window.

Runs detached from the request that issued the code: errors are logged and
swallowed, and an unswept event is harmless because the limiter's scan
starts at the window boundary anyway.
"""

from __future__ import annotations

import asyncio
from datetime import timedelta

from infrastructure.storage.protocol import TableStore
from schemas.models.otp import GENERATION_ROW_PREFIX, generation_row_key
from shared.datetime_utils import Clock, utc_now
from shared.logging import get_logger, hash_subject

log = get_logger(__name__)


class Sweeper:
    def __init__(
        self,
        store: TableStore,
        *,
        window_seconds: int = 600,
        clock: Clock = utc_now,
    ) -> None:
        self._store = store
        self.window = timedelta(seconds=window_seconds)
        self._clock = clock
        self._pending: set[asyncio.Task] = set()

    async def sweep_expired_events(self, subject_key: str) -> int:
        """Delete *subject_key*'s events older than the window; return how many."""
        try:
            cutoff = generation_row_key(self._clock() - self.window)
            stale = [
                entity
                async for entity in self._store.query_entities(
                    subject_key,
                    row_key_from=GENERATION_ROW_PREFIX,
                    row_key_to=cutoff,
                )
            ]
            for entity in stale:
                await self._store.delete_entity(subject_key, entity.row_key)
            if stale:
                log.info("otp_events_swept", subject=hash_subject(subject_key), deleted=len(stale))
            return len(stale)
        except Exception as e:
            log.error(
                "otp_sweep_failed",
                subject=hash_subject(subject_key),
                error=str(e),
                error_type=type(e).__name__,
            )
            return 0

    def schedule(self, subject_key: str) -> asyncio.Task:
        """Fire-and-forget sweep; the task is held until it finishes."""
        task = asyncio.create_task(self.sweep_expired_events(subject_key))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> None:
        """Wait for scheduled sweeps (shutdown, tests)."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
