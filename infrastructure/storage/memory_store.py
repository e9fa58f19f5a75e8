"""In-process TableStore.

Used when REDIS_URI is not configured and by the test suite. State lives in
a plain dict, so it is only correct for a single worker process. Every method
finishes without awaiting between its read and its write, which makes each
call atomic with respect to other coroutines on the same event loop. Expired
rows are evicted when read and swept from the whole store on every upsert.
"""

import copy
from datetime import datetime, timedelta
from typing import AsyncIterator, Optional

from infrastructure.storage.protocol import TableEntity
from shared.datetime_utils import Clock, utc_now
from shared.generators import generate_etag


class MemoryTableStore:
    def __init__(self, clock: Clock = utc_now) -> None:
        self._clock = clock
        self._rows: dict[tuple[str, str], TableEntity] = {}
        self._expiry: dict[tuple[str, str], datetime] = {}

    def _prune(self) -> None:
        now = self._clock()
        for key, expires_at in list(self._expiry.items()):
            if now >= expires_at:
                self._rows.pop(key, None)
                del self._expiry[key]

    def _live(self, key: tuple[str, str]) -> Optional[TableEntity]:
        expires_at = self._expiry.get(key)
        if expires_at is not None and self._clock() >= expires_at:
            self._rows.pop(key, None)
            self._expiry.pop(key, None)
        return self._rows.get(key)

    async def get_entity(
        self, partition_key: str, row_key: str
    ) -> Optional[TableEntity]:
        row = self._live((partition_key, row_key))
        return copy.deepcopy(row) if row is not None else None

    async def upsert_entity(
        self, entity: TableEntity, ttl_seconds: Optional[int] = None
    ) -> TableEntity:
        self._prune()
        key = (entity.partition_key, entity.row_key)
        stored = TableEntity(
            partition_key=entity.partition_key,
            row_key=entity.row_key,
            properties=copy.deepcopy(entity.properties),
            etag=generate_etag(),
        )
        self._rows[key] = stored
        if ttl_seconds is not None:
            self._expiry[key] = self._clock() + timedelta(seconds=ttl_seconds)
        else:
            self._expiry.pop(key, None)
        return copy.deepcopy(stored)

    async def update_entity(self, entity: TableEntity, etag: str) -> bool:
        key = (entity.partition_key, entity.row_key)
        current = self._live(key)
        if current is None or current.etag != etag:
            return False
        current.properties = copy.deepcopy(entity.properties)
        current.etag = generate_etag()
        return True

    async def delete_entity(self, partition_key: str, row_key: str) -> None:
        self._rows.pop((partition_key, row_key), None)
        self._expiry.pop((partition_key, row_key), None)

    async def query_entities(
        self,
        partition_key: str,
        row_key_from: Optional[str] = None,
        row_key_to: Optional[str] = None,
    ) -> AsyncIterator[TableEntity]:
        row_keys = sorted(
            rk
            for pk, rk in list(self._rows)
            if pk == partition_key
            and (row_key_from is None or rk >= row_key_from)
            and (row_key_to is None or rk < row_key_to)
        )
        for row_key in row_keys:
            row = self._live((partition_key, row_key))
            if row is not None:
                yield copy.deepcopy(row)

    async def ping(self) -> bool:
        return True

    async def aclose(self) -> None:
        self._rows.clear()
        self._expiry.clear()
