"""Redis implementation of TableStore.

Layout per row: a hash ``{prefix}:{partition}:{row}`` holding ``etag`` and the
JSON-encoded properties under ``data``. Each partition also keeps a sorted set
``{prefix}:{partition}:_rows`` with every member at score 0, so ZRANGEBYLEX
gives ordered row-key range scans without touching other partitions. The
index lives at least as long as the longest-lived row it lists: it takes a
row's TTL when it has none and is otherwise only extended. A row written
without a TTL makes the index persistent until the next write that carries
one, so a partition should not mix the two kinds of row. EXPIRE NX/GT needs
Redis 7.0 or later.

Conditional updates run as a Lua script that compares the stored etag before
writing, so a concurrent writer makes the update fail instead of being lost.
Transport errors (RedisError) are not caught here; they propagate to callers.
"""

import json
from typing import AsyncIterator, Optional

import redis.asyncio as aioredis

from infrastructure.storage.protocol import TableEntity
from shared.generators import generate_etag
from shared.logging import get_logger, hash_subject

log = get_logger(__name__)

_COMPARE_AND_SET = """
if redis.call('HGET', KEYS[1], 'etag') ~= ARGV[1] then
    return 0
end
redis.call('HSET', KEYS[1], 'etag', ARGV[2], 'data', ARGV[3])
return 1
"""


class RedisTableStore:
    def __init__(self, redis_client: aioredis.Redis, key_prefix: str = "otp") -> None:
        self._redis = redis_client
        self._prefix = key_prefix

    def _row(self, partition_key: str, row_key: str) -> str:
        return f"{self._prefix}:{partition_key}:{row_key}"

    def _index(self, partition_key: str) -> str:
        return f"{self._prefix}:{partition_key}:_rows"

    async def get_entity(
        self, partition_key: str, row_key: str
    ) -> Optional[TableEntity]:
        raw = await self._redis.hgetall(self._row(partition_key, row_key))
        if not raw:
            return None
        return TableEntity(
            partition_key=partition_key,
            row_key=row_key,
            properties=json.loads(raw["data"]),
            etag=raw["etag"],
        )

    async def upsert_entity(
        self, entity: TableEntity, ttl_seconds: Optional[int] = None
    ) -> TableEntity:
        key = self._row(entity.partition_key, entity.row_key)
        etag = generate_etag()
        async with self._redis.pipeline(transaction=True) as pipe:
            # Full replace: drop the old hash (and its TTL) before writing
            pipe.delete(key)
            pipe.hset(
                key, mapping={"etag": etag, "data": json.dumps(entity.properties)}
            )
            index = self._index(entity.partition_key)
            pipe.zadd(index, {entity.row_key: 0})
            if ttl_seconds is not None:
                pipe.expire(key, ttl_seconds)
                pipe.expire(index, ttl_seconds, nx=True)
                pipe.expire(index, ttl_seconds, gt=True)
            else:
                pipe.persist(index)
            await pipe.execute()
        return TableEntity(
            partition_key=entity.partition_key,
            row_key=entity.row_key,
            properties=dict(entity.properties),
            etag=etag,
        )

    async def update_entity(self, entity: TableEntity, etag: str) -> bool:
        result = await self._redis.eval(
            _COMPARE_AND_SET,
            1,
            self._row(entity.partition_key, entity.row_key),
            etag,
            generate_etag(),
            json.dumps(entity.properties),
        )
        return int(result) == 1

    async def delete_entity(self, partition_key: str, row_key: str) -> None:
        async with self._redis.pipeline(transaction=True) as pipe:
            pipe.delete(self._row(partition_key, row_key))
            pipe.zrem(self._index(partition_key), row_key)
            await pipe.execute()

    async def query_entities(
        self,
        partition_key: str,
        row_key_from: Optional[str] = None,
        row_key_to: Optional[str] = None,
    ) -> AsyncIterator[TableEntity]:
        low = f"[{row_key_from}" if row_key_from is not None else "-"
        high = f"({row_key_to}" if row_key_to is not None else "+"
        index = self._index(partition_key)
        row_keys = await self._redis.zrangebylex(index, low, high)
        for row_key in row_keys:
            entity = await self.get_entity(partition_key, row_key)
            if entity is None:
                # Row hash expired through its TTL; drop the dangling index entry
                await self._redis.zrem(index, row_key)
                log.debug("table_index_pruned", partition=hash_subject(partition_key), row=row_key)
                continue
            yield entity

    async def ping(self) -> bool:
        return bool(await self._redis.ping())

    async def aclose(self) -> None:
        await self._redis.aclose()
