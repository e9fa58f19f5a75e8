"""Async Redis connection factory and TableStore selection.

create_table_store() is called once from the application lifespan; the
returned store is the only client handle the OTP services use and is closed
on shutdown.
"""

from typing import Optional

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from config import RedisSettings
from infrastructure.storage.memory_store import MemoryTableStore
from infrastructure.storage.protocol import TableStore
from infrastructure.storage.redis_store import RedisTableStore
from shared.logging import get_logger

log = get_logger(__name__)


async def create_redis_client(redis_uri: str) -> aioredis.Redis:
    """Build an async Redis client and check connectivity.

    A failed ping is logged but not fatal: redis-py reconnects on the next
    command, and until then store calls fail with RedisError.
    """
    client: aioredis.Redis = aioredis.from_url(redis_uri, decode_responses=True)
    try:
        await client.ping()
        log.info("redis_connected", uri=redis_uri.split("@")[-1])  # mask credentials
    except RedisError as e:
        log.error(
            "redis_connection_failed", error=str(e), error_type=type(e).__name__
        )
    return client


async def create_table_store(
    settings: RedisSettings, redis_client: Optional[aioredis.Redis] = None
) -> TableStore:
    """Return a Redis-backed store, or the in-process store when Redis is absent."""
    if redis_client is None and settings.redis_uri:
        redis_client = await create_redis_client(settings.redis_uri)
    if redis_client is None:
        log.warning("table_store_in_memory", reason="redis_not_configured")
        return MemoryTableStore()
    return RedisTableStore(redis_client, key_prefix=settings.redis_key_prefix)
