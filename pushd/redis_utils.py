"""Redis client factory and non-blocking key enumeration."""

from __future__ import annotations

from typing import TYPE_CHECKING

from instrukt_ai_logging import get_logger
from redis.asyncio import Redis

from pushd.constants import REDIS_SCAN_COUNT

if TYPE_CHECKING:
    from pushd.config.schema import RedisConfig

logger = get_logger(__name__)


def create_redis(config: "RedisConfig") -> Redis:
    """Build a pooled async client; connections are opened lazily."""
    redis_client: Redis = Redis.from_url(
        config.url,
        password=config.password,
        max_connections=config.max_connections,
        socket_timeout=config.socket_timeout,
        socket_connect_timeout=config.socket_timeout,
        decode_responses=True,
    )
    return redis_client


def _decode(value: bytes | str) -> str:
    return value.decode("utf-8") if isinstance(value, bytes) else value


async def scan_keys(redis: Redis, pattern: str) -> list[str]:
    """
    Non-blocking alternative to KEYS command using SCAN cursor iteration.

    SCAN walks the keyspace in batches so the Redis server keeps serving
    other requests while we enumerate.

    Args:
        redis: Async Redis client instance
        pattern: Key pattern to match (e.g., "open_channels:u1:*")

    Returns:
        List of matching key names
    """
    keys: list[str] = []
    cursor: int = 0

    while True:
        # count is only a batch-size hint
        result: tuple[int, list[bytes | str]] = await redis.scan(cursor, match=pattern, count=REDIS_SCAN_COUNT)
        cursor, batch = result

        keys.extend(_decode(k) for k in batch)

        if cursor == 0:
            break

    logger.debug("SCAN found %d keys matching pattern %s", len(keys), pattern)
    return keys
