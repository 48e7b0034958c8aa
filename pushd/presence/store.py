"""Presence store backed by Redis sets with automatic expiry.

Each session that has channels open owns one set::

    open_channels:{user_id}:{session_id} -> {channel_id, ...}   (TTL from last open)

That key is the only one every presence writer is guaranteed to maintain, so
by default sessions are enumerated with SCAN over ``open_channels:{user_id}:*``.
When every writer goes through this store, the session index can be enabled
instead; each user then also owns::

    open_sessions:{user_id} -> {session_id, ...}                  (TTL from last open)

Index entries whose record has expired are pruned on read.

Expired or empty sets mean "not viewing". Reads are best effort: any store
failure or timeout reads as "not viewing" so a cache outage never suppresses
a notification.
"""

from __future__ import annotations

import asyncio

from instrukt_ai_logging import get_logger
from redis.asyncio import Redis
from redis.exceptions import RedisError

from pushd.constants import (
    OPEN_CHANNELS_PREFIX,
    OPEN_SESSIONS_PREFIX,
    PRESENCE_LOOKUP_TIMEOUT,
    PRESENCE_TTL_SECONDS,
)
from pushd.presence.types import ChannelActivity
from pushd.redis_utils import scan_keys

logger = get_logger(__name__)


def open_channels_key(user_id: str, session_id: str) -> str:
    return f"{OPEN_CHANNELS_PREFIX}:{user_id}:{session_id}"


def open_sessions_key(user_id: str) -> str:
    return f"{OPEN_SESSIONS_PREFIX}:{user_id}"


class PresenceStore:
    def __init__(
        self,
        redis: Redis,
        *,
        ttl_seconds: int = PRESENCE_TTL_SECONDS,
        lookup_timeout: float = PRESENCE_LOOKUP_TIMEOUT,
        session_index: bool = False,
    ) -> None:
        self._redis = redis
        self._ttl = ttl_seconds
        self._lookup_timeout = lookup_timeout
        self._session_index = session_index

    async def mark_open(self, user_id: str, session_id: str, channel_id: str) -> None:
        """Add the channel to the session's open set and reset the TTL."""
        key = open_channels_key(user_id, session_id)
        async with self._redis.pipeline(transaction=True) as pipe:
            pipe.sadd(key, channel_id)
            pipe.expire(key, self._ttl)
            if self._session_index:
                index_key = open_sessions_key(user_id)
                pipe.sadd(index_key, session_id)
                pipe.expire(index_key, self._ttl)
            await pipe.execute()
        logger.debug("Marked channel open", user_id=user_id, session_id=session_id, channel_id=channel_id)

    async def mark_close(self, user_id: str, session_id: str, channel_id: str) -> None:
        """Remove the channel from the session's open set; the TTL is left alone."""
        await self._redis.srem(open_channels_key(user_id, session_id), channel_id)
        logger.debug("Marked channel closed", user_id=user_id, session_id=session_id, channel_id=channel_id)

    async def update_activity(
        self, user_id: str, session_id: str, channel_id: str, activity: ChannelActivity | str
    ) -> None:
        activity = ChannelActivity(activity)
        if activity is ChannelActivity.OPEN:
            await self.mark_open(user_id, session_id, channel_id)
        else:
            await self.mark_close(user_id, session_id, channel_id)

    async def session_keys(self, user_id: str) -> list[str]:
        """Enumerate the presence-record keys of every session the user has."""
        if self._session_index:
            session_ids = await self._redis.smembers(open_sessions_key(user_id))
            return [open_channels_key(user_id, s) for s in session_ids]
        return await scan_keys(self._redis, f"{OPEN_CHANNELS_PREFIX}:{user_id}:*")

    async def _lookup_scan(self, user_id: str, channel_id: str) -> bool:
        keys = await self.session_keys(user_id)
        if not keys:
            return False
        async with self._redis.pipeline(transaction=False) as pipe:
            for key in keys:
                pipe.sismember(key, channel_id)
            results = await pipe.execute()
        return any(bool(r) for r in results)

    async def _lookup_indexed(self, user_id: str, channel_id: str) -> bool:
        index_key = open_sessions_key(user_id)
        session_ids = sorted(await self._redis.smembers(index_key))
        if not session_ids:
            return False
        async with self._redis.pipeline(transaction=False) as pipe:
            for session_id in session_ids:
                key = open_channels_key(user_id, session_id)
                pipe.exists(key)
                pipe.sismember(key, channel_id)
            results = await pipe.execute()

        # Results alternate EXISTS, SISMEMBER per session
        alive = results[0::2]
        members = results[1::2]
        expired = [s for s, exists in zip(session_ids, alive) if not exists]
        if expired:
            await self._redis.srem(index_key, *expired)
            logger.debug("Pruned expired sessions from index", user_id=user_id, pruned=len(expired))
        return any(bool(m) for m in members)

    async def _lookup(self, user_id: str, channel_id: str) -> bool:
        if self._session_index:
            return await self._lookup_indexed(user_id, channel_id)
        return await self._lookup_scan(user_id, channel_id)

    async def is_viewing(self, user_id: str, channel_id: str) -> bool:
        """Whether any live session of the user has the channel open.

        Never raises for store failures; those read as ``False``.
        """
        try:
            viewing = await asyncio.wait_for(self._lookup(user_id, channel_id), timeout=self._lookup_timeout)
        except asyncio.TimeoutError:
            logger.warning("Presence lookup timed out", user_id=user_id, channel_id=channel_id)
            return False
        except (RedisError, OSError, UnicodeDecodeError) as e:
            # Undecodable members come from foreign writers; treat like an unreadable record
            logger.warning("Presence lookup failed", user_id=user_id, channel_id=channel_id, error=str(e))
            return False

        if viewing:
            logger.debug("User %s is currently viewing channel %s", user_id, channel_id)
        return viewing
