"""Process wiring for pushd.

    async with PushdRuntime(ConfigProvider()) as runtime:
        await runtime.notifier.ack_message("u1", "c1", "m1")
"""

from __future__ import annotations

from types import TracebackType
from typing import Optional, Type

from instrukt_ai_logging import get_logger
from redis.asyncio import Redis

from pushd.broker import BrokerConnection
from pushd.config import ConfigProvider
from pushd.notifier import Notifier
from pushd.presence.filter import PresenceFilter
from pushd.presence.store import PresenceStore
from pushd.publisher import Publisher
from pushd.redis_utils import create_redis

logger = get_logger(__name__)


class PushdRuntime:
    """Owns the shared Redis pool and broker connection for the process lifetime."""

    def __init__(self, config: ConfigProvider) -> None:
        self.config = config
        self._redis: Redis | None = None
        self._broker: BrokerConnection | None = None
        self._store: PresenceStore | None = None
        self._notifier: Notifier | None = None

    @property
    def presence(self) -> PresenceStore:
        if self._store is None:
            raise RuntimeError("PushdRuntime not started")
        return self._store

    @property
    def notifier(self) -> Notifier:
        if self._notifier is None:
            raise RuntimeError("PushdRuntime not started")
        return self._notifier

    def _build_presence(self) -> PresenceStore:
        settings = self.config.get()
        self._redis = create_redis(settings.redis)
        return PresenceStore(
            self._redis,
            ttl_seconds=settings.presence.ttl_seconds,
            lookup_timeout=settings.presence.lookup_timeout,
            session_index=settings.presence.session_index,
        )

    async def start_presence(self) -> PresenceStore:
        """Open only the presence side; used by tools that never publish."""
        if self._store is None:
            self._store = self._build_presence()
        return self._store

    async def start(self) -> Notifier:
        settings = self.config.get()
        store = await self.start_presence()
        self._broker = BrokerConnection(settings.amqp.url)
        try:
            channel = await self._broker.connect()
        except BaseException:
            # __aexit__ never runs when __aenter__ fails
            await self.stop()
            raise
        presence_filter = PresenceFilter(store, max_concurrency=settings.presence.max_concurrency)
        self._notifier = Notifier(Publisher(channel, self.config), presence_filter)
        logger.info("pushd runtime started", exchange=settings.pushd.exchange)
        return self._notifier

    async def stop(self) -> None:
        if self._broker is not None:
            await self._broker.close()
            self._broker = None
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None
        self._store = None
        self._notifier = None
        logger.info("pushd runtime stopped")

    async def __aenter__(self) -> "PushdRuntime":
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        await self.stop()
