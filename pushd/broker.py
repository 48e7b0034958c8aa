"""Long-lived AMQP connection shared by all publishes.

One robust connection and one confirm-mode channel are opened at startup and
injected into the Publisher. aio-pika serialises frame writes per channel, so
concurrent publishes on the shared channel are safe.
"""

from __future__ import annotations

import aio_pika
from aio_pika.abc import AbstractChannel, AbstractRobustConnection
from instrukt_ai_logging import get_logger

logger = get_logger(__name__)


class BrokerConnection:
    def __init__(self, url: str) -> None:
        self._url = url
        self._connection: AbstractRobustConnection | None = None
        self._channel: AbstractChannel | None = None

    async def connect(self) -> AbstractChannel:
        if self._channel is not None and not self._channel.is_closed:
            return self._channel
        if self._connection is None or self._connection.is_closed:
            self._connection = await aio_pika.connect_robust(self._url)
            logger.info("Connected to AMQP broker")
        # Publisher confirms surface broker NACKs as delivery errors
        self._channel = await self._connection.channel(publisher_confirms=True)
        return self._channel

    @property
    def channel(self) -> AbstractChannel:
        if self._channel is None:
            raise RuntimeError("BrokerConnection not connected. Call connect() first.")
        return self._channel

    async def close(self) -> None:
        if self._connection is not None and not self._connection.is_closed:
            await self._connection.close()
            logger.info("Closed AMQP broker connection")
        self._connection = None
        self._channel = None
