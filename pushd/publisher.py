"""Publish notification payloads to the push exchange.

Each publish serialises the payload to JSON, marks the message persistent,
attaches the deduplication header when the payload has one, and sends it to
the configured exchange under the routing key of its event kind.

Failures are returned, not raised: the caller owns retry and alerting, and
gets the underlying error back on the outcome.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum

import aio_pika
from aio_pika.abc import AbstractChannel
from aio_pika.exceptions import AMQPError, ChannelInvalidStateError
from instrukt_ai_logging import get_logger

from pushd.config import ConfigProvider
from pushd.constants import CONTENT_TYPE_JSON, DEDUPLICATION_HEADER
from pushd.payloads import EventKind, NotificationPayload

logger = get_logger(__name__)


class PublishError(Exception):
    """Base class for failures of a single publish."""


class PayloadSerializationError(PublishError):
    """The payload could not be encoded. Indicates a programming error."""


class BrokerError(PublishError):
    """The broker transport failed: connection loss, closed channel, NACK or timeout."""


class PublishStatus(str, Enum):
    SENT = "sent"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class PublishOutcome:
    status: PublishStatus
    event_kind: EventKind
    routing_key: str | None = None
    reason: str = ""
    error: PublishError | None = None

    @property
    def ok(self) -> bool:
        return self.status is not PublishStatus.FAILED

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error

    @classmethod
    def skipped(cls, kind: EventKind, reason: str) -> "PublishOutcome":
        return cls(status=PublishStatus.SKIPPED, event_kind=kind, reason=reason)


def build_message(payload: NotificationPayload) -> aio_pika.Message:
    """Wrap the encoded payload with delivery metadata."""
    try:
        body = payload.to_json()
    except (TypeError, ValueError) as e:
        raise PayloadSerializationError(f"Cannot serialize {payload.kind.value} payload: {e}") from e

    headers: dict[str, str] = {}
    dedup_key = payload.deduplication_key()
    if dedup_key is not None:
        headers[DEDUPLICATION_HEADER] = dedup_key

    return aio_pika.Message(
        body=body,
        content_type=CONTENT_TYPE_JSON,
        delivery_mode=aio_pika.DeliveryMode.PERSISTENT,
        headers=headers,
    )


class Publisher:
    def __init__(self, channel: AbstractChannel, config: ConfigProvider) -> None:
        self._channel = channel
        self._config = config

    async def publish(self, kind: EventKind | str, payload: NotificationPayload) -> PublishOutcome:
        kind = EventKind(kind)
        if payload.kind is not kind:
            raise ValueError(f"Payload {type(payload).__name__} does not belong to event kind {kind.value}")

        # Read per call so exchange and queue renames apply without a restart
        config = self._config.get()
        exchange_name = config.pushd.exchange
        routing_key = config.pushd.routing_key(kind)

        try:
            message = build_message(payload)
        except PayloadSerializationError as e:
            logger.error("Payload serialization failed", event_kind=kind.value, error=str(e))
            return PublishOutcome(status=PublishStatus.FAILED, event_kind=kind, routing_key=routing_key, error=e)

        logger.debug(
            "Sending %s payload on channel %s: %s",
            kind.value,
            routing_key,
            message.body.decode("utf-8"),
        )

        try:
            exchange = await self._channel.get_exchange(exchange_name, ensure=False)
            await exchange.publish(message, routing_key=routing_key, timeout=config.amqp.publish_timeout)
        except (AMQPError, ChannelInvalidStateError, ConnectionError, asyncio.TimeoutError) as e:
            error = BrokerError(f"Publish to {exchange_name}/{routing_key} failed: {e!r}")
            error.__cause__ = e
            logger.error("Broker publish failed", event_kind=kind.value, routing_key=routing_key, error=repr(e))
            return PublishOutcome(status=PublishStatus.FAILED, event_kind=kind, routing_key=routing_key, error=error)

        logger.info("Published notification", event_kind=kind.value, routing_key=routing_key)
        return PublishOutcome(status=PublishStatus.SENT, event_kind=kind, routing_key=routing_key)
