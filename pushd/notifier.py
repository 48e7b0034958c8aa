"""Notification entry points, one per event kind.

The caller hands over already permission-checked domain data. Fan-out events
are narrowed to recipients who are not viewing the source channel before the
payload is built and published.
"""

from __future__ import annotations

from typing import Iterable, Optional

from instrukt_ai_logging import get_logger

from pushd import builders
from pushd.payloads import EventKind, PushNotification, UserSnapshot
from pushd.presence.filter import PresenceFilter
from pushd.publisher import PublishOutcome, Publisher

logger = get_logger(__name__)


class Notifier:
    def __init__(self, publisher: Publisher, presence_filter: PresenceFilter) -> None:
        self._publisher = publisher
        self._filter = presence_filter

    async def friend_request_accepted(self, accepted_user: UserSnapshot, requesting_user_id: str) -> PublishOutcome:
        payload = builders.build_fr_accepted(accepted_user, requesting_user_id)
        return await self._publisher.publish(EventKind.FR_ACCEPTED, payload)

    async def friend_request_received(self, from_user: UserSnapshot, target_user_id: str) -> PublishOutcome:
        payload = builders.build_fr_received(from_user, target_user_id)
        return await self._publisher.publish(EventKind.FR_RECEIVED, payload)

    async def generic_message(
        self, user: UserSnapshot, title: str, body: str, icon: Optional[str] = None
    ) -> PublishOutcome:
        payload = builders.build_generic(user, title, body, icon)
        return await self._publisher.publish(EventKind.GENERIC, payload)

    async def message_sent(self, recipients: Iterable[str], notification: PushNotification) -> PublishOutcome:
        candidates = set(recipients)
        if not candidates:
            return PublishOutcome.skipped(EventKind.MESSAGE_SENT, "no recipients")

        channel_id = notification.channel_id
        audience = await self._filter.filter(candidates, channel_id)
        if not audience:
            logger.debug("Everyone is viewing channel %s, not sending notification", channel_id)
            return PublishOutcome.skipped(EventKind.MESSAGE_SENT, "all recipients viewing channel")

        payload = builders.build_message_sent(notification, audience)
        return await self._publisher.publish(EventKind.MESSAGE_SENT, payload)

    async def mass_mention_message_sent(
        self, server_id: str, notifications: Iterable[PushNotification]
    ) -> PublishOutcome:
        notifications = list(notifications)
        if not notifications:
            return PublishOutcome.skipped(EventKind.MASS_MENTION, "no notifications")
        payload = builders.build_mass_mention(server_id, notifications)
        return await self._publisher.publish(EventKind.MASS_MENTION, payload)

    async def ack_message(self, user_id: str, channel_id: str, message_id: str) -> PublishOutcome:
        payload = builders.build_ack(user_id, channel_id, message_id)
        return await self._publisher.publish(EventKind.ACK, payload)
