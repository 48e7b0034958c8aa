"""Payload variants published to the push exchange.

Every payload is an immutable pydantic model. Field names (and the ``_id``
aliases on domain snapshots) are part of the wire contract with the push
consumers. Domain snapshots accept and re-emit fields they do not declare so
that callers can hand over full records verbatim.
"""

from __future__ import annotations

from enum import Enum
from typing import ClassVar, Optional

from pydantic import BaseModel, ConfigDict, Field


class EventKind(str, Enum):
    FR_ACCEPTED = "fr_accepted"
    FR_RECEIVED = "fr_received"
    GENERIC = "generic"
    MESSAGE_SENT = "message_sent"
    MASS_MENTION = "mass_mention"
    ACK = "ack"


class _Snapshot(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)


class UserSnapshot(_Snapshot):
    id: str = Field(alias="_id")
    username: str = ""


class ChannelRef(_Snapshot):
    id: str = Field(alias="_id")


class MessageSnapshot(_Snapshot):
    id: str = Field(alias="_id")
    channel: str
    author: str
    content: Optional[str] = None


class PushNotification(_Snapshot):
    """Push-notification content as rendered for a single message."""

    author: str = ""
    icon: str = ""
    image: Optional[str] = None
    body: str
    tag: str = ""
    timestamp: int = 0
    url: str = ""
    message: MessageSnapshot
    channel: ChannelRef

    @property
    def channel_id(self) -> str:
        return self.channel.id


class NotificationPayload(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: ClassVar[EventKind]

    def to_json(self) -> bytes:
        return self.model_dump_json(by_alias=True).encode("utf-8")

    def deduplication_key(self) -> str | None:
        return None


class FRAcceptedPayload(NotificationPayload):
    kind: ClassVar[EventKind] = EventKind.FR_ACCEPTED

    accepted_user: UserSnapshot
    user: str


class FRReceivedPayload(NotificationPayload):
    kind: ClassVar[EventKind] = EventKind.FR_RECEIVED

    from_user: UserSnapshot
    user: str


class GenericPayload(NotificationPayload):
    kind: ClassVar[EventKind] = EventKind.GENERIC

    title: str
    body: str
    icon: Optional[str] = None
    user: UserSnapshot


class MessageSentPayload(NotificationPayload):
    kind: ClassVar[EventKind] = EventKind.MESSAGE_SENT

    notification: PushNotification
    users: list[str]


class MassMentionPayload(NotificationPayload):
    kind: ClassVar[EventKind] = EventKind.MASS_MENTION

    notifications: list[PushNotification]
    server_id: str


class AckPayload(NotificationPayload):
    kind: ClassVar[EventKind] = EventKind.ACK

    user_id: str
    channel_id: str
    message_id: str

    def deduplication_key(self) -> str:
        return f"{self.user_id}-{self.channel_id}"
