"""pushd: push-notification fan-out and delivery core."""

from pushd.config import ConfigProvider
from pushd.notifier import Notifier
from pushd.payloads import (
    AckPayload,
    EventKind,
    FRAcceptedPayload,
    FRReceivedPayload,
    GenericPayload,
    MassMentionPayload,
    MessageSentPayload,
    PushNotification,
    UserSnapshot,
)
from pushd.presence import ChannelActivity, PresenceFilter, PresenceStore
from pushd.publisher import (
    BrokerError,
    PayloadSerializationError,
    PublishError,
    PublishOutcome,
    Publisher,
    PublishStatus,
)
from pushd.runtime import PushdRuntime

__all__ = [
    "AckPayload",
    "BrokerError",
    "ChannelActivity",
    "ConfigProvider",
    "EventKind",
    "FRAcceptedPayload",
    "FRReceivedPayload",
    "GenericPayload",
    "MassMentionPayload",
    "MessageSentPayload",
    "Notifier",
    "PayloadSerializationError",
    "PresenceFilter",
    "PresenceStore",
    "PublishError",
    "PublishOutcome",
    "PublishStatus",
    "Publisher",
    "PushdRuntime",
    "PushNotification",
    "UserSnapshot",
]
