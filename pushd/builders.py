"""Payload builders, one per event kind.

Builders wrap already-validated domain snapshots into the outbound shape.
They never fail on well-formed input and never touch I/O.
"""

from __future__ import annotations

from typing import Iterable, Optional

from pushd.payloads import (
    AckPayload,
    FRAcceptedPayload,
    FRReceivedPayload,
    GenericPayload,
    MassMentionPayload,
    MessageSentPayload,
    PushNotification,
    UserSnapshot,
)
from pushd.redaction import redact_notification


def build_fr_accepted(accepted_user: UserSnapshot, requesting_user_id: str) -> FRAcceptedPayload:
    return FRAcceptedPayload(accepted_user=accepted_user, user=requesting_user_id)


def build_fr_received(from_user: UserSnapshot, target_user_id: str) -> FRReceivedPayload:
    return FRReceivedPayload(from_user=from_user, user=target_user_id)


def build_generic(user: UserSnapshot, title: str, body: str, icon: Optional[str] = None) -> GenericPayload:
    return GenericPayload(title=title, body=body, icon=icon, user=user)


def build_message_sent(notification: PushNotification, recipients: Iterable[str]) -> MessageSentPayload:
    """Redact spoilers and attach the recipient ids, sorted for stable output."""
    return MessageSentPayload(notification=redact_notification(notification), users=sorted(set(recipients)))


def build_mass_mention(server_id: str, notifications: Iterable[PushNotification]) -> MassMentionPayload:
    return MassMentionPayload(
        notifications=[redact_notification(n) for n in notifications],
        server_id=server_id,
    )


def build_ack(user_id: str, channel_id: str, message_id: str) -> AckPayload:
    return AckPayload(user_id=user_id, channel_id=channel_id, message_id=message_id)
