"""Spoiler redaction for notification text.

A body that contains an opening marker (``[[`` or the escaped ``\\[\\[``) and
a closing marker (``]]`` or ``\\]\\]``) anywhere is replaced as a whole by the
spoiler placeholder. The markers do not need to be paired.
"""

from __future__ import annotations

from pushd.constants import SPOILER_PLACEHOLDER
from pushd.payloads import PushNotification

_OPEN_MARKERS = ("[[", "\\[\\[")
_CLOSE_MARKERS = ("]]", "\\]\\]")


def contains_spoiler(text: str) -> bool:
    return any(m in text for m in _OPEN_MARKERS) and any(m in text for m in _CLOSE_MARKERS)


def redact_spoiler(text: str) -> str:
    return SPOILER_PLACEHOLDER if contains_spoiler(text) else text


def redact_notification(notification: PushNotification) -> PushNotification:
    """Return a copy with the summary body and raw message content redacted."""
    update: dict[str, object] = {}
    body = redact_spoiler(notification.body)
    if body != notification.body:
        update["body"] = body

    content = notification.message.content
    if content is not None:
        redacted = redact_spoiler(content)
        if redacted != content:
            update["message"] = notification.message.model_copy(update={"content": redacted})

    if not update:
        return notification
    return notification.model_copy(update=update)
