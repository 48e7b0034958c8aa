"""Typed structures for the presence subsystem."""

from __future__ import annotations

from enum import Enum


class ChannelActivity(str, Enum):
    """Channel-activity signal reported by a client session."""

    OPEN = "open"
    CLOSE = "close"
