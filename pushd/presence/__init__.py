"""Channel presence tracking and recipient filtering."""

from pushd.presence.filter import PresenceFilter
from pushd.presence.store import PresenceStore, open_channels_key, open_sessions_key
from pushd.presence.types import ChannelActivity

__all__ = [
    "ChannelActivity",
    "PresenceFilter",
    "PresenceStore",
    "open_channels_key",
    "open_sessions_key",
]
