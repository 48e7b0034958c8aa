"""Recipient filtering by channel presence."""

from __future__ import annotations

import asyncio
from typing import Iterable

from instrukt_ai_logging import get_logger

from pushd.constants import PRESENCE_MAX_CONCURRENCY
from pushd.presence.store import PresenceStore

logger = get_logger(__name__)


class PresenceFilter:
    """Drops recipients who are actively viewing the target channel.

    Lookups for all recipients run concurrently, bounded by ``max_concurrency``.
    Each lookup fails open on its own, so one unreachable record never
    affects the others.
    """

    def __init__(self, store: PresenceStore, *, max_concurrency: int = PRESENCE_MAX_CONCURRENCY) -> None:
        self._store = store
        self._max_concurrency = max_concurrency

    async def viewers(self, recipients: Iterable[str], channel_id: str) -> set[str]:
        candidates = set(recipients)
        if not candidates:
            return set()

        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def check(user_id: str) -> tuple[str, bool]:
            async with semaphore:
                return user_id, await self._store.is_viewing(user_id, channel_id)

        results = await asyncio.gather(*(check(u) for u in candidates))
        viewer_ids = {user_id for user_id, viewing in results if viewing}
        logger.debug("Filtered viewer IDs", channel_id=channel_id, viewers=sorted(viewer_ids))
        return viewer_ids

    async def filter(self, recipients: Iterable[str], channel_id: str) -> set[str]:
        """Return the recipients who are not viewing ``channel_id``."""
        candidates = set(recipients)
        if not candidates:
            return set()
        return candidates - await self.viewers(candidates, channel_id)
