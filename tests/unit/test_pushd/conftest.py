"""Shared fakes for pushd unit tests: an in-memory Redis and a mocked AMQP channel."""

from __future__ import annotations

import asyncio
import fnmatch
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from pushd.config import ConfigProvider
from pushd.payloads import ChannelRef, MessageSnapshot, PushNotification, UserSnapshot


class FakePipeline:
    """Buffers commands like ``redis.asyncio`` pipelines and runs them on execute()."""

    def __init__(self, redis: "FakeRedis") -> None:
        self._redis = redis
        self._commands: list[tuple[str, tuple[object, ...]]] = []

    async def __aenter__(self) -> "FakePipeline":
        return self

    async def __aexit__(self, *_exc: object) -> None:
        self._commands.clear()

    def __getattr__(self, name: str):  # type: ignore[no-untyped-def]
        def buffer(*args: object) -> "FakePipeline":
            self._commands.append((name, args))
            return self

        return buffer

    async def execute(self) -> list[object]:
        results = []
        for name, args in self._commands:
            results.append(await getattr(self._redis, name)(*args))
        self._commands.clear()
        return results


class FakeRedis:
    """Just enough of the async Redis set API for the presence store."""

    def __init__(self) -> None:
        self.sets: dict[str, set[str]] = {}
        self.ttls: dict[str, int] = {}
        self.calls: list[str] = []
        self.down = False
        self.failing_users: set[str] = set()
        self.slow_users: set[str] = set()
        self.undecodable_users: set[str] = set()
        self.in_flight = 0
        self.max_in_flight = 0

    async def _enter(self, command: str, key: str) -> None:
        self.calls.append(command)
        if self.down:
            raise RedisConnectionError("Connection refused")
        user_id = key.split(":")[1] if ":" in key else ""
        if user_id in self.failing_users:
            raise RedisConnectionError(f"Connection reset while reading {key}")
        if user_id in self.undecodable_users:
            raise UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte")
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            # Yield so concurrent lookups actually interleave
            await asyncio.sleep(0.5 if user_id in self.slow_users else 0)
        finally:
            self.in_flight -= 1

    def expire_now(self, key: str) -> None:
        """Simulate TTL expiry."""
        self.sets.pop(key, None)
        self.ttls.pop(key, None)

    async def sadd(self, key: str, *members: str) -> int:
        await self._enter("sadd", key)
        current = self.sets.setdefault(key, set())
        added = len(set(members) - current)
        current.update(members)
        return added

    async def srem(self, key: str, *members: str) -> int:
        await self._enter("srem", key)
        current = self.sets.get(key, set())
        removed = len(current & set(members))
        current.difference_update(members)
        if not current:
            self.expire_now(key)
        return removed

    async def smembers(self, key: str) -> set[str]:
        await self._enter("smembers", key)
        return set(self.sets.get(key, set()))

    async def sismember(self, key: str, member: str) -> bool:
        await self._enter("sismember", key)
        return member in self.sets.get(key, set())

    async def exists(self, key: str) -> int:
        await self._enter("exists", key)
        return int(key in self.sets)

    async def expire(self, key: str, seconds: int) -> bool:
        await self._enter("expire", key)
        if key not in self.sets:
            return False
        self.ttls[key] = seconds
        return True

    async def scan(self, cursor: int, match: str, count: int) -> tuple[int, list[str]]:
        await self._enter("scan", match)
        return 0, [k for k in self.sets if fnmatch.fnmatchcase(k, match)]

    def pipeline(self, transaction: bool = True) -> FakePipeline:
        return FakePipeline(self)


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    return tmp_path / "pushd.yml"


@pytest.fixture
def config_provider(config_path: Path) -> ConfigProvider:
    return ConfigProvider(config_path)


@pytest.fixture
def exchange() -> MagicMock:
    exchange = MagicMock()
    exchange.publish = AsyncMock(return_value=None)
    return exchange


@pytest.fixture
def amqp_channel(exchange: MagicMock) -> MagicMock:
    channel = MagicMock()
    channel.get_exchange = AsyncMock(return_value=exchange)
    return channel


@pytest.fixture
def make_notification():
    def _make(
        channel_id: str = "c9",
        body: str = "hello there",
        content: str | None = "hello there",
    ) -> PushNotification:
        return PushNotification(
            author="alice",
            icon="https://cdn.example/avatars/alice.png",
            body=body,
            tag=channel_id,
            timestamp=1700000000000,
            url=f"https://app.example/channel/{channel_id}/m1",
            message=MessageSnapshot(_id="m1", channel=channel_id, author="u-alice", content=content),
            channel=ChannelRef(_id=channel_id, channel_type="TextChannel", name="general"),
        )

    return _make


@pytest.fixture
def alice() -> UserSnapshot:
    return UserSnapshot(_id="u-alice", username="alice", discriminator="0001", online=True)
