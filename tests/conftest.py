"""
tests/conftest.py — Shared Test Fixtures
=========================================
"""

from __future__ import annotations

import asyncio

import pytest

from karmabot.config import KarmaConfig
from karmabot.engine.cooldown import CommandGate
from karmabot.services.metrics import HostMetrics
from karmabot.storage.store import ScoreStore

GUILD_ID = 100
ADMIN_ID = 9000


def run_async(coro):
    """Run an async coroutine to completion without pytest-asyncio."""
    return asyncio.run(coro)


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start: float = 10_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


class FakeUsers:
    """UserDirectory stand-in; unknown IDs raise like a failed API fetch."""

    def __init__(self, names: dict[int, str] | None = None) -> None:
        self.names = names or {}
        self.calls: list[int] = []

    async def display_name(self, user_id: int) -> str:
        self.calls.append(user_id)
        if user_id not in self.names:
            raise LookupError(f"no such user {user_id}")
        return self.names[user_id]


class FakeMetrics:
    def __init__(self) -> None:
        self.calls = 0

    def snapshot(self) -> HostMetrics:
        self.calls += 1
        return HostMetrics(
            cpu_percent=12.5,
            cpu_cores=4,
            memory_used_mb=1024.0,
            memory_total_mb=4096.0,
        )


@pytest.fixture
def store(tmp_path) -> ScoreStore:
    """A score store rooted in a fresh temp directory."""
    return ScoreStore(tmp_path / "data")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def gate(clock: FakeClock) -> CommandGate:
    return CommandGate(1000, clock=clock)


@pytest.fixture
def cfg(tmp_path) -> KarmaConfig:
    return KarmaConfig(admin_user_id=ADMIN_ID, data_dir=tmp_path / "data")
