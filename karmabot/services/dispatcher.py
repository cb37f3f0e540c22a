"""
karmabot.services.dispatcher — Prefix command routing
======================================================

Maps a parsed command name onto its handler and turns the outcome into a
:class:`CommandReply`.  The dispatcher knows nothing about discord.py:
the cog hands it a :class:`CommandInvocation`, and user lookups and host
metrics come in through the :class:`UserDirectory` and
:class:`MetricsProvider` ports.

Commands:
- ``ping`` — fixed acknowledgment
- ``karma [@user]`` — score of the mentioned member (or the caller)
- ``leaderboard`` — top members by karma
- ``reset`` — admin only, empties the guild's karma
- ``host`` — CPU / memory / latency report

Every failure becomes an error reply; nothing propagates to the cog.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Protocol

from karmabot.constants import (
    COMMAND_FAILED,
    HOST_TITLE,
    NO_DATA,
    PERMISSION_DENIED,
    PONG,
    RESET_DONE,
    UNKNOWN_USER,
)
from karmabot.services.karma_service import PermissionDenied, reset_karma, top_entries
from karmabot.storage.store import run_io

if TYPE_CHECKING:
    from karmabot.config import KarmaConfig
    from karmabot.services.metrics import MetricsProvider
    from karmabot.storage.store import ScoreStore

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Ports
# ---------------------------------------------------------------------------
class UserDirectory(Protocol):
    async def display_name(self, user_id: int) -> str:
        """Resolve a member's display name.  May raise on lookup failure."""
        ...


# ---------------------------------------------------------------------------
# Input / output envelopes
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class Mention:
    user_id: int
    display_name: str


@dataclass(frozen=True, slots=True)
class CommandInvocation:
    """A prefix command that passed the cooldown gate."""

    guild_id: int
    actor_id: int
    actor_name: str
    name: str
    # Targets come from mentions; trailing words are not read
    mentions: tuple[Mention, ...] = ()
    created_at: datetime | None = None


class ReplyKind(enum.StrEnum):
    INFO = "info"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class CommandReply:
    kind: ReplyKind
    description: str = ""
    title: str | None = None
    fields: tuple[tuple[str, str], ...] = ()

    @classmethod
    def info(cls, description: str, **kwargs) -> CommandReply:
        return cls(ReplyKind.INFO, description, **kwargs)

    @classmethod
    def error(cls, description: str, **kwargs) -> CommandReply:
        return cls(ReplyKind.ERROR, description, **kwargs)


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------
def parse_command(content: str, prefix: str) -> tuple[str, tuple[str, ...]] | None:
    """Split ``"!karma @bob"`` into ``("karma", ("@bob",))``.

    Returns ``None`` if *content* doesn't start with *prefix* or carries no
    command name.  Names are lower-cased.
    """
    if not content.startswith(prefix):
        return None
    parts = content[len(prefix):].split()
    if not parts:
        return None
    return parts[0].lower(), tuple(parts[1:])


def cooldown_reply(remaining_ms: float) -> CommandReply:
    return CommandReply.error(
        f"Please wait {remaining_ms / 1000:.1f}s before reusing commands."
    )


# ---------------------------------------------------------------------------
# Dispatcher
# ---------------------------------------------------------------------------
Handler = Callable[[CommandInvocation], Awaitable[CommandReply]]


class CommandDispatcher:
    """Routes :class:`CommandInvocation` objects to their handlers.

    Parameters
    ----------
    store:
        The per-guild karma store.
    cfg:
        Bot configuration (admin ID, leaderboard size).
    users:
        Display-name lookup used by the leaderboard.
    metrics:
        Host metrics source for ``host``.
    """

    def __init__(
        self,
        store: ScoreStore,
        cfg: KarmaConfig,
        users: UserDirectory,
        metrics: MetricsProvider,
    ) -> None:
        self.store = store
        self.cfg = cfg
        self.users = users
        self.metrics = metrics
        self._handlers: dict[str, Handler] = {
            "ping": self._ping,
            "karma": self._karma,
            "leaderboard": self._leaderboard,
            "reset": self._reset,
            "host": self._host,
        }

    @property
    def commands(self) -> frozenset[str]:
        return frozenset(self._handlers)

    async def dispatch(self, invocation: CommandInvocation) -> CommandReply | None:
        """Run the handler for *invocation*.

        Returns ``None`` for unknown commands so the caller stays silent.
        """
        handler = self._handlers.get(invocation.name.lower())
        if handler is None:
            return None
        try:
            return await handler(invocation)
        except PermissionDenied:
            return CommandReply.error(PERMISSION_DENIED)
        except Exception:
            logger.exception(
                "Command %r failed for user %s in guild %s",
                invocation.name, invocation.actor_id, invocation.guild_id,
            )
            return CommandReply.error(COMMAND_FAILED)

    # -------------------------------------------------------------------
    # Handlers
    # -------------------------------------------------------------------
    async def _ping(self, invocation: CommandInvocation) -> CommandReply:
        return CommandReply.info(PONG)

    async def _karma(self, invocation: CommandInvocation) -> CommandReply:
        if invocation.mentions:
            target_id = invocation.mentions[0].user_id
            target_name = invocation.mentions[0].display_name
        else:
            target_id = invocation.actor_id
            target_name = invocation.actor_name

        record = await run_io(self.store.load, invocation.guild_id)
        score = record.get(str(target_id), 0)
        return CommandReply.info(f"{target_name} has {score} karma.")

    async def _leaderboard(self, invocation: CommandInvocation) -> CommandReply:
        record = await run_io(self.store.load, invocation.guild_id)
        entries = top_entries(record, self.cfg.leaderboard_size)
        title = f"Top {self.cfg.leaderboard_size} Users"
        if not entries:
            return CommandReply.info(NO_DATA, title=title)

        lines = []
        for rank, (user_id, score) in enumerate(entries, 1):
            name = await self._display_name(int(user_id))
            lines.append(f"{rank}. {name} - {score} karma")
        return CommandReply.info("\n".join(lines), title=title)

    async def _display_name(self, user_id: int) -> str:
        try:
            return await self.users.display_name(user_id)
        except Exception as exc:
            logger.warning("User lookup failed for %s: %s", user_id, exc)
            return UNKNOWN_USER

    async def _reset(self, invocation: CommandInvocation) -> CommandReply:
        await run_io(
            reset_karma,
            self.store,
            invocation.guild_id,
            invocation.actor_id,
            self.cfg.admin_user_id,
        )
        logger.info(
            "Karma reset in guild %s by %s", invocation.guild_id, invocation.actor_id,
        )
        return CommandReply.info(RESET_DONE)

    async def _host(self, invocation: CommandInvocation) -> CommandReply:
        snapshot = await run_io(self.metrics.snapshot)
        latency_ms = 0
        if invocation.created_at is not None:
            elapsed = datetime.now(UTC) - invocation.created_at
            latency_ms = max(0, round(elapsed.total_seconds() * 1000))

        return CommandReply.info(
            "",
            title=HOST_TITLE,
            fields=(
                ("CPU Load", f"{snapshot.cpu_percent:.2f}%"),
                ("CPU Cores", str(snapshot.cpu_cores)),
                (
                    "Memory Usage",
                    f"{snapshot.memory_used_mb:.2f}MB/{snapshot.memory_total_mb:.2f}MB",
                ),
                ("Latency", f"{latency_ms}ms"),
            ),
        )
