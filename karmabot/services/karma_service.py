"""
karmabot.services.karma_service — Karma reads & mutations
==========================================================

Shared service module called by the cog and the dispatcher.  Every
function here is **synchronous** and does file I/O through the
:class:`ScoreStore`; call them from async code via ``run_io``.

Mutations always go through :meth:`ScoreStore.update` (or ``reset``), so
a reaction and a command for the same guild never interleave their
read-modify-write cycles.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from karmabot.engine.events import ReactionEvent
from karmabot.engine.reactions import resolve

if TYPE_CHECKING:
    from karmabot.storage.store import ScoreRecord, ScoreStore

logger = logging.getLogger(__name__)


class PermissionDenied(Exception):
    """The actor isn't allowed to run an admin-only operation."""


@dataclass(frozen=True, slots=True)
class KarmaChange:
    """Outcome of a reaction that moved someone's karma."""

    guild_id: int
    user_id: int
    delta: int
    score: int


def get_karma(store: ScoreStore, guild_id: int, user_id: int) -> int:
    """Current karma for *user_id*; members never scored have 0."""
    return store.load(guild_id).get(str(user_id), 0)


def apply_reaction(
    store: ScoreStore,
    event: ReactionEvent,
    self_interaction_allowed: bool,
) -> KarmaChange | None:
    """Resolve *event* and persist its delta.

    Returns ``None`` (and touches nothing on disk) when the event is
    ignored: bot actors, self-reactions when disallowed, or other emoji.
    """
    delta = resolve(event, self_interaction_allowed)
    if delta is None:
        return None

    key = str(event.target_author_id)

    def _bump(record: ScoreRecord) -> int:
        record[key] = record.get(key, 0) + delta
        return record[key]

    score = store.update(event.guild_id, _bump)
    logger.info(
        "Karma %+d for user %s in guild %s (now %d) via %s %s by %s",
        delta, event.target_author_id, event.guild_id, score,
        event.emoji, event.direction, event.actor_id,
    )
    return KarmaChange(
        guild_id=event.guild_id,
        user_id=event.target_author_id,
        delta=delta,
        score=score,
    )


def top_entries(record: ScoreRecord, limit: int = 3) -> list[tuple[str, int]]:
    """Highest scores first.

    ``sorted`` is stable, so equal scores keep the record's insertion
    order (the order members first earned karma).
    """
    ranked = sorted(record.items(), key=lambda item: item[1], reverse=True)
    return ranked[:limit]


def reset_karma(
    store: ScoreStore,
    guild_id: int,
    actor_id: int,
    admin_user_id: int | None,
) -> None:
    """Empty the guild's karma if *actor_id* is the configured admin.

    Raises
    ------
    PermissionDenied
        If *actor_id* isn't the admin, or no admin is configured.
    """
    if admin_user_id is None or actor_id != admin_user_id:
        logger.warning(
            "User %s tried to reset karma in guild %s without permission",
            actor_id, guild_id,
        )
        raise PermissionDenied(f"user {actor_id} may not reset karma")
    store.reset(guild_id)
