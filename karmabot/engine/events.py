"""
karmabot.engine.events — ReactionEvent and its enums
=====================================================

Every Discord reaction add/remove is normalized into a
:class:`ReactionEvent` before the resolver looks at it, so the karma
rules never touch a discord.py object.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

__all__ = ["ReactionDirection", "EmojiKind", "ReactionEvent"]


class ReactionDirection(enum.StrEnum):
    ADD = "add"
    REMOVE = "remove"


class EmojiKind(enum.StrEnum):
    UPVOTE = "upvote"
    DOWNVOTE = "downvote"
    OTHER = "other"


# ---------------------------------------------------------------------------
# ReactionEvent — the resolver's only input
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class ReactionEvent:
    """One reaction added to or removed from a guild message.

    ``actor_id`` reacted; ``target_author_id`` wrote the message and is the
    member whose karma moves.
    """

    direction: ReactionDirection
    emoji: EmojiKind
    actor_id: int
    target_author_id: int
    guild_id: int
    actor_is_bot: bool = False
