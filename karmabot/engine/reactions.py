"""
karmabot.engine.reactions — Reaction → karma delta rules
=========================================================

Pure functions, no I/O.  Given a :class:`ReactionEvent`, decide whether
it moves karma and by how much.

Delta table::

    emoji     add   remove
    upvote    +1    -1
    downvote  -1    +1
    other     --    --

Removing a reaction exactly undoes adding it, so any add → remove pair
on the same message nets to zero.
"""

from __future__ import annotations

from karmabot.engine.events import EmojiKind, ReactionDirection, ReactionEvent

_VARIATION_SELECTOR = "\ufe0f"

DELTAS: dict[tuple[EmojiKind, ReactionDirection], int] = {
    (EmojiKind.UPVOTE, ReactionDirection.ADD): 1,
    (EmojiKind.UPVOTE, ReactionDirection.REMOVE): -1,
    (EmojiKind.DOWNVOTE, ReactionDirection.ADD): -1,
    (EmojiKind.DOWNVOTE, ReactionDirection.REMOVE): 1,
}


def _bare(name: str) -> str:
    return name.replace(_VARIATION_SELECTOR, "")


def classify_emoji(name: str | None, upvote: str, downvote: str) -> EmojiKind:
    """Map a raw emoji name onto :class:`EmojiKind`.

    Clients send arrows both with and without the U+FE0F variation
    selector, so it is ignored on both sides of the comparison.
    """
    if not name:
        return EmojiKind.OTHER
    bare = _bare(name)
    if bare == _bare(upvote):
        return EmojiKind.UPVOTE
    if bare == _bare(downvote):
        return EmojiKind.DOWNVOTE
    return EmojiKind.OTHER


def resolve(event: ReactionEvent, self_interaction_allowed: bool) -> int | None:
    """Return the karma delta for *event*, or ``None`` if it should be ignored."""
    if event.actor_is_bot:
        return None
    if not self_interaction_allowed and event.actor_id == event.target_author_id:
        return None
    return DELTAS.get((event.emoji, event.direction))
