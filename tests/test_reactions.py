"""
tests/test_reactions.py — Reaction → Karma Rules
=================================================

Tests the pure resolver (no I/O) and the store-backed
``apply_reaction`` service.
"""

from __future__ import annotations

import pytest

from karmabot.constants import DOWNVOTE_EMOJI, UPVOTE_EMOJI
from karmabot.engine.events import EmojiKind, ReactionDirection, ReactionEvent
from karmabot.engine.reactions import classify_emoji, resolve
from karmabot.services.karma_service import apply_reaction, get_karma
from karmabot.storage.store import ScoreStore
from conftest import GUILD_ID

ADD = ReactionDirection.ADD
REMOVE = ReactionDirection.REMOVE


def _event(
    emoji: EmojiKind = EmojiKind.UPVOTE,
    direction: ReactionDirection = ADD,
    *,
    actor_id: int = 2001,
    target_author_id: int = 1001,
    actor_is_bot: bool = False,
) -> ReactionEvent:
    return ReactionEvent(
        direction=direction,
        emoji=emoji,
        actor_id=actor_id,
        target_author_id=target_author_id,
        guild_id=GUILD_ID,
        actor_is_bot=actor_is_bot,
    )


class TestClassifyEmoji:
    def test_configured_arrows(self):
        assert classify_emoji(UPVOTE_EMOJI, UPVOTE_EMOJI, DOWNVOTE_EMOJI) is EmojiKind.UPVOTE
        assert classify_emoji(DOWNVOTE_EMOJI, UPVOTE_EMOJI, DOWNVOTE_EMOJI) is EmojiKind.DOWNVOTE

    def test_variation_selector_is_ignored(self):
        """⬆ without U+FE0F still counts as an upvote."""
        assert classify_emoji("\u2b06", UPVOTE_EMOJI, DOWNVOTE_EMOJI) is EmojiKind.UPVOTE

    @pytest.mark.parametrize("name", ["\U0001f44d", "thumbsup", "", None])
    def test_everything_else_is_other(self, name):
        assert classify_emoji(name, UPVOTE_EMOJI, DOWNVOTE_EMOJI) is EmojiKind.OTHER

    def test_custom_emoji_names(self):
        assert classify_emoji("plus1", "plus1", "minus1") is EmojiKind.UPVOTE
        assert classify_emoji("minus1", "plus1", "minus1") is EmojiKind.DOWNVOTE


class TestResolve:
    @pytest.mark.parametrize(
        ("emoji", "direction", "expected"),
        [
            (EmojiKind.UPVOTE, ADD, 1),
            (EmojiKind.UPVOTE, REMOVE, -1),
            (EmojiKind.DOWNVOTE, ADD, -1),
            (EmojiKind.DOWNVOTE, REMOVE, 1),
            (EmojiKind.OTHER, ADD, None),
            (EmojiKind.OTHER, REMOVE, None),
        ],
    )
    def test_delta_table(self, emoji, direction, expected):
        assert resolve(_event(emoji, direction), self_interaction_allowed=False) == expected

    def test_bot_actor_ignored(self):
        assert resolve(_event(actor_is_bot=True), self_interaction_allowed=True) is None

    def test_self_reaction_ignored_when_disallowed(self):
        event = _event(actor_id=1001, target_author_id=1001)
        assert resolve(event, self_interaction_allowed=False) is None

    def test_self_reaction_counts_when_allowed(self):
        event = _event(actor_id=1001, target_author_id=1001)
        assert resolve(event, self_interaction_allowed=True) == 1

    @pytest.mark.parametrize("emoji", [EmojiKind.UPVOTE, EmojiKind.DOWNVOTE])
    def test_remove_undoes_add(self, emoji):
        add = resolve(_event(emoji, ADD), self_interaction_allowed=False)
        remove = resolve(_event(emoji, REMOVE), self_interaction_allowed=False)
        assert add + remove == 0


class TestApplyReaction:
    def test_upvote_creates_entry(self, store: ScoreStore):
        change = apply_reaction(store, _event(), self_interaction_allowed=False)
        assert change is not None
        assert (change.user_id, change.delta, change.score) == (1001, 1, 1)
        assert store.load(GUILD_ID) == {"1001": 1}

    def test_downvote_can_go_negative(self, store: ScoreStore):
        change = apply_reaction(store, _event(EmojiKind.DOWNVOTE), self_interaction_allowed=False)
        assert change.score == -1

    @pytest.mark.parametrize("emoji", [EmojiKind.UPVOTE, EmojiKind.DOWNVOTE])
    def test_add_then_remove_nets_zero(self, store: ScoreStore, emoji):
        store.save(GUILD_ID, {"1001": 7})
        apply_reaction(store, _event(emoji, ADD), self_interaction_allowed=False)
        apply_reaction(store, _event(emoji, REMOVE), self_interaction_allowed=False)
        assert get_karma(store, GUILD_ID, 1001) == 7

    def test_ignored_event_touches_nothing(self, store: ScoreStore):
        """Self-reaction with self-interaction off: no file is even created."""
        event = _event(actor_id=1001, target_author_id=1001)
        assert apply_reaction(store, event, self_interaction_allowed=False) is None
        assert not store.path_for(GUILD_ID).exists()

    def test_other_emoji_touches_nothing(self, store: ScoreStore):
        store.save(GUILD_ID, {"1001": 3})
        assert apply_reaction(store, _event(EmojiKind.OTHER), self_interaction_allowed=False) is None
        assert store.load(GUILD_ID) == {"1001": 3}

    def test_other_members_unchanged(self, store: ScoreStore):
        store.save(GUILD_ID, {"5": 2, "1001": 1})
        apply_reaction(store, _event(), self_interaction_allowed=False)
        assert store.load(GUILD_ID) == {"5": 2, "1001": 2}


class TestGetKarma:
    def test_unscored_member_has_zero(self, store: ScoreStore):
        assert get_karma(store, GUILD_ID, 424242) == 0

    def test_unscored_member_in_populated_guild(self, store: ScoreStore):
        store.save(GUILD_ID, {"1": 4})
        assert get_karma(store, GUILD_ID, 2) == 0
        assert get_karma(store, GUILD_ID, 1) == 4
