"""
karmabot.bot.cogs.karma — Commands & Reaction Karma
====================================================

Listens for:
- ``on_message`` — prefix commands, gated by the per-member cooldown and
  routed through the :class:`CommandDispatcher`.
- ``on_raw_reaction_add`` / ``on_raw_reaction_remove`` — upvote and
  downvote reactions that move the message author's karma.

Uses raw reaction events to avoid cache misses on old messages.
Bulk clears (``on_raw_reaction_clear`` and ``on_raw_reaction_clear_emoji``)
are not handled, so karma from reactions a moderator clears stays.
Reaction failures are logged only; there is no channel to tell the
reacting member about them.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord.abc import Messageable
from discord.ext import commands

from karmabot.engine.events import EmojiKind, ReactionDirection, ReactionEvent
from karmabot.engine.reactions import classify_emoji
from karmabot.services.dispatcher import (
    CommandInvocation,
    Mention,
    cooldown_reply,
    parse_command,
)
from karmabot.services.embeds import build_karma_change_embed, build_reply_embed
from karmabot.services.karma_service import apply_reaction
from karmabot.storage.store import run_io

if TYPE_CHECKING:
    from karmabot.bot.core import KarmaBot

logger = logging.getLogger(__name__)

_FETCH_ERRORS = (discord.NotFound, discord.Forbidden, discord.HTTPException)


class Karma(commands.Cog, name="Karma"):
    """Karma commands and reaction tracking."""

    def __init__(self, bot: KarmaBot) -> None:
        self.bot = bot

    # -------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------
    @commands.Cog.listener()
    async def on_message(self, message: discord.Message) -> None:
        if message.author.bot or message.guild is None:
            return

        parsed = parse_command(message.content, self.bot.cfg.bot_prefix)
        if parsed is None:
            return

        decision = self.bot.gate.admit(message.author.id)
        if not decision.allowed:
            logger.info(
                "User %s rate limited (%.0f ms left)",
                message.author.id, decision.remaining_ms,
            )
            reply = cooldown_reply(decision.remaining_ms)
            await self._send(message.channel, build_reply_embed(reply))
            return

        name, _ = parsed
        invocation = CommandInvocation(
            guild_id=message.guild.id,
            actor_id=message.author.id,
            actor_name=message.author.display_name,
            name=name,
            mentions=tuple(
                Mention(user_id=user.id, display_name=user.display_name)
                for user in message.mentions
            ),
            created_at=message.created_at,
        )
        logger.info(
            "Command %r from user %s in guild %s",
            name, invocation.actor_id, invocation.guild_id,
        )

        reply = await self.bot.dispatcher.dispatch(invocation)
        if reply is None:
            return
        await self._send(message.channel, build_reply_embed(reply))

    # -------------------------------------------------------------------
    # Reactions
    # -------------------------------------------------------------------
    @commands.Cog.listener()
    async def on_raw_reaction_add(self, payload: discord.RawReactionActionEvent) -> None:
        """Fire when any reaction is added, even on uncached messages."""
        await self._on_reaction(payload, ReactionDirection.ADD)

    @commands.Cog.listener()
    async def on_raw_reaction_remove(self, payload: discord.RawReactionActionEvent) -> None:
        """Fire when any reaction is removed; undoes the matching add."""
        await self._on_reaction(payload, ReactionDirection.REMOVE)

    async def _on_reaction(
        self,
        payload: discord.RawReactionActionEvent,
        direction: ReactionDirection,
    ) -> None:
        try:
            await self._handle_reaction(payload, direction)
        except Exception:
            logger.exception(
                "Error processing reaction %s on message %s from user %s",
                direction, payload.message_id, payload.user_id,
            )

    async def _handle_reaction(
        self,
        payload: discord.RawReactionActionEvent,
        direction: ReactionDirection,
    ) -> None:
        """Inner reaction handler (separated for error isolation)."""

        # Gate: Ignore DMs
        if payload.guild_id is None:
            return

        # Gate: Only the configured arrows move karma
        kind = classify_emoji(
            payload.emoji.name, self.bot.cfg.upvote_emoji, self.bot.cfg.downvote_emoji,
        )
        if kind is EmojiKind.OTHER:
            return

        actor_is_bot = await self._actor_is_bot(payload)
        if actor_is_bot is None:
            return

        channel = await self._resolve_channel(payload.channel_id)
        if channel is None or not hasattr(channel, "fetch_message"):
            logger.info(
                "Dropping reaction on message %s: channel %s unavailable",
                payload.message_id, payload.channel_id,
            )
            return

        try:
            message = await channel.fetch_message(payload.message_id)
        except _FETCH_ERRORS as exc:
            logger.info(
                "Dropping reaction on message %s: %s", payload.message_id, exc,
            )
            return

        event = ReactionEvent(
            direction=direction,
            emoji=kind,
            actor_id=payload.user_id,
            target_author_id=message.author.id,
            guild_id=payload.guild_id,
            actor_is_bot=actor_is_bot,
        )
        change = await run_io(
            apply_reaction, self.bot.store, event, self.bot.cfg.self_interaction,
        )
        if change is None:
            return

        await self._send(
            channel, build_karma_change_embed(message.author.display_name, change),
        )

    async def _actor_is_bot(self, payload: discord.RawReactionActionEvent) -> bool | None:
        """Whether the reacting account is a bot, or ``None`` if it can't be resolved.

        ``payload.member`` is only populated for adds; removes fall back to
        the user cache and then the API.
        """
        if payload.member is not None:
            return payload.member.bot

        user = self.bot.get_user(payload.user_id)
        if user is None:
            try:
                user = await self.bot.fetch_user(payload.user_id)
            except _FETCH_ERRORS as exc:
                logger.info(
                    "Dropping reaction from unknown user %s: %s", payload.user_id, exc,
                )
                return None
        return user.bot

    async def _resolve_channel(self, channel_id: int):
        channel = self.bot.get_channel(channel_id)
        if channel is None:
            try:
                channel = await self.bot.fetch_channel(channel_id)
            except _FETCH_ERRORS:
                channel = None
        return channel

    async def _send(self, channel: Messageable, embed: discord.Embed) -> None:
        try:
            await channel.send(embed=embed)
        except discord.HTTPException:
            logger.exception("Failed to send reply to channel %s", getattr(channel, "id", "?"))


async def setup(bot: KarmaBot) -> None:
    await bot.add_cog(Karma(bot))
