"""
karmabot.services.embeds — Discord embed builders
==================================================

All embed construction lives here so the cog and dispatcher only need to
supply data, never layout.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import discord

from karmabot.constants import ERROR_COLOR, INFO_COLOR
from karmabot.services.dispatcher import CommandReply, ReplyKind

if TYPE_CHECKING:
    from karmabot.services.karma_service import KarmaChange


def build_reply_embed(reply: CommandReply) -> discord.Embed:
    """Render a :class:`CommandReply` (info = blue, error = red)."""
    color = ERROR_COLOR if reply.kind is ReplyKind.ERROR else INFO_COLOR
    embed = discord.Embed(
        title=reply.title,
        description=reply.description or None,
        color=discord.Color(color),
    )
    for name, value in reply.fields:
        embed.add_field(name=name, value=value, inline=True)
    return embed


def build_karma_change_embed(display_name: str, change: KarmaChange) -> discord.Embed:
    """Announce a member's new karma after a reaction."""
    return discord.Embed(
        description=f"{display_name} now has {change.score} karma.",
        color=discord.Color(INFO_COLOR),
    )
