"""
karmabot.bot.cogs.tasks — Periodic Background Tasks
====================================================

Scheduled jobs that run on ``discord.ext.tasks`` loops:

- **Cooldown sweep** — every minute, drops expired entries from the
  command gate so members who ran one command and left don't linger in
  memory.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from discord.ext import commands, tasks

if TYPE_CHECKING:
    from karmabot.bot.core import KarmaBot

logger = logging.getLogger(__name__)


class PeriodicTasks(commands.Cog):
    """Cog for scheduled background maintenance tasks."""

    def __init__(self, bot: KarmaBot) -> None:
        self.bot = bot

    async def cog_load(self) -> None:
        """Start task loops when the cog is loaded."""
        self.cooldown_sweep_loop.start()

    async def cog_unload(self) -> None:
        """Cancel task loops on unload."""
        self.cooldown_sweep_loop.cancel()

    @tasks.loop(seconds=60)
    async def cooldown_sweep_loop(self):
        """Remove expired cooldown entries."""
        try:
            removed = self.bot.gate.sweep()
            if removed:
                logger.debug("Cooldown sweep: %d expired entries removed", removed)
        except Exception:
            logger.exception("Cooldown sweep failed")


async def setup(bot: KarmaBot) -> None:
    await bot.add_cog(PeriodicTasks(bot))
