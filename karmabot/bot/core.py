"""
karmabot.bot.core — Bot Instance & Cog Loader
==============================================

**Why this file exists:**
Defines :class:`KarmaBot`, a ``commands.Bot`` subclass that:

1. Stores the shared config (``bot.cfg``), score store (``bot.store``),
   cooldown gate (``bot.gate``) and command dispatcher
   (``bot.dispatcher``) so every Cog can reach them via ``self.bot.*``.
2. Loads every Cog listed in :data:`EXTENSIONS`.
3. Leaves prefix commands to the Karma cog's gated ``on_message``
   listener instead of discord.ext's command processor, so the cooldown
   applies before a command name is even looked at.
"""

from __future__ import annotations

import logging

import discord
from discord.ext import commands

from karmabot.config import KarmaConfig
from karmabot.engine.cooldown import CommandGate
from karmabot.services.dispatcher import CommandDispatcher
from karmabot.services.metrics import MetricsProvider, PsutilMetrics
from karmabot.storage.store import ScoreStore

logger = logging.getLogger(__name__)

# Cog modules to load on startup.
EXTENSIONS: list[str] = [
    "karmabot.bot.cogs.karma",
    "karmabot.bot.cogs.tasks",
]


class DiscordUserDirectory:
    """Resolves display names from the client cache, then the API."""

    def __init__(self, client: discord.Client) -> None:
        self.client = client

    async def display_name(self, user_id: int) -> str:
        user = self.client.get_user(user_id)
        if user is None:
            user = await self.client.fetch_user(user_id)
        return user.display_name


class KarmaBot(commands.Bot):
    """Custom Bot subclass that carries project-wide state.

    Parameters
    ----------
    cfg:
        The parsed :class:`KarmaConfig` from ``config.yaml``.
    store:
        The per-guild :class:`ScoreStore`.
    gate:
        Optional pre-built :class:`CommandGate` (tests inject one with a
        fake clock).  Defaults to one using ``cfg.cooldown_ms``.
    metrics:
        Host metrics source for ``host``.  Defaults to psutil.
    """

    def __init__(
        self,
        cfg: KarmaConfig,
        store: ScoreStore,
        gate: CommandGate | None = None,
        metrics: MetricsProvider | None = None,
    ) -> None:
        # GUILD_MESSAGE_REACTIONS is in default(); MESSAGE_CONTENT is
        # privileged and must also be enabled in the Developer Portal.
        intents = discord.Intents.default()
        intents.message_content = True
        intents.presences = False

        super().__init__(
            command_prefix=cfg.bot_prefix,
            intents=intents,
            help_command=None,
            description="Reaction-driven karma",
        )

        self.cfg = cfg
        self.store = store
        self.gate = gate if gate is not None else CommandGate(cfg.cooldown_ms)
        self.dispatcher = CommandDispatcher(
            store,
            cfg,
            users=DiscordUserDirectory(self),
            metrics=metrics if metrics is not None else PsutilMetrics(),
        )

    # -----------------------------------------------------------------------
    # Lifecycle hooks
    # -----------------------------------------------------------------------
    async def setup_hook(self) -> None:
        """Load all Cog extensions before connecting.

        A failing extension is logged and skipped; one broken Cog
        shouldn't take down the whole bot.
        """
        for ext in EXTENSIONS:
            try:
                await self.load_extension(ext)
                logger.info("Loaded extension: %s", ext)
            except Exception as exc:
                logger.error("Failed to load extension %s: %s", ext, exc)

    async def on_ready(self) -> None:
        """Fired when the bot has connected and the cache is populated."""
        assert self.user is not None  # guaranteed after on_ready
        logger.info("Logged in as %s (ID: %s)", self.user, self.user.id)
        logger.info(
            "Prefix %r, cooldown %d ms, %d guild(s)",
            self.cfg.bot_prefix, self.cfg.cooldown_ms, len(self.guilds),
        )

    async def on_message(self, message: discord.Message) -> None:
        """Commands are handled by the Karma cog's listener."""
        return
