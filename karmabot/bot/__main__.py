"""
karmabot.bot.__main__ — Entry point for ``python -m karmabot.bot``
==================================================================

Wiring:
1. Load .env (secrets).
2. Load config.yaml (soft settings).
3. Open the per-guild score store.
4. Create the KarmaBot and hand it config + store.
5. Start the bot (blocking — runs the asyncio event loop).

Run with::

    python -m karmabot.bot
"""

from __future__ import annotations

import logging
import os
import sys

from dotenv import load_dotenv

from karmabot.bot.core import KarmaBot
from karmabot.config import load_config
from karmabot.storage.store import ScoreStore

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("karmabot")


def main() -> None:
    """Bootstrap and run the karma bot."""

    # 1. Environment variables (secrets + legacy overrides).
    load_dotenv()

    token = os.getenv("DISCORD_TOKEN")
    if not token or token == "your-discord-bot-token-here":
        logger.critical(
            "DISCORD_TOKEN is not set.  "
            "Copy .env.example → .env and paste your bot token."
        )
        sys.exit(1)

    # 2. Soft configuration.
    cfg = load_config(os.getenv("KARMABOT_CONFIG", "config.yaml"))
    logger.info("Config loaded — prefix %r, data dir %s", cfg.bot_prefix, cfg.data_dir)
    if cfg.admin_user_id is None:
        logger.warning("admin_user_id is not set — reset is disabled.")

    # 3. Storage.
    store = ScoreStore(cfg.data_dir)

    # 4. Bot.
    bot = KarmaBot(cfg=cfg, store=store)

    # 5. Run (blocks until Ctrl+C or SIGTERM).
    logger.info("Starting karma bot…")
    try:
        bot.run(token, log_handler=None)
    except KeyboardInterrupt:
        logger.info("Shutting down gracefully…")


if __name__ == "__main__":
    main()
