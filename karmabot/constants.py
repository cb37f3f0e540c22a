"""
karmabot.constants — Shared Constants
======================================

Single source of truth for emoji, colours and reply strings.
Import from here instead of duplicating in cogs and services.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------
DEFAULT_PREFIX = "!"
DEFAULT_COOLDOWN_MS = 1000
DEFAULT_DATA_DIR = "data"
DEFAULT_LEADERBOARD_SIZE = 3

UPVOTE_EMOJI = "\u2b06\ufe0f"    # ⬆️
DOWNVOTE_EMOJI = "\u2b07\ufe0f"  # ⬇️

# ---------------------------------------------------------------------------
# Embed colours
# ---------------------------------------------------------------------------
INFO_COLOR = 0x0099FF
ERROR_COLOR = 0xFF0000

# ---------------------------------------------------------------------------
# Reply text
# ---------------------------------------------------------------------------
UNKNOWN_USER = "Unknown"
NO_DATA = "No data"
PONG = "Pong."
RESET_DONE = "\u2705 Karma reset."
PERMISSION_DENIED = "\u274c Insufficient permissions."
COMMAND_FAILED = "\u274c An error occurred while processing the command."
HOST_TITLE = "\U0001f5a5 Server Metrics"
