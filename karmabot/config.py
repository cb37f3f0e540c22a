"""
karmabot.config — YAML Configuration Loader
============================================

**Why this file exists:**
This module reads ``config.yaml`` for the bot's soft settings (command
prefix, cooldown window, admin identity, reaction emoji, storage path).
Secrets such as ``DISCORD_TOKEN`` stay in ``.env`` and never land here.

A small set of environment variables (``PREFIX``, ``COOLDOWN``,
``ADMIN_ID``, ``ITSELF_INTERACTION``) override the YAML values when set,
so an existing ``.env``-only deployment keeps working.

Usage::

    from karmabot.config import load_config

    cfg = load_config()          # reads ./config.yaml by default
    print(cfg.bot_prefix)        # "!"
    print(cfg.cooldown_ms)       # 1000
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import yaml

from karmabot.constants import (
    DEFAULT_COOLDOWN_MS,
    DEFAULT_DATA_DIR,
    DEFAULT_LEADERBOARD_SIZE,
    DEFAULT_PREFIX,
    DOWNVOTE_EMOJI,
    UPVOTE_EMOJI,
)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


# ---------------------------------------------------------------------------
# Typed settings object
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class KarmaConfig:
    """Immutable configuration loaded from ``config.yaml``."""

    # Commands
    bot_prefix: str = DEFAULT_PREFIX
    cooldown_ms: int = DEFAULT_COOLDOWN_MS
    leaderboard_size: int = DEFAULT_LEADERBOARD_SIZE

    # Access
    admin_user_id: int | None = None  # Only this member may run reset

    # Reactions
    self_interaction: bool = False  # Count reactions on your own messages
    upvote_emoji: str = UPVOTE_EMOJI
    downvote_emoji: str = DOWNVOTE_EMOJI

    # Storage
    data_dir: Path = Path(DEFAULT_DATA_DIR)


# ---------------------------------------------------------------------------
# Value parsing
# ---------------------------------------------------------------------------
def _parse_bool(value: object, key: str) -> bool:
    if isinstance(value, bool):
        return value
    normalized = str(value).strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ValueError(f"{key} must be a boolean, got {value!r}")


def _parse_int(value: object, key: str, *, minimum: int | None = None) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{key} must be an integer, got {value!r}")
    try:
        parsed = int(str(value).strip())
    except (TypeError, ValueError):
        raise ValueError(f"{key} must be an integer, got {value!r}") from None
    if minimum is not None and parsed < minimum:
        raise ValueError(f"{key} must be >= {minimum}, got {parsed}")
    return parsed


def _parse_optional_id(value: object, key: str) -> int | None:
    if value is None or str(value).strip() == "":
        return None
    return _parse_int(value, key, minimum=0)


def _apply_env_overrides(raw: dict) -> dict:
    """Layer the legacy environment variables on top of the YAML values."""
    merged = dict(raw)
    env_map = {
        "PREFIX": "bot_prefix",
        "COOLDOWN": "cooldown_ms",
        "ADMIN_ID": "admin_user_id",
        "ITSELF_INTERACTION": "self_interaction",
    }
    for env_name, key in env_map.items():
        value = os.getenv(env_name)
        if value is not None and value.strip() != "":
            merged[key] = value
    return merged


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def build_config(raw: dict) -> KarmaConfig:
    """Validate a raw mapping (YAML document) and return a :class:`KarmaConfig`.

    Missing keys fall back to the dataclass defaults.

    Raises
    ------
    ValueError
        If a value has the wrong type or is out of range.
    """
    default = KarmaConfig()

    prefix = str(raw.get("bot_prefix", default.bot_prefix))
    if not prefix.strip():
        raise ValueError("bot_prefix must not be empty")

    return KarmaConfig(
        bot_prefix=prefix,
        cooldown_ms=_parse_int(
            raw.get("cooldown_ms", default.cooldown_ms), "cooldown_ms", minimum=0,
        ),
        leaderboard_size=_parse_int(
            raw.get("leaderboard_size", default.leaderboard_size),
            "leaderboard_size",
            minimum=1,
        ),
        admin_user_id=_parse_optional_id(raw.get("admin_user_id"), "admin_user_id"),
        self_interaction=_parse_bool(
            raw.get("self_interaction", default.self_interaction), "self_interaction",
        ),
        upvote_emoji=str(raw.get("upvote_emoji") or default.upvote_emoji),
        downvote_emoji=str(raw.get("downvote_emoji") or default.downvote_emoji),
        data_dir=Path(raw.get("data_dir") or default.data_dir),
    )


def load_config(path: str | Path = "config.yaml") -> KarmaConfig:
    """Read *path* and return a :class:`KarmaConfig` instance.

    Parameters
    ----------
    path:
        Filesystem path to the YAML configuration file.
        Defaults to ``config.yaml`` in the current working directory.

    Raises
    ------
    FileNotFoundError
        If the YAML file doesn't exist.
    ValueError
        If the document isn't a mapping or a value is invalid.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path.resolve()}\n"
            "Hint: copy config.yaml.example → config.yaml and edit it."
        )

    with open(config_path, encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}

    if not isinstance(raw, dict):
        raise ValueError(f"{config_path} must contain a YAML mapping")

    return build_config(_apply_env_overrides(raw))
