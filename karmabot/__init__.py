"""
Karmabot — Reaction-Driven Karma for Discord Guilds
====================================================
Tracks a per-member karma score in every guild from ⬆️ / ⬇️ reactions,
and answers a handful of prefix commands (ping, karma, leaderboard,
reset, host).

Package layout::

    karmabot/
    ├── config.py          # YAML (+ env overrides) → typed Python config
    ├── constants.py       # Emoji, colours, reply strings
    ├── storage/
    │   └── store.py       # Per-guild JSON score files + async I/O bridge
    ├── engine/
    │   ├── events.py      # ReactionEvent dataclass + enums
    │   ├── reactions.py   # Reaction → karma delta rules
    │   └── cooldown.py    # Per-actor command cooldown gate
    ├── services/
    │   ├── karma_service.py  # Store mutations (apply reaction, reset, top)
    │   ├── dispatcher.py     # Command name → handler
    │   ├── metrics.py        # psutil host metrics
    │   └── embeds.py         # Reply → discord.Embed
    └── bot/
        ├── core.py        # Bot subclass, cog loader
        └── cogs/
            ├── karma.py   # on_message commands + reaction listeners
            └── tasks.py   # Cooldown sweep loop
"""

__version__ = "0.1.0"
