"""
karmabot.engine.cooldown — Per-actor command cooldown gate
===========================================================

Each member may run one command per ``window_ms``.  A fixed window, no
burst allowance: every admitted command restarts that member's window.
Expired entries are dropped lazily on the next ``admit`` and in bulk by
``sweep`` (run periodically from the tasks cog).
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from threading import Lock

logger = logging.getLogger(__name__)


def monotonic_ms() -> float:
    """Default clock: monotonic time in milliseconds."""
    return time.monotonic() * 1000.0


@dataclass(frozen=True, slots=True)
class GateDecision:
    allowed: bool
    remaining_ms: float = 0.0


class CommandGate:
    """Tracks the last admitted command per actor.

    Thread-safe.  *clock* returns milliseconds and can be swapped for a
    fake in tests.
    """

    def __init__(
        self,
        window_ms: float,
        clock: Callable[[], float] = monotonic_ms,
    ) -> None:
        if window_ms < 0:
            raise ValueError(f"window_ms must be >= 0, got {window_ms}")
        self.window_ms = window_ms
        self._clock = clock
        self._lock = Lock()
        # actor_id → timestamp (ms) of the last admitted command
        self._last_seen: dict[int, float] = {}

    def admit(self, actor_id: int, now: float | None = None) -> GateDecision:
        """Admit *actor_id* and start a new window, or report the time left."""
        if now is None:
            now = self._clock()

        with self._lock:
            last = self._last_seen.get(actor_id)
            if last is not None:
                expires = last + self.window_ms
                if now < expires:
                    return GateDecision(allowed=False, remaining_ms=expires - now)
                del self._last_seen[actor_id]
            self._last_seen[actor_id] = now
            return GateDecision(allowed=True)

    def sweep(self, now: float | None = None) -> int:
        """Drop every expired entry.  Returns how many were removed."""
        if now is None:
            now = self._clock()

        with self._lock:
            expired = [
                actor_id
                for actor_id, last in self._last_seen.items()
                if now >= last + self.window_ms
            ]
            for actor_id in expired:
                del self._last_seen[actor_id]

        if expired:
            logger.debug("Cooldown sweep removed %d entries", len(expired))
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._last_seen)
