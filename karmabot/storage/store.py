"""
karmabot.storage.store — Per-Guild Karma Files & Async Helper
==============================================================

**Why this file exists:**
Every guild's karma lives in one small JSON document,
``<data_dir>/<guild_id>.json``, mapping member IDs (as strings) to integer
scores.  Documents are replaced whole on every write; score sets are
bounded by community size, so there is no journal and no schema version.

Three rules keep the files honest:

1. **Absent is empty.**  A guild with no file has no karma yet; ``load``
   returns ``{}``.
2. **Corrupt is an error.**  A file that isn't a JSON object of
   decimal user id → int raises :class:`CorruptScoreRecordError` and is left on
   disk untouched for an operator to inspect.
3. **Writes are atomic.**  ``save`` writes a temp file in the same
   directory, fsyncs it, then ``os.replace``s it over the old document, so
   a concurrent reader sees either the old or the new file, never half.

File I/O is blocking, and discord.py runs on ``asyncio``.  Cogs call
``await run_io(store.update, guild_id, fn)`` which ships the work to the
default thread pool.  Because that means real threads, every
load → mutate → save cycle runs inside a per-guild lock
(:meth:`ScoreStore.update`).

Usage::

    from karmabot.storage.store import ScoreStore, run_io

    store = ScoreStore("data")
    record = await run_io(store.load, guild_id)
    new_score = await run_io(store.update, guild_id, bump)
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import ParamSpec, TypeVar

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")

ScoreRecord = dict[str, int]


class ScoreStoreError(OSError):
    """A guild's karma document could not be read or written."""


class CorruptScoreRecordError(ScoreStoreError):
    """A guild's karma document exists but isn't a JSON object of ints."""


# ---------------------------------------------------------------------------
# Document validation
# ---------------------------------------------------------------------------
def _validate_record(data: object, path: Path) -> ScoreRecord:
    """Return *data* as a :data:`ScoreRecord` or raise if it has the wrong shape."""
    if not isinstance(data, dict):
        raise CorruptScoreRecordError(
            f"{path} does not contain a JSON object (got {type(data).__name__})"
        )
    record: ScoreRecord = {}
    for user_id, score in data.items():
        if not user_id.isdigit() or not user_id.isascii():
            raise CorruptScoreRecordError(
                f"{path}: member key {user_id!r} is not a decimal user id"
            )
        # bool is an int subclass; true/false in the file is corruption
        if isinstance(score, bool) or not isinstance(score, int):
            raise CorruptScoreRecordError(
                f"{path}: score for user {user_id!r} is not an integer ({score!r})"
            )
        record[user_id] = score
    return record


def _guild_key(guild_id: int | str) -> str:
    """Normalise a guild ID into a safe file stem (decimal snowflake only)."""
    key = str(guild_id).strip()
    if not key.isdigit() or not key.isascii():
        raise ValueError(f"Invalid guild id: {guild_id!r}")
    return key


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------
class ScoreStore:
    """File-backed karma store, one JSON document per guild.

    Parameters
    ----------
    data_dir:
        Directory holding the guild documents.  Created if missing.
    """

    def __init__(self, data_dir: str | Path) -> None:
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()
        logger.info("Score store ready → %s", self.data_dir.resolve())

    def path_for(self, guild_id: int | str) -> Path:
        return self.data_dir / f"{_guild_key(guild_id)}.json"

    # -------------------------------------------------------------------
    # Critical section
    # -------------------------------------------------------------------
    def _lock_for(self, guild_id: int | str) -> threading.Lock:
        key = _guild_key(guild_id)
        with self._locks_guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    @contextmanager
    def lock(self, guild_id: int | str) -> Iterator[None]:
        """Hold the guild's write lock for the duration of the block.

        Usage::

            with store.lock(guild_id):
                record = store.load(guild_id)
                record["42"] = 7
                store.save(guild_id, record)
        """
        guild_lock = self._lock_for(guild_id)
        with guild_lock:
            yield

    # -------------------------------------------------------------------
    # Primitives
    # -------------------------------------------------------------------
    def load(self, guild_id: int | str) -> ScoreRecord:
        """Return the guild's karma mapping, or ``{}`` if it has no file.

        Raises
        ------
        CorruptScoreRecordError
            If the file exists but can't be parsed into decimal user id → int.
        ScoreStoreError
            If the file exists but can't be read.
        """
        path = self.path_for(guild_id)
        try:
            with open(path, encoding="utf-8") as fh:
                data = json.load(fh)
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError as exc:
            logger.error("Corrupt karma file %s: %s", path, exc)
            raise CorruptScoreRecordError(f"{path} is not valid JSON: {exc}") from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise ScoreStoreError(f"Failed to read {path}: {exc}") from exc

        try:
            return _validate_record(data, path)
        except CorruptScoreRecordError as exc:
            logger.error("Corrupt karma file: %s", exc)
            raise

    def save(self, guild_id: int | str, record: ScoreRecord) -> None:
        """Replace the guild's document with *record* atomically.

        Raises
        ------
        ScoreStoreError
            If the temp file can't be written or swapped into place.
        """
        path = self.path_for(guild_id)
        payload = json.dumps({str(k): int(v) for k, v in record.items()})

        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{path.stem}.", suffix=".tmp", dir=self.data_dir,
            )
        except OSError as exc:
            raise ScoreStoreError(f"Failed to write {path}: {exc}") from exc

        try:
            try:
                fh = os.fdopen(fd, "w", encoding="utf-8")
            except Exception:
                os.close(fd)
                raise
            with fh:
                fh.write(payload)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, path)
        except OSError as exc:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise ScoreStoreError(f"Failed to write {path}: {exc}") from exc

        logger.debug("Saved %d karma entries for guild %s", len(record), guild_id)

    def reset(self, guild_id: int | str) -> None:
        """Empty the guild's karma.  The file stays, containing ``{}``."""
        with self.lock(guild_id):
            self.save(guild_id, {})
        logger.info("Karma reset for guild %s", guild_id)

    def update(self, guild_id: int | str, mutate: Callable[[ScoreRecord], T]) -> T:
        """Load, mutate and save the guild's record under its lock.

        *mutate* edits the record in place and its return value is passed
        back to the caller.  If *mutate* raises, nothing is written.
        """
        with self.lock(guild_id):
            record = self.load(guild_id)
            result = mutate(record)
            self.save(guild_id, record)
            return result


# ---------------------------------------------------------------------------
# Async bridge
# ---------------------------------------------------------------------------
async def run_io(func: Callable[P, T], *args: P.args, **kwargs: P.kwargs) -> T:
    """Run a **synchronous** store call on a background thread.

    Every store call in a Cog goes through this wrapper so the bot's event
    loop never blocks on disk::

        record = await run_io(store.load, guild_id)
    """
    return await asyncio.to_thread(func, *args, **kwargs)
