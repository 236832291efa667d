"""Modification-time keyed cache in front of a script bundler."""

from __future__ import annotations

import asyncio
import logging
from collections import OrderedDict
from dataclasses import dataclass
from pathlib import Path
from typing import TypeAlias

from asset_inliner.application.ports import Bundler
from asset_inliner.application.results import BundleResult
from asset_inliner.errors import BundleError

logger = logging.getLogger(__name__)

CacheKey: TypeAlias = tuple[str, int]


@dataclass
class CacheStats:
    """Counters describing cache traffic."""

    hits: int = 0
    misses: int = 0
    joined: int = 0
    bundles: int = 0


class BundleCache:
    """Memoize bundler results per ``(absolute path, mtime)``.

    A changed modification time is a new key; older entries are superseded,
    never invalidated in place. Concurrent misses on the same key share one
    in-flight bundle; if that flight is cancelled, the waiters start a new
    one. With ``max_entries`` set, the least recently used entry
    is evicted once the bound is exceeded.

    Parameters
    ----------
    bundler : Bundler
        Bundler invoked on cache misses.
    max_entries : int | None, default=None
        Upper bound on stored entries. ``None`` keeps everything.
    """

    def __init__(self, bundler: Bundler, *, max_entries: int | None = None) -> None:
        if max_entries is not None and max_entries < 1:
            raise ValueError("max_entries must be a positive integer or None.")
        self._bundler = bundler
        self._max_entries = max_entries
        self._entries: OrderedDict[CacheKey, BundleResult] = OrderedDict()
        self._in_flight: dict[CacheKey, asyncio.Future[BundleResult]] = {}
        self.stats = CacheStats()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    async def key_for(self, path: Path) -> CacheKey:
        """Build the cache key from the file's current modification time."""
        absolute = path.resolve()
        stat = await asyncio.to_thread(absolute.stat)
        return str(absolute), stat.st_mtime_ns

    async def obtain(self, path: Path) -> BundleResult:
        """Return the bundle for ``path``, bundling only on a cache miss.

        Raises
        ------
        FileNotFoundError
            If ``path`` does not exist.
        BundleError
            If the underlying bundler fails.
        """
        key = await self.key_for(path)

        cached = self._entries.get(key)
        if cached is not None:
            self._entries.move_to_end(key)
            self.stats.hits += 1
            return cached

        pending = self._in_flight.get(key)
        if pending is not None:
            self.stats.joined += 1
            try:
                return await asyncio.shield(pending)
            except asyncio.CancelledError:
                task = asyncio.current_task()
                if not pending.cancelled() or (task is not None and task.cancelling()):
                    raise
                # The leader was cancelled, not us; start a fresh flight.
                logger.debug("in-flight bundle for %s was cancelled; retrying", key[0])
                return await self.obtain(path)

        self.stats.misses += 1
        future: asyncio.Future[BundleResult] = asyncio.get_running_loop().create_future()
        self._in_flight[key] = future
        try:
            result = await self._bundle(Path(key[0]))
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as exc:
            future.set_exception(exc)
            # Mark retrieved so a flight nobody else awaited does not warn.
            future.exception()
            raise
        else:
            self._store(key, result)
            future.set_result(result)
            return result
        finally:
            self._in_flight.pop(key, None)

    async def _bundle(self, path: Path) -> BundleResult:
        self.stats.bundles += 1
        try:
            return await self._bundler.bundle(path)
        except BundleError:
            raise
        except Exception as exc:
            raise BundleError(f"Failed to bundle {path}: {exc}") from exc

    def _store(self, key: CacheKey, result: BundleResult) -> None:
        self._entries[key] = result
        self._entries.move_to_end(key)
        if self._max_entries is None:
            return
        while len(self._entries) > self._max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("evicted bundle cache entry for %s", evicted[0])
