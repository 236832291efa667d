"""Unit tests for the single-flight bundle cache."""

from __future__ import annotations

import asyncio
import os
from pathlib import Path

import pytest

from asset_inliner.application.results import BundleResult
from asset_inliner.errors import BundleError
from asset_inliner.infrastructure.bundle_cache import BundleCache


def _bump_mtime(path: Path) -> None:
    stat = path.stat()
    os.utime(path, ns=(stat.st_atime_ns, stat.st_mtime_ns + 1_000_000_000))


@pytest.mark.asyncio
async def test_unchanged_file_bundled_once(tmp_path: Path, bundler) -> None:
    script = tmp_path / "app.js"
    script.write_text("console.log(1)", encoding="utf-8")
    cache = BundleCache(bundler)

    first = await cache.obtain(script)
    second = await cache.obtain(script)

    assert first is second
    assert len(bundler.calls) == 1
    assert cache.stats.hits == 1
    assert cache.stats.misses == 1


@pytest.mark.asyncio
async def test_changed_mtime_rebundles(tmp_path: Path, bundler) -> None:
    script = tmp_path / "app.js"
    script.write_text("console.log(1)", encoding="utf-8")
    cache = BundleCache(bundler)

    await cache.obtain(script)
    script.write_text("console.log(2)", encoding="utf-8")
    _bump_mtime(script)
    result = await cache.obtain(script)

    assert len(bundler.calls) == 2
    assert "console.log(2)" in result.code


@pytest.mark.asyncio
async def test_concurrent_misses_share_one_bundle(tmp_path: Path, make_bundler) -> None:
    script = tmp_path / "app.js"
    script.write_text("console.log(1)", encoding="utf-8")
    bundler = make_bundler(delay=0.05)
    cache = BundleCache(bundler)

    results = await asyncio.gather(*(cache.obtain(script) for _ in range(5)))

    assert len(bundler.calls) == 1
    assert all(result is results[0] for result in results)


@pytest.mark.asyncio
async def test_failures_are_not_cached(tmp_path: Path, make_bundler) -> None:
    script = tmp_path / "broken.js"
    script.write_text("syntax error(", encoding="utf-8")
    bundler = make_bundler(failing={"broken.js"})
    cache = BundleCache(bundler)

    for _ in range(2):
        with pytest.raises(BundleError):
            await cache.obtain(script)

    assert len(bundler.calls) == 2
    assert len(cache) == 0


@pytest.mark.asyncio
async def test_unexpected_bundler_errors_are_wrapped(tmp_path: Path) -> None:
    class _Crashing:
        async def bundle(self, entry_path: Path):
            raise RuntimeError("segfault")

    script = tmp_path / "app.js"
    script.write_text("", encoding="utf-8")
    with pytest.raises(BundleError, match="segfault"):
        await BundleCache(_Crashing()).obtain(script)


@pytest.mark.asyncio
async def test_missing_entry_raises_file_not_found(tmp_path: Path, bundler) -> None:
    with pytest.raises(FileNotFoundError):
        await BundleCache(bundler).obtain(tmp_path / "nope.js")
    assert bundler.calls == []


@pytest.mark.asyncio
async def test_lru_bound_evicts_least_recently_used(tmp_path: Path, bundler) -> None:
    paths = []
    for name in ("a.js", "b.js", "c.js"):
        path = tmp_path / name
        path.write_text(name, encoding="utf-8")
        paths.append(path)
    a, b, c = paths
    cache = BundleCache(bundler, max_entries=2)

    await cache.obtain(a)
    await cache.obtain(b)
    await cache.obtain(a)
    await cache.obtain(c)

    assert len(cache) == 2
    assert await cache.key_for(a) in cache
    assert await cache.key_for(b) not in cache
    await cache.obtain(b)
    assert len(bundler.calls) == 4


def test_max_entries_must_be_positive(bundler) -> None:
    with pytest.raises(ValueError):
        BundleCache(bundler, max_entries=0)


@pytest.mark.asyncio
async def test_joined_flights_are_not_counted_as_hits(tmp_path: Path, make_bundler) -> None:
    script = tmp_path / "app.js"
    script.write_text("console.log(1)", encoding="utf-8")
    cache = BundleCache(make_bundler(delay=0.05))

    await asyncio.gather(*(cache.obtain(script) for _ in range(5)))
    await cache.obtain(script)

    assert cache.stats.misses == 1
    assert cache.stats.hits + cache.stats.joined == 5
    assert cache.stats.hits >= 1


class _GatedBundler:
    def __init__(self) -> None:
        self.release = asyncio.Event()
        self.calls = 0

    async def bundle(self, entry_path: Path) -> BundleResult:
        self.calls += 1
        await self.release.wait()
        return BundleResult(code="gated()", input_files=(str(entry_path),))


@pytest.mark.asyncio
async def test_waiter_retries_when_leader_is_cancelled(tmp_path: Path) -> None:
    script = tmp_path / "app.js"
    script.write_text("gated()", encoding="utf-8")
    bundler = _GatedBundler()
    cache = BundleCache(bundler)

    leader = asyncio.create_task(cache.obtain(script))
    while bundler.calls == 0:
        await asyncio.sleep(0.01)
    follower = asyncio.create_task(cache.obtain(script))
    while cache.stats.joined == 0:
        await asyncio.sleep(0.01)

    leader.cancel()
    with pytest.raises(asyncio.CancelledError):
        await leader
    bundler.release.set()
    result = await asyncio.wait_for(follower, timeout=5)

    assert result.code == "gated()"
    assert bundler.calls == 2
    assert len(cache) == 1
