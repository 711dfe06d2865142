"""Tests for PermissionCache."""
from __future__ import annotations

import threading
from datetime import timedelta

import pytest

from conftest import FakeClock
from taskboard_permissions.cache.store import (
    CACHE_TTL,
    MAX_CACHE_SIZE,
    CacheStats,
    PermissionCache,
)


@pytest.fixture()
def cache(clock: FakeClock) -> PermissionCache[str]:
    return PermissionCache(clock=clock)


# ---------------------------------------------------------------------------
# set / get
# ---------------------------------------------------------------------------


class TestSetGet:
    def test_defaults(self) -> None:
        cache: PermissionCache[str] = PermissionCache()
        assert cache.ttl == timedelta(minutes=5) == CACHE_TTL
        assert cache.max_size == 1000 == MAX_CACHE_SIZE

    def test_missing_key_returns_none(self, cache: PermissionCache[str]) -> None:
        assert cache.get("nope") is None

    def test_set_then_get(self, cache: PermissionCache[str]) -> None:
        cache.set("u1:p1", "ctx")
        assert cache.get("u1:p1") == "ctx"

    def test_overwrite_resets_access_count(self, cache: PermissionCache[str]) -> None:
        cache.set("k", "a")
        cache.get("k")
        cache.get("k")
        cache.set("k", "b")
        stats = cache.get_stats()
        assert cache.get("k") == "b"
        assert stats.entries[0].access_count == 1

    def test_hit_updates_access_bookkeeping(
        self, cache: PermissionCache[str], clock: FakeClock
    ) -> None:
        cache.set("k", "v")
        clock.advance(10)
        cache.get("k")
        entry = cache.get_stats().entries[0]
        assert entry.access_count == 2
        assert entry.last_accessed_at == clock.now

    def test_invalid_constructor_args(self) -> None:
        with pytest.raises(ValueError):
            PermissionCache(max_size=0)
        with pytest.raises(ValueError):
            PermissionCache(eviction_fraction=0)


# ---------------------------------------------------------------------------
# TTL
# ---------------------------------------------------------------------------


class TestExpiry:
    def test_live_at_exact_ttl(self, cache: PermissionCache[str], clock: FakeClock) -> None:
        cache.set("k", "v")
        clock.advance(300)
        assert cache.get("k") == "v"

    def test_expired_after_ttl(self, cache: PermissionCache[str], clock: FakeClock) -> None:
        cache.set("k", "v")
        clock.advance(301)
        assert cache.get("k") is None

    def test_expired_entry_is_removed_lazily(
        self, cache: PermissionCache[str], clock: FakeClock
    ) -> None:
        cache.set("k", "v")
        clock.advance(301)
        assert cache.size == 1
        cache.get("k")
        assert cache.size == 0

    def test_reads_do_not_extend_ttl(self, cache: PermissionCache[str], clock: FakeClock) -> None:
        cache.set("k", "v")
        clock.advance(200)
        assert cache.get("k") == "v"
        clock.advance(200)
        assert cache.get("k") is None

    def test_custom_ttl(self, clock: FakeClock) -> None:
        short: PermissionCache[str] = PermissionCache(ttl=timedelta(seconds=1), clock=clock)
        short.set("k", "v")
        clock.advance(2)
        assert short.get("k") is None


# ---------------------------------------------------------------------------
# Invalidation
# ---------------------------------------------------------------------------


class TestInvalidation:
    def test_invalidate_one(self, cache: PermissionCache[str]) -> None:
        cache.set("u1:p1", "a")
        cache.set("u1:p2", "b")
        cache.invalidate("u1:p1")
        assert cache.get("u1:p1") is None
        assert cache.get("u1:p2") == "b"

    def test_invalidate_absent_is_noop(self, cache: PermissionCache[str]) -> None:
        cache.invalidate("ghost")
        assert cache.size == 0

    def test_invalidate_pattern_by_user(self, cache: PermissionCache[str]) -> None:
        cache.set("u1:p1", "a")
        cache.set("u1:p2", "b")
        cache.set("u2:p1", "c")
        assert cache.invalidate_pattern("u1:") == 2
        assert "u2:p1" in cache
        assert len(cache) == 1

    def test_invalidate_pattern_by_resource(self, cache: PermissionCache[str]) -> None:
        cache.set("u1:p1", "a")
        cache.set("u2:p1", "b")
        cache.set("u2:p2", "c")
        assert cache.invalidate_pattern(":p1") == 2
        assert cache.get("u2:p2") == "c"

    def test_clear(self, cache: PermissionCache[str]) -> None:
        cache.set("a", "1")
        cache.set("b", "2")
        cache.clear()
        assert cache.size == 0


# ---------------------------------------------------------------------------
# Eviction
# ---------------------------------------------------------------------------


class TestEviction:
    def test_never_exceeds_max_size(self) -> None:
        cache: PermissionCache[int] = PermissionCache()
        for i in range(MAX_CACHE_SIZE + 1):
            cache.set(f"user-{i}:project", i)
            assert cache.size <= MAX_CACHE_SIZE

    def test_evicts_quarter_when_full(self) -> None:
        cache: PermissionCache[int] = PermissionCache(max_size=8)
        for i in range(8):
            cache.set(f"k{i}", i)
        cache.set("k8", 8)
        # 8 - floor(8 * 0.25) + 1
        assert cache.size == 7

    def test_evicts_at_least_one(self) -> None:
        cache: PermissionCache[int] = PermissionCache(max_size=2)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("c", 3)
        assert cache.size == 2
        assert "a" not in cache

    def test_least_recently_accessed_removed(self, clock: FakeClock) -> None:
        cache: PermissionCache[int] = PermissionCache(max_size=4, clock=clock)
        for i in range(4):
            cache.set(f"k{i}", i)
            clock.advance(1)
        # Touch k0 so k1 becomes the least recently used.
        cache.get("k0")
        clock.advance(1)
        cache.set("k4", 4)
        assert "k1" not in cache
        assert "k0" in cache
        assert "k4" in cache


# ---------------------------------------------------------------------------
# Stats and concurrency
# ---------------------------------------------------------------------------


class TestStats:
    def test_stats_snapshot(self, cache: PermissionCache[str], clock: FakeClock) -> None:
        cache.set("u1:p1", "a")
        clock.advance(30)
        stats = cache.get_stats()
        assert isinstance(stats, CacheStats)
        assert stats.size == 1
        assert stats.entries[0].key == "u1:p1"
        assert stats.entries[0].age_seconds == pytest.approx(30.0)

    def test_to_dict(self, cache: PermissionCache[str]) -> None:
        cache.set("k", "v")
        data = cache.get_stats().to_dict()
        assert data["size"] == 1
        assert data["ttl_seconds"] == 300.0
        assert data["entries"][0]["key"] == "k"  # type: ignore[index]


class TestConcurrency:
    def test_parallel_writers_and_invalidators(self) -> None:
        cache: PermissionCache[int] = PermissionCache(max_size=50)
        errors: list[BaseException] = []

        def writer(offset: int) -> None:
            try:
                for i in range(500):
                    cache.set(f"u{offset}:p{i}", i)
                    cache.get(f"u{offset}:p{i - 1}")
            except BaseException as exc:  # pragma: no cover - surfaced below
                errors.append(exc)

        def invalidator() -> None:
            try:
                for i in range(200):
                    cache.invalidate_pattern(f":p{i}")
            except BaseException as exc:  # pragma: no cover
                errors.append(exc)

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
        threads.append(threading.Thread(target=invalidator))
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert cache.size <= 50
