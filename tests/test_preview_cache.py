from __future__ import annotations

import asyncio

import pytest

from engine.media_store import MediaBlob
from engine.preview_cache import HANDLE_PREFIX, HtmlCache, PreviewHandleRegistry, PreviewUrlCache

BLOB = MediaBlob(data=b"abc", mime="image/png")


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


# ── PreviewUrlCache ─────────────────────────────────────────


def test_lru_eviction_revokes_handles() -> None:
    registry = PreviewHandleRegistry()
    cache = PreviewUrlCache(registry, max_size=2)

    first = cache.set("p1", "a", BLOB)
    cache.set("p1", "b", BLOB)
    cache.get_cached("p1", "a")  # a is now most recent
    cache.set("p1", "c", BLOB)

    assert len(cache) == 2
    assert len(registry) == 2
    assert cache.get_cached("p1", "b") is None
    assert cache.get_cached("p1", "a") == first
    assert first.startswith(HANDLE_PREFIX)
    assert registry.open(first) == BLOB


def test_replacing_media_revokes_previous_handle() -> None:
    registry = PreviewHandleRegistry()
    cache = PreviewUrlCache(registry)
    old = cache.set("p1", "a", BLOB)
    new = cache.set("p1", "a", MediaBlob(data=b"xyz", mime="image/png"))

    assert old != new
    assert registry.open(old) is None
    assert registry.open(new).data == b"xyz"


def test_revoke_project_only_touches_that_project() -> None:
    registry = PreviewHandleRegistry()
    cache = PreviewUrlCache(registry)
    cache.set("p1", "a", BLOB)
    cache.set("p1", "b", BLOB)
    kept = cache.set("p2", "a", BLOB)

    cache.revoke_project("p1")
    assert len(cache) == 1
    assert cache.get_cached("p2", "a") == kept
    assert len(registry) == 1


def test_concurrent_loads_share_one_read() -> None:
    cache = PreviewUrlCache(PreviewHandleRegistry())
    calls = []

    async def loader():
        calls.append(1)
        await asyncio.sleep(0.01)
        return BLOB

    async def scenario():
        return await asyncio.gather(*(cache.get_or_create("p1", "a", loader) for _ in range(5)))

    urls = asyncio.run(scenario())
    assert len(calls) == 1
    assert len(set(urls)) == 1


def test_missing_blob_is_not_cached() -> None:
    cache = PreviewUrlCache(PreviewHandleRegistry())

    async def loader():
        return None

    assert asyncio.run(cache.get_or_create("p1", "a", loader)) is None
    assert len(cache) == 0


def test_loader_error_propagates_and_clears_pending() -> None:
    cache = PreviewUrlCache(PreviewHandleRegistry())

    async def broken():
        raise OSError("disk gone")

    async def fine():
        return BLOB

    with pytest.raises(OSError):
        asyncio.run(cache.get_or_create("p1", "a", broken))
    assert asyncio.run(cache.get_or_create("p1", "a", fine)) is not None


def test_cancelled_caller_does_not_strand_the_shared_load() -> None:
    cache = PreviewUrlCache(PreviewHandleRegistry())

    async def slow():
        await asyncio.sleep(0.1)
        return BLOB

    async def fast():
        return MediaBlob(data=b"new", mime="image/png")

    async def scenario():
        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(cache.get_or_create("p1", "a", slow), 0.01)
        # the abandoned load keeps running and the next caller joins it
        return await asyncio.wait_for(cache.get_or_create("p1", "a", fast), 1.0)

    url = asyncio.run(scenario())
    assert url is not None
    assert cache.get_cached("p1", "a") == url
    assert cache.registry.open(url) == BLOB


def test_revoke_during_load_drops_the_stale_result() -> None:
    cache = PreviewUrlCache(PreviewHandleRegistry())

    async def slow():
        await asyncio.sleep(0.02)
        return BLOB

    async def scenario():
        task = asyncio.ensure_future(cache.get_or_create("p1", "a", slow))
        await asyncio.sleep(0)
        cache.revoke("p1", "a")
        return await task

    assert asyncio.run(scenario()) is None
    assert len(cache) == 0
    assert len(cache.registry) == 0

# ── HtmlCache ───────────────────────────────────────────────


def test_html_cache_expires_after_ttl() -> None:
    clock = FakeClock()
    cache = HtmlCache(ttl_seconds=300, clock=clock)
    cache.put("k", "<html></html>")

    clock.now += 299
    assert cache.get("k") == "<html></html>"
    clock.now += 1
    assert cache.get("k") is None
    assert len(cache) == 0


def test_html_cache_evicts_oldest_when_full() -> None:
    cache = HtmlCache(max_entries=2, clock=FakeClock())
    cache.put("a", "1")
    cache.put("b", "2")
    cache.put("c", "3")

    assert "a" not in cache
    assert cache.get("b") == "2"
    assert cache.get("c") == "3"


def test_html_cache_misses_once_a_referenced_handle_is_revoked() -> None:
    registry = PreviewHandleRegistry()
    live = registry.create(BLOB)
    gone = registry.create(BLOB)
    cache = HtmlCache(clock=FakeClock(), registry=registry)
    cache.put("a", f'<img src="{live}">')
    cache.put("b", f'<img src="{live}"><img src="{gone}">')

    registry.revoke(gone)
    assert cache.get("a") == f'<img src="{live}">'
    assert cache.get("b") is None
    assert len(cache) == 1
