"""
engine/preview_cache.py — Caches for the live-editing path.

PreviewHandleRegistry  short-lived, revocable media handles (blob: URLs)
PreviewUrlCache        LRU of live handles with single-flight loading
HtmlCache              TTL + size-bounded cache of built preview documents
"""

from __future__ import annotations

import asyncio
import re
import time
import uuid
from collections import OrderedDict
from typing import Awaitable, Callable, Dict, FrozenSet, Optional, Tuple

from engine.media_store import MediaBlob
from engine.pipeline_logger import PipelineLogger

HANDLE_PREFIX = "blob:gift-preview/"
HANDLE_RE = re.compile(re.escape(HANDLE_PREFIX) + r"[0-9a-f]{32}")


class PreviewHandleRegistry:
    """Holds the bytes behind each live preview handle until it is revoked.

    A preview host serves handle URLs by calling open(); revoking a handle
    drops the bytes so long editing sessions don't accumulate memory.
    """

    def __init__(self) -> None:
        self._blobs: Dict[str, MediaBlob] = {}

    def create(self, blob: MediaBlob) -> str:
        handle = f"{HANDLE_PREFIX}{uuid.uuid4().hex}"
        self._blobs[handle] = blob
        return handle

    def open(self, handle: str) -> Optional[MediaBlob]:
        return self._blobs.get(handle)

    def revoke(self, handle: str) -> None:
        self._blobs.pop(handle, None)

    def __len__(self) -> int:
        return len(self._blobs)


class PreviewUrlCache:
    """LRU cache of preview handles keyed by (project_id, media_id)."""

    def __init__(self, registry: PreviewHandleRegistry, max_size: int = 100) -> None:
        self._registry = registry
        self._max_size = max_size
        self._urls: "OrderedDict[str, str]" = OrderedDict()
        self._pending: Dict[str, asyncio.Future] = {}
        self._log = PipelineLogger("PreviewUrlCache")

    @staticmethod
    def _key(project_id: str, media_id: str) -> str:
        return f"{project_id}:{media_id}"

    @property
    def registry(self) -> PreviewHandleRegistry:
        return self._registry

    def __len__(self) -> int:
        return len(self._urls)

    def get_cached(self, project_id: str, media_id: str) -> Optional[str]:
        key = self._key(project_id, media_id)
        url = self._urls.get(key)
        if url is not None:
            self._urls.move_to_end(key)
        return url

    def set(self, project_id: str, media_id: str, blob: MediaBlob) -> str:
        """Register a fresh handle, revoking any previous one for the same media."""
        self.revoke(project_id, media_id)
        key = self._key(project_id, media_id)
        url = self._registry.create(blob)
        self._urls[key] = url

        while len(self._urls) > self._max_size:
            oldest_key, oldest_url = self._urls.popitem(last=False)
            self._registry.revoke(oldest_url)
            self._log.debug(f"Evicted preview handle {oldest_key}")
        return url

    async def get_or_create(
        self,
        project_id: str,
        media_id: str,
        loader: Callable[[], Awaitable[Optional[MediaBlob]]],
    ) -> Optional[str]:
        """Return a live handle, loading the blob at most once per key.

        The load runs as its own task shared by every caller for the key, so
        a caller that is cancelled or times out never strands the others.
        """
        cached = self.get_cached(project_id, media_id)
        if cached is not None:
            return cached

        key = self._key(project_id, media_id)
        pending = self._pending.get(key)
        if pending is None:
            pending = asyncio.ensure_future(self._load(key, project_id, media_id, loader))
            self._pending[key] = pending
            pending.add_done_callback(self._finish_load)
        return await asyncio.shield(pending)

    async def _load(
        self,
        key: str,
        project_id: str,
        media_id: str,
        loader: Callable[[], Awaitable[Optional[MediaBlob]]],
    ) -> Optional[str]:
        blob = await loader()
        if self._pending.get(key) is not asyncio.current_task():
            self._log.debug(f"Load of {key} superseded by a revoke; result dropped")
            return None
        return self.set(project_id, media_id, blob) if blob is not None else None

    def _finish_load(self, task: asyncio.Future) -> None:
        for key, pending in list(self._pending.items()):
            if pending is task:
                del self._pending[key]
        if not task.cancelled():
            task.exception()  # retrieved here when every caller has gone away

    def revoke(self, project_id: str, media_id: str) -> None:
        key = self._key(project_id, media_id)
        url = self._urls.pop(key, None)
        if url is not None:
            self._registry.revoke(url)
        self._pending.pop(key, None)

    def revoke_project(self, project_id: str) -> None:
        prefix = f"{project_id}:"
        for key in [k for k in self._urls if k.startswith(prefix)]:
            self._registry.revoke(self._urls.pop(key))
        for key in [k for k in self._pending if k.startswith(prefix)]:
            del self._pending[key]

    def clear(self) -> None:
        for url in self._urls.values():
            self._registry.revoke(url)
        self._urls.clear()
        self._pending.clear()


class HtmlCache:
    """Preview document cache: entries expire after `ttl_seconds`; when full,
    the oldest entries are evicted first.

    With a registry attached, an entry is only served while every preview
    handle it references is still open; one revoked handle makes it a miss.
    """

    def __init__(
        self,
        ttl_seconds: float = 300.0,
        max_entries: int = 50,
        clock: Callable[[], float] = time.monotonic,
        registry: Optional[PreviewHandleRegistry] = None,
    ) -> None:
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._clock = clock
        self._registry = registry
        self._entries: "OrderedDict[str, Tuple[str, float, FrozenSet[str]]]" = OrderedDict()
        self._log = PipelineLogger("HtmlCache")

    def get(self, key: str) -> Optional[str]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        html, stored_at, handles = entry
        if self._clock() - stored_at >= self._ttl:
            del self._entries[key]
            return None
        if self._registry is not None and any(self._registry.open(h) is None for h in handles):
            del self._entries[key]
            self._log.decision("Cached preview dropped", "a media handle it uses was revoked")
            return None
        return html

    def put(self, key: str, html: str) -> None:
        self._entries.pop(key, None)
        self._entries[key] = (html, self._clock(), frozenset(HANDLE_RE.findall(html)))
        while len(self._entries) > self._max_entries:
            self._entries.popitem(last=False)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()
