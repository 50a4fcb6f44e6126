from __future__ import annotations

import asyncio
import base64
from typing import Optional

import pytest

from conftest import MB, MP4_BYTES, PNG_BYTES, make_project
from config import Settings
from engine.errors import MissingMediaError, VideoBudgetError
from engine.media_resolver import MediaResolver, ReferencedMedia
from engine.media_store import InMemoryMediaStore, MediaBlob
from engine.preview_cache import HANDLE_PREFIX
from engine.screen_resolver import resolve_screens


def _resolve(resolver, project, template, mode):
    return asyncio.run(resolver.resolve(project, resolve_screens(project, template), mode))


def test_export_embeds_data_urls(template, settings, store) -> None:
    media = _resolve(MediaResolver(store, settings), make_project(), template, "export")

    url = media.images["img-1"]
    assert url.startswith("data:image/png;base64,")
    assert base64.b64decode(url.split(",", 1)[1]) == PNG_BYTES
    assert set(media.images) == {"img-1", "img-2"}


def test_export_missing_blob_is_fatal(template, settings) -> None:
    store = InMemoryMediaStore()
    store.put("p1", "img-2", PNG_BYTES, "image/png")

    with pytest.raises(MissingMediaError) as excinfo:
        _resolve(MediaResolver(store, settings), make_project(), template, "export")
    assert str(excinfo.value) == "Image blob missing: beach.png (ID: img-1). Please re-upload."
    assert excinfo.value.media_id == "img-1"


def test_preview_missing_blob_degrades_to_empty(template, settings) -> None:
    store = InMemoryMediaStore()
    store.put("p1", "img-2", PNG_BYTES, "image/png")

    media = _resolve(MediaResolver(store, settings), make_project(), template, "preview")
    assert media.images["img-1"] == ""
    assert media.images["img-2"].startswith(HANDLE_PREFIX)


def test_preview_handles_are_reused_across_passes(template, settings, store) -> None:
    resolver = MediaResolver(store, settings)
    project = make_project()

    first = _resolve(resolver, project, template, "preview")
    reads = store.reads
    second = _resolve(resolver, project, template, "preview")

    assert first.images == second.images
    assert store.reads == reads
    assert resolver.url_cache.registry.open(first.images["img-1"]).data == PNG_BYTES


def test_only_referenced_media_is_read(template, settings, store) -> None:
    images = [
        {"id": "img-1", "filename": "beach.png", "mime": "image/png"},
        {"id": "img-2", "filename": "dinner.png", "mime": "image/png"},
        {"id": "img-unused", "filename": "unused.png", "mime": "image/png"},
    ]
    screens = {
        "memories": {"images": ["img-1"]},
        # images on a video-mode screen are not rendered
        "clip": {"mediaMode": "video", "videoId": "vid-1", "images": ["img-2"]},
    }
    videos = [{"id": "vid-1", "filename": "toast.mp4", "size": 100, "duration": 5}]
    project = make_project(images=images, screens=screens, videos=videos)

    refs = ReferencedMedia(project, resolve_screens(project, template))
    assert refs.image_ids == ["img-1"]
    assert refs.video_ids == ["vid-1"]


def test_concurrent_reads_are_bounded(template, tmp_path) -> None:
    class CountingStore:
        def __init__(self) -> None:
            self.active = 0
            self.peak = 0

        async def get_blob(self, project_id: str, media_id: str) -> Optional[MediaBlob]:
            self.active += 1
            self.peak = max(self.peak, self.active)
            await asyncio.sleep(0.01)
            self.active -= 1
            return MediaBlob(data=PNG_BYTES, mime="image/png")

    ids = [f"img-{n}" for n in range(8)]
    images = [{"id": i, "filename": f"{i}.png", "mime": "image/png"} for i in ids]
    project = make_project(images=images, screens={"memories": {"images": ids}})
    store = CountingStore()
    settings = Settings(media_concurrency=2, output_dir=tmp_path)

    media = _resolve(MediaResolver(store, settings), project, template, "export")
    assert len(media.images) == 8
    assert store.peak <= 2


def test_transient_store_errors_are_retried(template, tmp_path) -> None:
    class FlakyStore:
        def __init__(self) -> None:
            self.failures = {"img-1": 1}

        async def get_blob(self, project_id: str, media_id: str) -> Optional[MediaBlob]:
            if self.failures.get(media_id):
                self.failures[media_id] -= 1
                raise OSError("temporarily unavailable")
            return MediaBlob(data=PNG_BYTES, mime="image/png")

    settings = Settings(media_fetch_retries=3, output_dir=tmp_path)
    media = _resolve(MediaResolver(FlakyStore(), settings), make_project(), template, "export")
    assert media.images["img-1"].startswith("data:image/png")


def test_video_budget_fatal_on_export_warning_in_preview(template, tmp_path) -> None:
    settings = Settings(video_max_size_mb=1, output_dir=tmp_path)
    store = InMemoryMediaStore()
    store.put("p1", "img-1", PNG_BYTES, "image/png")
    store.put("p1", "vid-1", MP4_BYTES, "video/mp4")
    screens = {
        "memories": {"images": ["img-1"]},
        "clip": {"mediaMode": "video", "videoId": "vid-1"},
    }
    videos = [{"id": "vid-1", "filename": "toast.mp4", "size": 3 * MB, "duration": 5}]
    project = make_project(screens=screens, videos=videos)

    with pytest.raises(VideoBudgetError):
        _resolve(MediaResolver(store, settings), project, template, "export")

    media = _resolve(MediaResolver(store, settings), project, template, "preview")
    assert media.videos["vid-1"].startswith(HANDLE_PREFIX)
    assert any("too large" in w.message for w in media.warnings)
