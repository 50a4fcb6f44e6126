from __future__ import annotations

import asyncio
from typing import Optional

from conftest import PNG_BYTES, make_project
from engine.errors import GiftBuildError
from engine.media_store import MediaBlob
from models import update_screen
from orchestrator import GiftPipeline, PreviewOrchestrator


class SlowStore:
    def __init__(self, delay: float) -> None:
        self.delay = delay

    async def get_blob(self, project_id: str, media_id: str) -> Optional[MediaBlob]:
        await asyncio.sleep(self.delay)
        return MediaBlob(data=PNG_BYTES, mime="image/png")


def test_rapid_requests_are_debounced_into_one_build(template, settings, store) -> None:
    pipeline = GiftPipeline(store, settings)
    published = []
    previews = PreviewOrchestrator(pipeline, settings, on_preview=lambda html, gen: published.append(gen))

    async def scenario():
        for n in range(3):
            previews.request_preview(update_screen(make_project(), "intro", text=f"draft {n}"), template)
        await previews.flush()

    asyncio.run(scenario())
    assert pipeline.compile_count == 1
    assert published == [3]
    assert "draft 2" in previews.latest_html
    assert previews.latest_generation == 3


def test_stale_build_result_is_discarded(template, settings) -> None:
    pipeline = GiftPipeline(SlowStore(0.05), settings)
    published = []
    previews = PreviewOrchestrator(pipeline, settings, on_preview=lambda html, gen: published.append((gen, html)))

    async def scenario():
        previews.request_preview(update_screen(make_project(), "intro", text="first edit"), template)
        # let the first build start fetching media
        await asyncio.sleep(0.03)
        previews.request_preview(update_screen(make_project(), "intro", text="second edit"), template)
        await previews.flush()

    asyncio.run(scenario())
    assert pipeline.compile_count == 2
    assert [gen for gen, _ in published] == [2]
    assert "second edit" in published[0][1]
    assert "first edit" not in previews.latest_html


def test_failures_are_reported_for_latest_request_only(template, settings) -> None:
    class FailingPipeline:
        async def build_gift_html(self, project, template, markup=None, options=None):
            raise GiftBuildError(f"cannot render {project.data.screen('intro').text}")

    errors = []
    previews = PreviewOrchestrator(
        FailingPipeline(), settings, on_error=lambda exc, gen: errors.append((gen, str(exc))),
    )

    async def scenario():
        previews.request_preview(update_screen(make_project(), "intro", text="a"), template)
        await previews.flush()

    asyncio.run(scenario())
    assert errors == [(1, "cannot render a")]
    assert isinstance(previews.last_error, GiftBuildError)
    assert previews.latest_html is None


def test_requests_always_render_in_preview_mode(template, settings, store) -> None:
    from models import BuildOptions

    pipeline = GiftPipeline(store, settings)
    previews = PreviewOrchestrator(pipeline, settings)

    async def scenario():
        previews.request_preview(make_project(), template, options=BuildOptions(mode="export"))
        await previews.flush()

    asyncio.run(scenario())
    assert "blob:gift-preview/" in previews.latest_html
