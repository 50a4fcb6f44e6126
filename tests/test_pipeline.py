from __future__ import annotations

import asyncio
import re
from datetime import date

import pytest

from conftest import PNG_BYTES, make_project
from engine.errors import ExportValidationError
from engine.media_store import InMemoryMediaStore
from engine.preview_cache import HANDLE_RE
from generators.markup import TOKEN_RE
from models import BuildOptions, update_project, update_screen
from orchestrator import GiftPipeline, export_filename


def _build(pipeline, project, template, markup=None, **options):
    return asyncio.run(pipeline.build_gift_html(project, template, markup, BuildOptions(**options)))


def test_export_is_a_complete_standalone_document(template, settings, store) -> None:
    html = _build(GiftPipeline(store, settings), make_project(), template, mode="export")

    assert html.startswith("<!DOCTYPE html>")
    assert html.count("<script") == 1
    assert html.count("<style") == 1
    assert "window.GiftRuntime" in html
    assert "data:image/png;base64," in html
    assert "blob:" not in html
    assert TOKEN_RE.search(html) is None
    for screen_id in ("intro", "memories", "clip", "wishes"):
        assert f'data-screen-id="{screen_id}"' in html


def test_global_text_and_defaults_are_substituted(template, settings, store) -> None:
    html = _build(GiftPipeline(store, settings), make_project(), template)

    assert "Dana" in html
    assert "Ten years together" in html
    # overlay main text falls back to the template's default placeholder
    assert "For you" in html
    assert "Tap to Begin" in html


def test_user_text_is_escaped_and_never_forms_a_token(template, settings, store) -> None:
    project = update_screen(
        make_project(), "intro",
        title="<script>alert(1)</script>",
        text="Love, {{senderName}} & 'friends'",
    )
    html = _build(GiftPipeline(store, settings), project, template)

    assert "<script>alert(1)</script>" not in html
    assert "&lt;script&gt;alert(1)&lt;/script&gt;" in html
    assert "Love, &#123;&#123;senderName&#125;&#125; &amp; &#039;friends&#039;" in html
    assert TOKEN_RE.search(html) is None


def test_export_blocked_before_any_media_is_read(template, settings, store) -> None:
    project = make_project(screens={"intro": {"title": "Hi"}})
    pipeline = GiftPipeline(store, settings)

    with pytest.raises(ExportValidationError) as excinfo:
        _build(pipeline, project, template, mode="export")
    assert store.reads == 0
    assert excinfo.value.result.errors[0].field == "memories.images"


def test_preview_renders_placeholder_for_missing_media(template, settings) -> None:
    store = InMemoryMediaStore()
    store.put("p1", "img-2", PNG_BYTES, "image/png")
    html = _build(GiftPipeline(store, settings), make_project(), template)

    assert "Image unavailable" in html
    assert "blob:gift-preview/" in html


def test_preview_cache_hit_skips_compilation(template, settings, store) -> None:
    pipeline = GiftPipeline(store, settings)
    project = make_project()

    first = _build(pipeline, project, template)
    second = _build(pipeline, update_project(project, updated_at="2031-01-01T00:00:00Z"), template)
    assert first == second
    assert pipeline.compile_count == 1

    _build(pipeline, update_screen(project, "intro", text="Eleven years"), template)
    assert pipeline.compile_count == 2


def test_cached_preview_is_rebuilt_after_its_media_handles_are_evicted(template, settings, store) -> None:
    pipeline = GiftPipeline(store, settings.model_copy(update={"preview_url_cache_size": 2}))
    store.put("p2", "img-1", PNG_BYTES, "image/png")
    store.put("p2", "img-2", PNG_BYTES, "image/png")
    first_project = make_project()
    other_project = update_project(first_project, id="p2")

    first = _build(pipeline, first_project, template)
    _build(pipeline, other_project, template)
    again = _build(pipeline, first_project, template)

    assert pipeline.compile_count == 3
    assert again != first
    handles = HANDLE_RE.findall(again)
    assert handles
    assert all(pipeline.url_cache.registry.open(h) is not None for h in handles)


def test_export_is_never_cached(template, settings, store) -> None:
    pipeline = GiftPipeline(store, settings)
    _build(pipeline, make_project(), template, mode="export")
    _build(pipeline, make_project(), template, mode="export")
    assert pipeline.compile_count == 2


def test_cache_key_ignores_timestamps_only(template) -> None:
    project = make_project()
    options = BuildOptions()
    key = GiftPipeline.cache_key(project, template, options)

    assert key == GiftPipeline.cache_key(update_project(project, created_at=None), template, options)
    assert key != GiftPipeline.cache_key(project, template, BuildOptions(hide_empty_screens=True))
    assert key != GiftPipeline.cache_key(project, template, options, markup="<main></main>")


def test_single_unknown_screen_renders_not_found(template, settings, store) -> None:
    html = _build(
        GiftPipeline(store, settings), make_project(), template,
        single_screen_only=True, start_screen_id="nope",
    )
    assert "Screen not found" in html
    assert "<script" not in html
    assert store.reads == 0


def test_single_screen_renders_only_that_screen(template, settings, store) -> None:
    html = _build(
        GiftPipeline(store, settings), make_project(), template,
        single_screen_only=True, start_screen_id="memories",
    )
    assert 'data-screen-id="memories"' in html
    assert 'data-screen-id="intro"' not in html


def test_hide_empty_screens(template, settings, store) -> None:
    html = _build(GiftPipeline(store, settings), make_project(), template, hide_empty_screens=True)
    assert 'data-screen-id="intro"' in html
    assert 'data-screen-id="clip"' not in html
    assert 'data-screen-id="wishes"' not in html


def test_gallery_layouts(template, settings, store) -> None:
    pipeline = GiftPipeline(store, settings)
    for layout in ("carousel", "gridWithZoom", "fullscreenSlideshow", "heroWithThumbnails", "timeline"):
        project = update_screen(make_project(), "memories", gallery_layout=layout)
        html = _build(pipeline, project, template)
        assert f'data-layout="{layout}"' in html
        assert 'id="gallery-memories"' in html


def test_rtl_language(template, settings, store) -> None:
    project = update_project(make_project(), language="he")
    html = _build(GiftPipeline(store, settings), project, template)
    assert '<html lang="he" dir="rtl">' in html


def test_blessings_render_as_cards(template, settings, store) -> None:
    html = _build(GiftPipeline(store, settings), make_project(), template)
    assert 'class="blessing-sender">Mom<' in html
    assert 'class="blessing-text">Congratulations<' in html


def test_export_gift_writes_dated_file(template, settings, store, tmp_path) -> None:
    pipeline = GiftPipeline(store, settings)
    path = asyncio.run(pipeline.export_gift(
        make_project(), template, output_dir=tmp_path, on=date(2026, 2, 14),
    ))
    assert path.name == "gift_20260214.html"
    assert path.read_text(encoding="utf-8").startswith("<!DOCTYPE html>")
    assert export_filename(date(2025, 12, 1)) == "gift_20251201.html"


def test_status_callback(template, settings, store) -> None:
    statuses = []
    pipeline = GiftPipeline(store, settings, on_status_change=lambda s, d: statuses.append(s))
    _build(pipeline, make_project(), template)
    assert statuses == ["rendering", "done"]


# ── Static template markup ──────────────────────────────────

STATIC_MARKUP = """<!DOCTYPE html>
<html>
<head>
  <title>Authoring copy</title>
  <style>.frame { border-color: {{theme_accent}}; }</style>
</head>
<body>
  <main class="gift-screens frame" data-gift-screens>
    <section class="hero" data-screen-id="intro"><p>design-time filler</p></section>
    <section data-screen-id="memories"></section>
    <section data-screen-id="retired"></section>
  </main>
  <footer class="signature">With love, {{senderName}} {{unknownToken}}</footer>
  <script>console.log("authoring only")</script>
</body>
</html>"""


def test_static_markup_is_restructured(template, settings, store) -> None:
    html = _build(GiftPipeline(store, settings), make_project(), template, STATIC_MARKUP)

    assert "authoring only" not in html
    assert "design-time filler" not in html
    assert "Authoring copy" not in html
    assert 'data-screen-id="retired"' not in html
    assert html.count("<script") == 1
    assert html.count("<!DOCTYPE") == 1
    # template class kept and canonical classes merged
    assert re.search(r'class="hero gift-screen gift-screen-intro"', html)
    # screens absent from the markup are appended
    assert 'data-screen-id="clip"' in html
    assert 'data-screen-id="wishes"' in html
    # overlay and navigation are supplied when the markup lacks them
    assert "data-gift-overlay" in html
    assert "data-gift-nav" in html
    assert "With love, Sam" in html
    assert ".frame { border-color: #ec4899; }" in html
    assert TOKEN_RE.search(html) is None
