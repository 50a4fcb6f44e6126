from __future__ import annotations

import asyncio
import json

from conftest import make_project
from engine.media_resolver import MediaResolver
from engine.screen_resolver import resolve_screens
from generators.runtime_emitter import RuntimeConfig, RuntimeEmitter
from generators.template_compiler import TemplateCompiler
from models import BuildOptions


def _compile(project, template, settings, store, mode="preview"):
    screens = resolve_screens(project, template)
    media = asyncio.run(MediaResolver(store, settings).resolve(project, screens, mode))
    compiled = TemplateCompiler(settings).compile(project, template, screens, media)
    return compiled, screens, media


def test_config_carries_navigation_galleries_and_audio(template, settings, store) -> None:
    audio = {"screens": {"intro": {"id": "intro-song", "filename": "song.mp3"}}}
    screens = {
        "intro": {"title": "Hi", "extendMusicToNext": True},
        "memories": {"images": ["img-1", "img-2"], "galleryLayout": "fullscreenSlideshow"},
    }
    project = make_project(audio=audio, screens=screens)
    store.put("p1", "intro-song", b"ID3", "audio/mpeg")
    compiled, resolved, media = _compile(project, template, settings, store)

    config = RuntimeEmitter(settings).build_config(
        compiled, project, resolved, media, BuildOptions(start_screen_id="memories"),
    )

    assert config.screens == ["intro", "memories", "clip", "wishes"]
    assert config.nav[0] == {"id": "intro", "prev": None, "next": 1}
    assert config.startIndex == 1
    assert "extend" not in json.loads(config.to_json())
    assert config.audio["globalTrack"] is None
    assert list(config.audio["tracks"]) == ["intro-song"]
    assert config.audio["plan"][1] == {"screen": "memories", "track": "intro-song", "source": "extended"}
    assert config.audio["enter"][1]["fromPrev"] == "continue"
    assert config.galleries == [{
        "id": "gallery-memories",
        "screen": "memories",
        "layout": "fullscreenSlideshow",
        "images": ["img-1", "img-2"],
        "index": 0,
        "next": [1, 0],
        "prev": [1, 0],
        "labels": ["1 / 2", "2 / 2"],
    }]
    assert config.slideshowInterval == settings.slideshow_interval_ms


def test_animations_reach_the_config(template, settings, store) -> None:
    global_style = {"backgroundAnimation": {"type": "confetti"}}
    project = make_project(globalStyle=global_style)
    compiled, resolved, media = _compile(project, template, settings, store)

    config = RuntimeEmitter(settings).build_config(compiled, project, resolved, media)
    assert set(config.animations) == {"intro", "memories", "clip", "wishes"}
    assert config.animations["intro"]["kind"] == "canvas"


def test_config_json_is_safe_inside_a_script_element() -> None:
    config = RuntimeConfig(screens=["</script><script>alert(1)</script>"], nav=[], audio={})
    raw = config.to_json()

    assert "</script>" not in raw
    assert json.loads(raw)["screens"] == ["</script><script>alert(1)</script>"]


def test_document_title_and_language(template, settings, store) -> None:
    project = make_project()
    compiled, resolved, media = _compile(project, template, settings, store)
    html = RuntimeEmitter(settings).emit(compiled, project, template, resolved, media)

    assert "<title>Our Anniversary</title>" in html
    assert '<html lang="en">' in html
    assert "gift:runtime:start" in html
