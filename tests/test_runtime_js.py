"""Drives the shipped runtime script under Node with a minimal stub DOM."""

from __future__ import annotations

import asyncio
import json
import shutil
import subprocess

import pytest

from conftest import make_project
from engine.media_resolver import MediaResolver
from engine.screen_resolver import resolve_screens
from generators.markup import render_raw
from generators.runtime_emitter import RuntimeEmitter
from generators.template_compiler import TemplateCompiler
from snippets.runtime_js import RUNTIME_JS

NODE = shutil.which("node")

pytestmark = pytest.mark.skipif(NODE is None, reason="node is not installed")

STUB_DOM = """
var events = [];
globalThis.window = globalThis;
globalThis.document = {
  readyState: 'complete',
  querySelector: function () { return null; },
  querySelectorAll: function () { return []; },
  getElementById: function () { return null; },
  addEventListener: function () {},
  createElement: function () { return { style: {}, appendChild: function () {}, getContext: function () { return null; } }; }
};
globalThis.setInterval = function () { return 1; };
globalThis.clearInterval = function () {};
window.requestAnimationFrame = function () { return 1; };
window.cancelAnimationFrame = function () {};
globalThis.Audio = function (url) {
  this.url = url;
  this.play = function () { events.push('play ' + url); };
  this.pause = function () { events.push('pause ' + url); };
};
"""


def _run(project, template, settings, store, driver: str) -> dict:
    """Run `driver` after the runtime has initialised; returns its JSON output.

    Audio URLs in an `events` list are replaced by their track id.
    """
    screens = resolve_screens(project, template)
    media = asyncio.run(MediaResolver(store, settings).resolve(project, screens, "export"))
    compiled = TemplateCompiler(settings).compile(project, template, screens, media)
    config = RuntimeEmitter(settings).build_config(compiled, project, screens, media)
    script = STUB_DOM + render_raw(RUNTIME_JS, config_json=config.to_json()) + driver
    result = subprocess.run(
        [NODE, "-e", script], capture_output=True, text=True, timeout=30, check=True,
    )
    out = json.loads(result.stdout)
    if isinstance(out, dict) and "events" in out:
        tracks = {url: track_id for track_id, url in media.audio.items()}
        out["events"] = [f"{action} {tracks[url]}" for action, url in (e.split(" ", 1) for e in out["events"])]
    return out


def _audio_project(store, **screens):
    store.put("p1", "intro-song", b"ID3intro", "audio/mpeg")
    store.put("p1", "clip-song", b"ID3clip", "audio/mpeg")
    audio = {"screens": {
        "intro": {"id": "intro-song", "filename": "intro.mp3"},
        "clip": {"id": "clip-song", "filename": "clip.mp3"},
    }}
    return make_project(audio=audio, screens={
        "intro": {"title": "Hi", **screens.get("intro", {})},
        "memories": {"images": ["img-1", "img-2"]},
    })


def test_single_voice_and_extend_to_next(template, settings, store) -> None:
    project = _audio_project(store, intro={"extendMusicToNext": True})
    out = _run(project, template, settings, store, """
var R = window.GiftRuntime, seen = [];
R.start(); seen.push(events.length);
R.next(); seen.push(events.length);
R.next(); seen.push(events.length);
R.next();
console.log(JSON.stringify({events: events, seen: seen, current: R.current()}));
""")

    assert out["current"] == 3
    # extended track keeps playing into memories; one voice at a time after that
    assert out["seen"] == [1, 1, 3]
    assert out["events"] == [
        "play intro-song", "pause intro-song", "play clip-song", "pause clip-song",
    ]


def test_navigation_stops_at_both_ends(template, settings, store) -> None:
    out = _run(make_project(), template, settings, store, """
var R = window.GiftRuntime, trail = [];
R.next(); trail.push(R.current());
R.start(); R.previous(); trail.push(R.current());
for (var i = 0; i < 10; i++) R.next();
trail.push(R.current());
console.log(JSON.stringify(trail));
""")
    assert out == [-1, 0, 3]


def test_mute_suppresses_autoplay_until_unmuted(template, settings, store) -> None:
    project = _audio_project(store)
    out = _run(project, template, settings, store, """
var R = window.GiftRuntime;
R.start();
R.audio.toggleMute();
R.next(); R.next();
var whileMuted = events.length;
R.audio.toggleMute();
console.log(JSON.stringify({events: events, whileMuted: whileMuted, muted: R.audio.isMuted()}))
""")

    assert out["whileMuted"] == 2
    assert out["muted"] is False
    assert out["events"] == ["play intro-song", "pause intro-song", "play clip-song"]


def test_gallery_moves_wrap_around(template, settings, store) -> None:
    out = _run(make_project(), template, settings, store, """
var G = window.GiftRuntime.gallery, id = 'gallery-memories';
console.log(JSON.stringify([G.prev(id), G.next(id), G.next(id), G.next(id), G.goTo(id, 1), G.goTo(id, 9)]));
""")
    assert out == [1, 0, 1, 0, 1, 1]
