"""
generators/runtime_emitter.py — Wraps a compiled body into the final document:
one style block, the content, and the runtime script with its config.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from typing import Dict, List, Optional

from config import Settings, get_settings
from engine.pipeline_logger import PipelineLogger
from engine.playback import AudioPlan, NavigationModel
from generators.markup import escape_user_text, render_raw
from generators.template_compiler import CompiledBody
from models import BuildOptions, MediaUrls, Project, ScreenConfig, TemplateMeta
from snippets.layout_css import BASE_CSS
from snippets.runtime_js import RUNTIME_JS
from snippets.screen_snippets import DOCUMENT_SHELL

RTL_LANGUAGES = {"he", "ar"}


@dataclass
class RuntimeConfig:
    """The narrow data contract between the pipeline and the runtime engine."""

    screens: List[str]
    nav: List[Dict[str, object]]
    audio: Dict[str, object]
    galleries: List[Dict[str, object]] = field(default_factory=list)
    animations: Dict[str, Dict[str, object]] = field(default_factory=dict)
    slideshowInterval: int = 4000
    startIndex: Optional[int] = None

    def to_json(self) -> str:
        """Serialize for embedding inside a <script> element."""
        raw = json.dumps(asdict(self), ensure_ascii=False, separators=(",", ":"))
        return raw.replace("</", "<\\/").replace("<!--", "\\u003c!--")


class RuntimeEmitter:
    """Produces the final HTML document string."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self._log = PipelineLogger("RuntimeEmitter")

    # ── Public API ──────────────────────────────────────────

    def build_config(
        self,
        compiled: CompiledBody,
        project: Project,
        screens: List[ScreenConfig],
        media: MediaUrls,
        options: Optional[BuildOptions] = None,
    ) -> RuntimeConfig:
        options = options or BuildOptions()
        screen_ids = [s.screen_id for s in screens]
        navigation = NavigationModel(screen_ids)
        plan = AudioPlan.build(project, screens)

        tracks = {tid: media.audio[tid] for tid in plan.track_ids() if media.audio.get(tid)}
        start_index = (
            screen_ids.index(options.start_screen_id)
            if options.start_screen_id in screen_ids
            else None
        )

        return RuntimeConfig(
            screens=screen_ids,
            nav=navigation.table(),
            audio={
                "globalTrack": plan.global_track_id,
                "tracks": tracks,
                "plan": plan.to_config(),
                "enter": plan.enter_table(),
            },
            galleries=[seed.to_config() for seed in compiled.gallery_seeds],
            animations=compiled.animations,
            slideshowInterval=self._settings.slideshow_interval_ms,
            startIndex=start_index,
        )

    def emit(
        self,
        compiled: CompiledBody,
        project: Project,
        template: TemplateMeta,
        screens: List[ScreenConfig],
        media: MediaUrls,
        options: Optional[BuildOptions] = None,
    ) -> str:
        options = options or BuildOptions()
        config = self.build_config(compiled, project, screens, media, options)

        css = "\n".join(part for part in [
            *compiled.template_styles,
            BASE_CSS,
            compiled.root_css,
            compiled.generated_css,
        ] if part and part.strip())

        script = render_raw(RUNTIME_JS, config_json=config.to_json())
        language = (project.language or "en").lower()

        document = render_raw(
            DOCUMENT_SHELL,
            lang=escape_user_text(language),
            rtl=language.split("-")[0] in RTL_LANGUAGES,
            title=escape_user_text(project.data.event_title or project.name or template.template_name),
            css=css,
            body=compiled.html,
            script=script,
            mode=options.mode,
        )
        self._log.action(
            "Emit Document",
            f"mode={options.mode} screens={len(screens)} galleries={len(config.galleries)} "
            f"size={len(document) / 1024:.0f}KB",
        )
        return document

    def emit_stub(self, project: Project, body: str, mode: str = "preview") -> str:
        """A runtime-free document, used when there is nothing to navigate."""
        language = (project.language or "en").lower()
        return render_raw(
            DOCUMENT_SHELL,
            lang=escape_user_text(language),
            rtl=language.split("-")[0] in RTL_LANGUAGES,
            title=escape_user_text(project.name),
            css=BASE_CSS,
            body=body,
            script="",
            mode=mode,
        )
