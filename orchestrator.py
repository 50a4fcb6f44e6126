"""
orchestrator.py — Pipeline controller for preview and export.

GiftPipeline        one render pass: screens → media → (validate) → compile → emit
PreviewOrchestrator debounced preview scheduling with generation ids
"""

from __future__ import annotations

import asyncio
import hashlib
import json
from datetime import date
from pathlib import Path
from typing import Callable, List, Optional, Set

from config import Settings, get_settings
from engine.errors import ExportValidationError, GiftBuildError
from engine.media_resolver import MediaResolver
from engine.media_store import BlobStore
from engine.pipeline_logger import PipelineLogger
from engine.preview_cache import HtmlCache, PreviewUrlCache
from engine.screen_resolver import (
    filter_screens_with_content,
    resolve_screens,
    select_single_screen,
)
from engine.validator import Validator
from generators.markup import render_snippet
from generators.runtime_emitter import RuntimeEmitter
from generators.template_compiler import TemplateCompiler
from models import BuildOptions, Project, ScreenConfig, TemplateMeta, ValidationResult
from snippets.screen_snippets import SCREEN_NOT_FOUND


def export_filename(on: Optional[date] = None) -> str:
    return f"gift_{(on or date.today()):%Y%m%d}.html"


class GiftPipeline:
    """Builds gift documents. Preview results are cached; export never is.

    The orchestrator provides a callback hook for UI integration:
    - on_status_change: called with (status, detail) as each pass progresses
    """

    def __init__(
        self,
        store: BlobStore,
        settings: Optional[Settings] = None,
        url_cache: Optional[PreviewUrlCache] = None,
        html_cache: Optional[HtmlCache] = None,
        on_status_change: Optional[Callable[[str, str], None]] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._log = PipelineLogger("Pipeline")
        self._resolver = MediaResolver(store, self._settings, url_cache)
        self._validator = Validator(self._settings)
        self._compiler = TemplateCompiler(self._settings)
        self._emitter = RuntimeEmitter(self._settings)
        self._html_cache = html_cache or HtmlCache(
            ttl_seconds=self._settings.preview_cache_ttl_seconds,
            max_entries=self._settings.preview_cache_max_entries,
            registry=self.url_cache.registry,
        )
        self._on_status_change = on_status_change
        self.compile_count = 0

    def _set_status(self, status: str, detail: str = "") -> None:
        self._log.info(f"Pipeline status: {status} | {detail}")
        if self._on_status_change:
            self._on_status_change(status, detail)

    @property
    def url_cache(self) -> PreviewUrlCache:
        return self._resolver.url_cache

    @property
    def html_cache(self) -> HtmlCache:
        return self._html_cache

    # ── Cache key ───────────────────────────────────────────

    @staticmethod
    def cache_key(
        project: Project,
        template: TemplateMeta,
        options: BuildOptions,
        markup: Optional[str] = None,
    ) -> str:
        """Stable content hash; created/updated timestamps never participate."""
        signature = {
            "project": project.id,
            "templateId": project.template_id,
            "language": project.language,
            "template": template.model_dump(mode="json", by_alias=True),
            "markup": hashlib.sha256((markup or "").encode("utf-8")).hexdigest(),
            "options": options.model_dump(mode="json"),
            "data": project.data.model_dump(mode="json", by_alias=True),
        }
        raw = json.dumps(signature, sort_keys=True, ensure_ascii=False, separators=(",", ":"))
        return hashlib.sha256(raw.encode("utf-8")).hexdigest()

    # ── Public API ──────────────────────────────────────────

    def select_screens(
        self, project: Project, template: TemplateMeta, options: BuildOptions,
    ) -> Optional[List[ScreenConfig]]:
        """Resolved screens after the per-call filters; None for an unknown single screen."""
        screens = resolve_screens(project, template)
        if options.hide_empty_screens:
            screens = filter_screens_with_content(screens, project)
        if options.single_screen_only and options.start_screen_id:
            return select_single_screen(screens, options.start_screen_id)
        return screens

    def validate(self, project: Project, template: TemplateMeta) -> ValidationResult:
        return self._validator.validate(project, template)

    async def build_gift_html(
        self,
        project: Project,
        template: TemplateMeta,
        markup: Optional[str] = None,
        options: Optional[BuildOptions] = None,
    ) -> str:
        """Produce a complete gift document.

        Raises:
            ExportValidationError: export mode and the project has blocking errors.
            MissingMediaError / VideoBudgetError: export mode media problems.
            TemplateLoadError: template markup could not be used.
        """
        options = options or BuildOptions()
        is_preview = options.mode == "preview"
        log = self._log.with_context(project=project.id, mode=options.mode)

        key = self.cache_key(project, template, options, markup) if is_preview else None
        if key is not None:
            cached = self._html_cache.get(key)
            if cached is not None:
                log.decision("Preview cache hit", "identical inputs")
                return cached

        screens = self.select_screens(project, template, options)
        if screens is None:
            log.warning(f"Screen '{options.start_screen_id}' not found")
            body = str(render_snippet(SCREEN_NOT_FOUND, screen_id=options.start_screen_id))
            return self._emitter.emit_stub(project, body, options.mode)

        self._set_status("rendering", f"{options.mode}: {len(screens)} screen(s)")

        if not is_preview:
            with log.step_start("Validate"):
                result = self._validator.validate(project, template)
            if not result.is_valid:
                self._set_status("blocked", f"{len(result.errors)} validation error(s)")
                raise ExportValidationError(result)

        with log.step_start(f"Resolve media ({options.mode})"):
            media = await self._resolver.resolve(project, screens, options.mode)

        with log.step_start("Compile body"):
            compiled = self._compiler.compile(project, template, screens, media, markup, options)
            self.compile_count += 1

        with log.step_start("Emit document"):
            document = self._emitter.emit(compiled, project, template, screens, media, options)

        if key is not None:
            self._html_cache.put(key, document)
        self._set_status("done", f"{options.mode}: {len(document) / 1024:.0f}KB")
        return document

    async def export_gift(
        self,
        project: Project,
        template: TemplateMeta,
        markup: Optional[str] = None,
        output_dir: Optional[Path] = None,
        on: Optional[date] = None,
    ) -> Path:
        """Build the standalone document and write it as gift_<YYYYMMDD>.html."""
        document = await self.build_gift_html(project, template, markup, BuildOptions(mode="export"))
        target_dir = Path(output_dir or self._settings.output_dir)
        target_dir.mkdir(parents=True, exist_ok=True)
        path = target_dir / export_filename(on)
        path.write_text(document, encoding="utf-8")
        self._log.info(f"Gift exported: {path}")
        return path


class PreviewOrchestrator:
    """Debounced preview builds; only the latest request's result is kept.

    Each request_preview() restarts the debounce timer and takes a new
    generation id. A build that finishes after a newer request was made is
    discarded, whether it succeeded or failed.
    """

    def __init__(
        self,
        pipeline: GiftPipeline,
        settings: Optional[Settings] = None,
        on_preview: Optional[Callable[[str, int], None]] = None,
        on_error: Optional[Callable[[Exception, int], None]] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._pipeline = pipeline
        self._log = PipelineLogger("PreviewOrchestrator")
        self._on_preview = on_preview
        self._on_error = on_error
        self._generation = 0
        self._pending: Optional[asyncio.Task] = None
        self._builds: Set[asyncio.Task] = set()
        self.latest_html: Optional[str] = None
        self.latest_generation: Optional[int] = None
        self.last_error: Optional[Exception] = None

    @property
    def generation(self) -> int:
        return self._generation

    def request_preview(
        self,
        project: Project,
        template: TemplateMeta,
        markup: Optional[str] = None,
        options: Optional[BuildOptions] = None,
    ) -> int:
        """Schedule a preview build; must be called from a running event loop."""
        self._generation += 1
        generation = self._generation
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        options = (options or BuildOptions()).model_copy(update={"mode": "preview"})
        self._pending = asyncio.get_running_loop().create_task(
            self._debounced(generation, project, template, markup, options)
        )
        return generation

    async def _debounced(
        self,
        generation: int,
        project: Project,
        template: TemplateMeta,
        markup: Optional[str],
        options: BuildOptions,
    ) -> None:
        await asyncio.sleep(self._settings.preview_debounce_ms / 1000)
        build = asyncio.ensure_future(self._build(generation, project, template, markup, options))
        self._builds.add(build)
        build.add_done_callback(self._builds.discard)
        # a newer request cancels only the wait above, never a running build
        await asyncio.shield(build)

    async def _build(
        self,
        generation: int,
        project: Project,
        template: TemplateMeta,
        markup: Optional[str],
        options: BuildOptions,
    ) -> None:
        try:
            document = await self._pipeline.build_gift_html(project, template, markup, options)
        except (GiftBuildError, OSError) as exc:
            if generation != self._generation:
                self._log.debug(f"Discarded failed preview #{generation} (latest #{self._generation})")
                return
            self._log.warning(f"Preview #{generation} failed: {exc}")
            self.last_error = exc
            if self._on_error:
                self._on_error(exc, generation)
            return

        if generation != self._generation:
            self._log.debug(f"Discarded stale preview #{generation} (latest #{self._generation})")
            return
        self.latest_html = document
        self.latest_generation = generation
        self.last_error = None
        if self._on_preview:
            self._on_preview(document, generation)

    async def flush(self) -> None:
        """Wait until the pending request (if any) and running builds settle."""
        if self._pending is not None:
            try:
                await self._pending
            except asyncio.CancelledError:
                pass
        if self._builds:
            await asyncio.gather(*list(self._builds))

    def cancel(self) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
