"""
engine/media_resolver.py — Maps media ids referenced by the rendered screens
to consumable URLs for one render pass.

export   blobs are embedded as base64 data: URLs; any miss is fatal
preview  blobs get short-lived blob: handles; a miss degrades to ""
"""

from __future__ import annotations

import asyncio
import base64
from typing import Dict, List, Optional, Set, Tuple

from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from config import Settings, get_settings
from engine.errors import MissingMediaError, VideoBudgetError
from engine.media_store import BlobStore, MediaBlob
from engine.pipeline_logger import PipelineLogger
from engine.preview_cache import PreviewHandleRegistry, PreviewUrlCache
from engine.video_budget import VideoUsage, video_budget_issues
from models import MediaUrls, Project, RenderMode, ScreenConfig


def to_data_url(blob: MediaBlob, fallback_mime: str) -> str:
    """Encode a blob as a self-contained data: URL."""
    mime = blob.mime if blob.mime and blob.mime != "application/octet-stream" else fallback_mime
    encoded = base64.b64encode(blob.data).decode("ascii")
    return f"data:{mime};base64,{encoded}"


class ReferencedMedia:
    """The image/audio/video ids the resolved screens actually use."""

    def __init__(self, project: Project, screens: List[ScreenConfig]) -> None:
        data = project.data
        self.image_ids: List[str] = []
        self.audio_ids: List[str] = []
        self.video_usages: List[VideoUsage] = []
        self.unknown_video_ids: List[str] = []

        seen_images: Set[str] = set()
        seen_audio: Set[str] = set()

        if data.audio.global_track:
            self.audio_ids.append(data.audio.global_track.id)
            seen_audio.add(data.audio.global_track.id)

        for screen in screens:
            screen_data = data.screen(screen.screen_id)
            if screen_data.is_video_mode:
                if screen_data.video_id:
                    video = data.video(screen_data.video_id)
                    if video is None:
                        self.unknown_video_ids.append(screen_data.video_id)
                    else:
                        self.video_usages.append((screen.screen_id, video))
            else:
                for image_id in screen_data.images:
                    if image_id not in seen_images:
                        seen_images.add(image_id)
                        self.image_ids.append(image_id)

            track = data.audio.screens.get(screen.screen_id)
            if track and track.id not in seen_audio:
                seen_audio.add(track.id)
                self.audio_ids.append(track.id)

    @property
    def video_ids(self) -> List[str]:
        ids: List[str] = []
        for _, video in self.video_usages:
            if video.id not in ids:
                ids.append(video.id)
        return ids + [v for v in self.unknown_video_ids if v not in ids]


class MediaResolver:
    """Resolves referenced media with a bounded number of concurrent reads."""

    def __init__(
        self,
        store: BlobStore,
        settings: Optional[Settings] = None,
        url_cache: Optional[PreviewUrlCache] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._store = store
        self._url_cache = url_cache or PreviewUrlCache(
            PreviewHandleRegistry(), max_size=self._settings.preview_url_cache_size,
        )
        self._log = PipelineLogger("MediaResolver")

    @property
    def url_cache(self) -> PreviewUrlCache:
        return self._url_cache

    # ── Public API ──────────────────────────────────────────

    async def resolve(
        self,
        project: Project,
        screens: List[ScreenConfig],
        mode: RenderMode,
    ) -> MediaUrls:
        """Produce the MediaUrls snapshot for one render pass.

        Raises:
            MissingMediaError: export mode and a referenced blob is absent.
            VideoBudgetError: export mode and a video exceeds its budget.
        """
        refs = ReferencedMedia(project, screens)
        media = MediaUrls()

        self._log.action(
            "Resolve Media",
            f"mode={mode} images={len(refs.image_ids)} audio={len(refs.audio_ids)} "
            f"videos={len(refs.video_ids)} limit={self._settings.media_concurrency}",
        )

        budget_issues = video_budget_issues(refs.video_usages, self._settings)
        if budget_issues:
            if mode == "export":
                raise VideoBudgetError("; ".join(i.message for i in budget_issues))
            for issue in budget_issues:
                self._log.warning(f"Preview video budget: {issue.message}")
            media.warnings.extend(budget_issues)

        jobs: List[Tuple[str, str]] = (
            [("image", i) for i in refs.image_ids]
            + [("audio", a) for a in refs.audio_ids]
            + [("video", v) for v in refs.video_ids]
        )
        semaphore = asyncio.Semaphore(self._settings.media_concurrency)

        async def _bounded(kind: str, media_id: str) -> Tuple[str, str, str]:
            async with semaphore:
                url = await self._resolve_one(project, kind, media_id, mode)
                return kind, media_id, url

        tasks = [asyncio.ensure_future(_bounded(kind, mid)) for kind, mid in jobs]
        try:
            results = await asyncio.gather(*tasks)
        except Exception:
            for task in tasks:
                task.cancel()
            raise

        targets: Dict[str, Dict[str, str]] = {
            "image": media.images, "audio": media.audio, "video": media.videos,
        }
        for kind, media_id, url in results:
            targets[kind][media_id] = url

        missing = sum(1 for _, _, url in results if not url)
        if missing:
            self._log.warning(f"{missing} media reference(s) rendered as placeholders")
        return media

    # ── Internals ───────────────────────────────────────────

    async def _fetch(self, project_id: str, media_id: str) -> Optional[MediaBlob]:
        """Read one blob, retrying transient store I/O errors."""
        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type(OSError),
            stop=stop_after_attempt(self._settings.media_fetch_retries),
            wait=wait_exponential(multiplier=0.1, min=0.1, max=2),
            reraise=True,
        ):
            with attempt:
                blob = await self._store.get_blob(project_id, media_id)
        return blob

    async def _resolve_one(self, project: Project, kind: str, media_id: str, mode: RenderMode) -> str:
        if mode == "export":
            return await self._embed(project, kind, media_id)
        return await self._preview_handle(project, kind, media_id)

    async def _embed(self, project: Project, kind: str, media_id: str) -> str:
        filename, mime = self._describe(project, kind, media_id)
        try:
            blob = await self._fetch(project.id, media_id)
        except OSError as exc:
            raise MissingMediaError(kind, filename, media_id) from exc
        if blob is None:
            self._log.error(f"Export aborted: {kind} '{filename}' ({media_id}) missing from store")
            raise MissingMediaError(kind, filename, media_id)
        return to_data_url(blob, mime)

    async def _preview_handle(self, project: Project, kind: str, media_id: str) -> str:
        try:
            url = await self._url_cache.get_or_create(
                project.id, media_id, lambda: self._fetch(project.id, media_id),
            )
        except OSError as exc:
            self._log.warning(f"Preview {kind} {media_id} failed to load: {exc}")
            return ""
        if url is None:
            self._log.warning(f"Preview {kind} {media_id} missing; using placeholder")
            return ""
        return url

    @staticmethod
    def _describe(project: Project, kind: str, media_id: str) -> Tuple[str, str]:
        data = project.data
        record = None
        if kind == "image":
            record = data.image(media_id)
        elif kind == "audio":
            record = data.audio_file(media_id)
        elif kind == "video":
            record = data.video(media_id)
        if record is None:
            return media_id, "application/octet-stream"
        return record.filename, record.mime
