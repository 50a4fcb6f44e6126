"""
engine/validator.py — Pre-export checks over project metadata.

Errors block export; warnings are shown to the user but never block.
Validation issues are returned as data, never raised.
"""

from __future__ import annotations

from typing import Any, List, Optional, Tuple

from pydantic import ValidationError

from config import Settings, get_settings
from engine.pipeline_logger import PipelineLogger
from engine.screen_resolver import resolve_screens
from engine.video_budget import MB, VideoUsage, video_budget_issues
from models import Project, ScreenConfig, TemplateMeta, ValidationIssue, ValidationResult

# Entries of ScreenConfig.required that refer to media rather than text
_MEDIA_REQUIREMENTS = ("images", "video", "audio", "music")


class Validator:
    """Checks a project against the screens it will actually render."""

    def __init__(self, settings: Optional[Settings] = None):
        self._settings = settings or get_settings()
        self._log = PipelineLogger("Validator")

    # ── Public API ──────────────────────────────────────────

    def validate(self, project: Project, template: TemplateMeta) -> ValidationResult:
        screens = resolve_screens(project, template)
        errors: List[ValidationIssue] = []
        warnings: List[ValidationIssue] = []

        usages: List[VideoUsage] = []
        for screen in screens:
            errors.extend(self._check_video(project, screen, usages))
            errors.extend(self._check_required_media(project, screen))
            warnings.extend(self._check_counts(project, screen))

        errors.extend(video_budget_issues(usages, self._settings))
        warnings.extend(self._check_media_sizes(project, screens))

        result = ValidationResult(is_valid=not errors, errors=errors, warnings=warnings)
        self._log.decision(
            "Export allowed" if result.is_valid else "Export blocked",
            f"{len(errors)} error(s), {len(warnings)} warning(s) over {len(screens)} screen(s)",
        )
        return result

    # ── Checks ──────────────────────────────────────────────

    @staticmethod
    def _check_video(project: Project, screen: ScreenConfig, usages: List[VideoUsage]) -> List[ValidationIssue]:
        data = project.data.screen(screen.screen_id)
        if not data.is_video_mode:
            return []

        field = f"{screen.screen_id}.video"
        if not data.video_id:
            return [ValidationIssue(
                field=field,
                message=f'Screen "{screen.screen_id}" is in video mode but no video is selected.',
                section="videos",
            )]

        video = project.data.video(data.video_id)
        if video is None:
            return [ValidationIssue(
                field=field,
                message=(
                    f'The video selected for screen "{screen.screen_id}" is no longer available '
                    f"(ID: {data.video_id}). Please re-upload it."
                ),
                section="videos",
            )]

        usages.append((screen.screen_id, video))
        return []

    @staticmethod
    def _check_required_media(project: Project, screen: ScreenConfig) -> List[ValidationIssue]:
        data = project.data.screen(screen.screen_id)
        audio = project.data.audio
        issues: List[ValidationIssue] = []

        for entry in screen.required:
            if entry not in _MEDIA_REQUIREMENTS:
                continue  # title/text are optional content

            if entry == "images":
                missing = data.is_video_mode or not data.images
                section = "images"
            elif entry == "video":
                missing = not (data.is_video_mode and data.video_id)
                section = "videos"
            else:
                missing = audio.global_track is None and screen.screen_id not in audio.screens
                section = "music"

            if missing:
                issues.append(ValidationIssue(
                    field=f"{screen.screen_id}.{entry}",
                    message=f'Screen "{screen.screen_id}" requires {entry}, but none was added.',
                    section=section,
                ))
        return issues

    @staticmethod
    def _check_counts(project: Project, screen: ScreenConfig) -> List[ValidationIssue]:
        issues: List[ValidationIssue] = []
        data = project.data.screen(screen.screen_id)

        if screen.gallery_image_count and not data.is_video_mode:
            if len(data.images) < screen.gallery_image_count:
                issues.append(ValidationIssue(
                    field=f"{screen.screen_id}.images",
                    message=(
                        f'Screen "{screen.screen_id}" looks best with at least '
                        f"{screen.gallery_image_count} images ({len(data.images)} added)."
                    ),
                    section="images",
                ))

        if screen.blessing_count and len(project.data.blessings) < screen.blessing_count:
            issues.append(ValidationIssue(
                field=f"{screen.screen_id}.blessings",
                message=(
                    f'Screen "{screen.screen_id}" expects at least {screen.blessing_count} '
                    f"blessings ({len(project.data.blessings)} added)."
                ),
                section="screen-texts",
            ))
        return issues

    def _check_media_sizes(self, project: Project, screens: List[ScreenConfig]) -> List[ValidationIssue]:
        issues: List[ValidationIssue] = []
        data = project.data

        seen = set()
        for screen in screens:
            screen_data = data.screen(screen.screen_id)
            if screen_data.is_video_mode:
                continue
            for image_id in screen_data.images:
                image = data.image(image_id)
                if image is None or image.id in seen:
                    continue
                seen.add(image.id)
                size_kb = image.size / 1024
                if size_kb > self._settings.image_warning_size_kb:
                    issues.append(ValidationIssue(
                        field=f"image.{image.id}",
                        message=(
                            f'Image "{image.filename}" is very large ({size_kb:.0f}KB). '
                            "Consider compressing it."
                        ),
                        section="images",
                    ))

        limit = self._settings.audio_warning_size_mb * MB
        if data.audio.global_track and data.audio.global_track.size > limit:
            issues.append(ValidationIssue(
                field="audio.global",
                message=(
                    f"Global audio file is large ({data.audio.global_track.size / MB:.1f}MB). "
                    "This may affect sharing."
                ),
                section="music",
            ))
        for screen in screens:
            track = data.audio.screens.get(screen.screen_id)
            if track and track.size > limit:
                issues.append(ValidationIssue(
                    field=f"audio.{screen.screen_id}",
                    message=(
                        f'Audio "{track.filename}" on screen "{screen.screen_id}" is large '
                        f"({track.size / MB:.1f}MB). This may affect sharing."
                    ),
                    section="music",
                ))
        return issues


def validate_import(payload: Any) -> Tuple[bool, Optional[Project], List[ValidationIssue]]:
    """Check the raw JSON shape of an imported project.

    Returns (is_valid, project, errors); project is None unless valid.
    """
    if not isinstance(payload, dict):
        return False, None, [ValidationIssue(field="root", message="Invalid JSON structure")]

    errors: List[ValidationIssue] = []
    for key, label in (("id", "Project ID"), ("name", "Project name"), ("templateId", "Template ID")):
        value = payload.get(key)
        if not value or not isinstance(value, str):
            errors.append(ValidationIssue(field=key, message=f"{label} is required and must be a string"))
    if not isinstance(payload.get("data"), dict):
        errors.append(ValidationIssue(field="data", message="Project data is required"))
    if errors:
        return False, None, errors

    try:
        project = Project.model_validate(payload)
    except ValidationError as exc:
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first["loc"]) or "root"
        return False, None, [ValidationIssue(
            field=location, message=f"Error parsing import data: {first['msg']}",
        )]
    return True, project, []
