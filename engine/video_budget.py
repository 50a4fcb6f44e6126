"""
engine/video_budget.py — Per-video and aggregate size/duration limits.
Shared by the Validator (blocking errors), the MediaResolver and the
TemplateCompiler (fatal on export, warning in preview).
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

from config import Settings
from models import ValidationIssue, VideoData

MB = 1024 * 1024

# (screen_id, video) pairs in screen order
VideoUsage = Tuple[str, VideoData]


def video_budget_issues(usages: Sequence[VideoUsage], settings: Settings) -> List[ValidationIssue]:
    """Return one issue per limit a video (or the set of videos) exceeds."""
    issues: List[ValidationIssue] = []
    max_bytes = settings.video_max_size_mb * MB

    for screen_id, video in usages:
        if video.size > max_bytes:
            issues.append(ValidationIssue(
                field=f"{screen_id}.video",
                message=(
                    f'Video "{video.filename}" on screen "{screen_id}" is too large '
                    f"({video.size / MB:.1f}MB). Max allowed is {settings.video_max_size_mb:g}MB."
                ),
                section="videos",
            ))
        if video.duration > settings.video_max_duration_seconds:
            issues.append(ValidationIssue(
                field=f"{screen_id}.video",
                message=(
                    f'Video "{video.filename}" on screen "{screen_id}" is too long '
                    f"({video.duration:.1f}s). Max allowed is {settings.video_max_duration_seconds:g}s."
                ),
                section="videos",
            ))

    # The same video on two screens is embedded once
    distinct = {video.id: video for _, video in usages}
    total = sum(v.size for v in distinct.values())
    if total > settings.video_total_budget_mb * MB:
        issues.append(ValidationIssue(
            field="videos",
            message=(
                f"Videos total {total / MB:.1f}MB, above the "
                f"{settings.video_total_budget_mb:g}MB budget for one gift."
            ),
            section="videos",
        ))
    return issues
