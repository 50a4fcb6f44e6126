"""
engine/screen_resolver.py — Single source of truth for the rendered screen list.
Preview, export, media resolution and validation all call resolve_screens()
so they always agree on structure.
"""

from __future__ import annotations

from typing import List, Optional

from models import Project, ScreenConfig, TemplateMeta


def uses_custom_order(project: Project) -> bool:
    """True when the user's screen list belongs to the project's current template."""
    data = project.data
    return bool(data.dynamic_screens) and data.dynamic_screens_template_id == project.template_id


def resolve_screens(project: Project, template: TemplateMeta) -> List[ScreenConfig]:
    """Return the ordered screens to render.

    Uses the user-customized list only when it is tagged with the current
    template id; otherwise the template's own screens. Never merges the two.
    """
    source = project.data.dynamic_screens if uses_custom_order(project) else template.screens
    return sorted(source or [], key=lambda s: s.order)


def screen_has_content(screen: ScreenConfig, project: Project) -> bool:
    data = project.data.screen(screen.screen_id)
    has_images = not data.is_video_mode and bool(data.images)
    has_video = data.is_video_mode and bool(data.video_id)
    has_text = bool((data.text or "").strip())
    has_title = bool((data.title or "").strip())
    return has_images or has_video or has_text or has_title


def filter_screens_with_content(screens: List[ScreenConfig], project: Project) -> List[ScreenConfig]:
    """Drop screens the user left completely empty."""
    return [s for s in screens if screen_has_content(s, project)]


def select_single_screen(screens: List[ScreenConfig], screen_id: str) -> Optional[List[ScreenConfig]]:
    """Narrow the list to one screen; None when the id is unknown."""
    match = next((s for s in screens if s.screen_id == screen_id), None)
    return [match] if match else None
