"""
generators/gallery_builder.py — Builds gallery blocks for the five layouts.

Each block is markup plus a state seed the runtime turns into a controller.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from markupsafe import Markup

from engine.pipeline_logger import PipelineLogger
from engine.playback import GallerySteps
from generators.markup import escape_user_text, render_snippet
from models import DEFAULT_GALLERY_LAYOUT, GalleryLayout, MediaUrls, Project
from snippets.gallery_snippets import EMPTY_GALLERY, GALLERY_SNIPPETS


def gallery_dom_id(screen_id: str) -> str:
    return "gallery-" + re.sub(r"[^A-Za-z0-9_-]", "-", screen_id)


@dataclass
class GallerySeed:
    """Initial state of one gallery controller."""

    id: str
    screen_id: str
    layout: GalleryLayout
    images: List[str] = field(default_factory=list)
    index: int = 0

    def to_config(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "screen": self.screen_id,
            "layout": self.layout,
            "images": list(self.images),
            "index": self.index,
            **GallerySteps(len(self.images)).to_config(),
        }


@dataclass
class GalleryBlock:
    html: Markup
    seed: Optional[GallerySeed] = None


class GalleryBuilder:
    """Renders `{{<screenId>_gallery}}` blocks from a screen's image list."""

    def __init__(self) -> None:
        self._log = PipelineLogger("GalleryBuilder")

    def build(
        self,
        screen_id: str,
        image_ids: List[str],
        project: Project,
        media: MediaUrls,
        layout: Optional[GalleryLayout] = None,
    ) -> GalleryBlock:
        gallery_id = gallery_dom_id(screen_id)
        if not image_ids:
            return GalleryBlock(html=render_snippet(EMPTY_GALLERY, gallery_id=gallery_id))

        layout = layout if layout in GALLERY_SNIPPETS else DEFAULT_GALLERY_LAYOUT
        images = []
        for image_id in image_ids:
            record = project.data.image(image_id)
            alt = escape_user_text(record.filename) if record else Markup("Gallery image")
            images.append({"url": media.images.get(image_id, ""), "alt": alt})

        html = render_snippet(
            GALLERY_SNIPPETS[layout],
            gallery_id=gallery_id,
            images=images,
            index=0,
        )
        self._log.debug(f"Gallery {gallery_id}: {layout} with {len(images)} image(s)")
        return GalleryBlock(
            html=html,
            seed=GallerySeed(
                id=gallery_id,
                screen_id=screen_id,
                layout=layout,
                images=list(image_ids),
            ),
        )
