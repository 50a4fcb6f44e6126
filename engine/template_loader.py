"""
engine/template_loader.py — Reads template metadata and optional static markup
from `<templates_dir>/<template_id>/`.
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from pydantic import ValidationError

from engine.errors import TemplateLoadError
from engine.pipeline_logger import PipelineLogger
from models import TemplateMeta

META_FILENAME = "template-meta.json"
MARKUP_FILENAME = "template.html"


class TemplateLoader:
    """Loads TemplateMeta records; failures raise TemplateLoadError."""

    def __init__(self, templates_dir: Path):
        self._dir = Path(templates_dir)
        self._log = PipelineLogger("TemplateLoader")
        self._meta_cache: Dict[str, TemplateMeta] = {}

    def available(self) -> List[str]:
        if not self._dir.is_dir():
            return []
        return sorted(p.name for p in self._dir.iterdir() if (p / META_FILENAME).is_file())

    def load_meta(self, template_id: str) -> TemplateMeta:
        if template_id in self._meta_cache:
            return self._meta_cache[template_id]

        path = self._dir / template_id / META_FILENAME
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise TemplateLoadError(f"Template '{template_id}' not found at {path}") from exc
        except (OSError, json.JSONDecodeError) as exc:
            raise TemplateLoadError(f"Failed to load template meta for {template_id}: {exc}") from exc

        try:
            meta = TemplateMeta.model_validate(raw)
        except ValidationError as exc:
            raise TemplateLoadError(f"Invalid template meta structure for {template_id}: {exc}") from exc

        if meta.template_id != template_id:
            self._log.warning(
                f"Template folder '{template_id}' declares id '{meta.template_id}'"
            )
        self._meta_cache[template_id] = meta
        self._log.action("Load Template", f"{template_id} ({len(meta.screens)} screens)")
        return meta

    def load_markup(self, template_id: str) -> Optional[str]:
        """Static markup if the template ships one; None otherwise."""
        path = self._dir / template_id / MARKUP_FILENAME
        if not path.is_file():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            raise TemplateLoadError(f"Failed to load template HTML for {template_id}: {exc}") from exc

    def load(self, template_id: str) -> Tuple[TemplateMeta, Optional[str]]:
        return self.load_meta(template_id), self.load_markup(template_id)


@lru_cache(maxsize=8)
def get_template_loader(templates_dir: Path) -> TemplateLoader:
    return TemplateLoader(templates_dir)
