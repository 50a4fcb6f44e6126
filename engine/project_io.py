"""
engine/project_io.py — Loading, migrating and saving project JSON.

Migration is a pure function: it returns a cleaned copy and never edits the
loaded project in place.
"""

from __future__ import annotations

import base64
import json
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from engine.errors import GiftBuildError
from engine.media_store import MediaBlob
from engine.pipeline_logger import PipelineLogger
from engine.validator import validate_import
from models import Project, ScreenData, update_project, update_project_data

CURRENT_SCHEMA_VERSION = 1

_log = PipelineLogger("ProjectIO")


class ProjectLoadError(GiftBuildError):
    """Project file is unreadable or fails the import checks."""


def migrate_project(project: Project) -> Project:
    """Bring a project up to the current schema and drop stale media references.

    - image ids missing from `data.images` are removed from every screen
    - video-mode screens whose video is unknown fall back to classic mode
    - video-mode screens carry no images, per-screen audio id or layout
    """
    data = project.data
    valid_images = {img.id for img in data.images}
    valid_videos = {v.id for v in data.videos}

    screens: Dict[str, ScreenData] = {}
    changed = False
    for screen_id, screen in data.screens.items():
        video_ok = screen.is_video_mode and screen.video_id in valid_videos
        if video_ok:
            cleaned = screen.model_copy(update={
                "images": [],
                "audio_id": None,
                "extend_music_to_next": False,
                "gallery_layout": None,
            })
        else:
            if screen.is_video_mode:
                _log.warning(
                    f"Screen '{screen_id}' is in video mode without a known video "
                    f"({screen.video_id or 'none'}); switched to classic"
                )
            cleaned = screen.model_copy(update={
                "media_mode": "classic",
                "video_id": None,
                "images": [i for i in screen.images if i in valid_images],
            })
        changed = changed or cleaned != screen
        screens[screen_id] = cleaned

    migrated = update_project_data(project, screens=screens) if changed else project
    if changed:
        _log.decision("Cleaned stale media references", f"project={project.id}")

    if migrated.schema_version != CURRENT_SCHEMA_VERSION or not migrated.language:
        migrated = update_project(
            migrated,
            schema_version=CURRENT_SCHEMA_VERSION,
            language=migrated.language or "en",
        )
    return migrated


def extract_legacy_media(payload: Dict[str, Any]) -> Dict[str, MediaBlob]:
    """Pull inline `data:` URLs left by older exports out of a raw project dict.

    Returns media_id -> blob; the caller decides which store receives them.
    """
    data = payload.get("data") or {}
    records = list(data.get("images") or [])
    audio = data.get("audio") or {}
    if audio.get("global"):
        records.append(audio["global"])
    records.extend((audio.get("screens") or {}).values())

    blobs: Dict[str, MediaBlob] = {}
    for record in records:
        inline = record.get("data") if isinstance(record, dict) else None
        if not isinstance(inline, str) or not inline.startswith("data:"):
            continue
        header, _, encoded = inline.partition(",")
        mime = header[len("data:"):].split(";")[0] or "application/octet-stream"
        try:
            blobs[record["id"]] = MediaBlob(data=base64.b64decode(encoded), mime=mime)
        except (ValueError, KeyError) as exc:
            _log.warning(f"Skipping unreadable inline media {record.get('id')}: {exc}")
    return blobs


def parse_project(payload: Any) -> Project:
    is_valid, project, errors = validate_import(payload)
    if not is_valid or project is None:
        details = "; ".join(f"{e.field}: {e.message}" for e in errors)
        raise ProjectLoadError(f"Invalid project file: {details}")
    return migrate_project(project)


def read_project_file(path: Union[str, Path]) -> Tuple[Project, Dict[str, Any]]:
    """Read, check and migrate a project JSON file; also returns the raw payload,
    which still holds any inline legacy media."""
    path = Path(path)
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ProjectLoadError(f"Cannot read project file {path}: {exc}") from exc

    project = parse_project(payload)
    _log.info(f"Loaded project {project.id} ({project.name}) for template {project.template_id}")
    return project, payload


def load_project(path: Union[str, Path]) -> Project:
    return read_project_file(path)[0]


def dump_project(project: Project, indent: Optional[int] = 2) -> str:
    """Serialize in the camelCase shape the authoring tool writes."""
    return project.model_dump_json(by_alias=True, exclude_none=True, indent=indent)
