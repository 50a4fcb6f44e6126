from __future__ import annotations

import base64
from typing import Any, Dict

import pytest

from config import Settings
from engine.media_store import InMemoryMediaStore
from models import Project, TemplateMeta

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 24
MP4_BYTES = b"\x00\x00\x00\x18ftypmp42" + b"\x00" * 16
MP3_BYTES = b"ID3" + b"\x00" * 16

MB = 1024 * 1024


def template_payload() -> Dict[str, Any]:
    return {
        "templateId": "anniversary",
        "templateName": "Anniversary",
        "overlayType": "heart",
        "screens": [
            {"screenId": "intro", "type": "intro", "order": 1, "required": ["title"]},
            {"screenId": "memories", "type": "gallery", "order": 2,
             "required": ["images"], "galleryImageCount": 3},
            {"screenId": "clip", "type": "single", "order": 3},
            {"screenId": "wishes", "type": "blessings", "order": 4, "blessingCount": 2},
        ],
        "designConfig": {
            "background": "#fff7f8",
            "defaultPlaceholders": {"overlayMainText": "For you"},
        },
    }


def project_payload(**data_overrides: Any) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "recipientName": "Dana",
        "senderName": "Sam",
        "eventTitle": "Our Anniversary",
        "screens": {
            "intro": {"title": "Hello", "text": "Ten years together"},
            "memories": {"title": "Memories", "images": ["img-1", "img-2"], "galleryLayout": "carousel"},
        },
        "images": [
            {"id": "img-1", "filename": "beach.png", "mime": "image/png", "size": 2048},
            {"id": "img-2", "filename": "dinner.png", "mime": "image/png", "size": 4096},
        ],
        "blessings": [{"sender": "Mom", "text": "Congratulations"}],
    }
    data.update(data_overrides)
    return {
        "id": "p1",
        "name": "Anniversary gift",
        "templateId": "anniversary",
        "createdAt": "2026-01-01T10:00:00Z",
        "updatedAt": "2026-01-02T10:00:00Z",
        "data": data,
    }


def make_project(**data_overrides: Any) -> Project:
    return Project.model_validate(project_payload(**data_overrides))


def data_url(raw: bytes, mime: str) -> str:
    return f"data:{mime};base64,{base64.b64encode(raw).decode('ascii')}"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        preview_debounce_ms=10,
        media_fetch_retries=2,
        output_dir=tmp_path / "out",
        templates_dir=tmp_path / "templates",
    )


@pytest.fixture
def template() -> TemplateMeta:
    return TemplateMeta.model_validate(template_payload())


@pytest.fixture
def project() -> Project:
    return make_project()


@pytest.fixture
def store() -> InMemoryMediaStore:
    media = InMemoryMediaStore()
    media.put("p1", "img-1", PNG_BYTES, "image/png")
    media.put("p1", "img-2", PNG_BYTES, "image/png")
    return media
