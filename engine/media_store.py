"""
engine/media_store.py — Blob-store adapters consumed by the MediaResolver.
The persistence layer itself lives outside this package; anything with an
async get_blob(project_id, media_id) works. Absence is None, never an exception.
"""

from __future__ import annotations

import asyncio
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Protocol, Tuple


@dataclass(frozen=True)
class MediaBlob:
    """Raw media bytes plus their MIME type."""

    data: bytes
    mime: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.data)


class BlobStore(Protocol):
    async def get_blob(self, project_id: str, media_id: str) -> Optional[MediaBlob]:
        ...


class InMemoryMediaStore:
    """Dict-backed store, handy for embedding the pipeline and for tests."""

    def __init__(self) -> None:
        self._blobs: Dict[Tuple[str, str], MediaBlob] = {}
        self.reads = 0

    def put(self, project_id: str, media_id: str, data: bytes, mime: str) -> None:
        self._blobs[(project_id, media_id)] = MediaBlob(data=data, mime=mime)

    def delete(self, project_id: str, media_id: str) -> None:
        self._blobs.pop((project_id, media_id), None)

    async def get_blob(self, project_id: str, media_id: str) -> Optional[MediaBlob]:
        self.reads += 1
        await asyncio.sleep(0)
        return self._blobs.get((project_id, media_id))


class DirectoryMediaStore:
    """Reads `<root>/<project_id>/<media_id>` (any extension) from disk."""

    def __init__(self, root: Path) -> None:
        self._root = Path(root)

    def _locate(self, project_id: str, media_id: str) -> Optional[Path]:
        folder = self._root / project_id
        exact = folder / media_id
        if exact.is_file():
            return exact
        for candidate in sorted(folder.glob(f"{media_id}.*")):
            if candidate.is_file():
                return candidate
        return None

    def _read(self, project_id: str, media_id: str) -> Optional[MediaBlob]:
        path = self._locate(project_id, media_id)
        if path is None:
            return None
        mime, _ = mimetypes.guess_type(path.name)
        return MediaBlob(data=path.read_bytes(), mime=mime or "application/octet-stream")

    async def get_blob(self, project_id: str, media_id: str) -> Optional[MediaBlob]:
        return await asyncio.to_thread(self._read, project_id, media_id)


class ChainedMediaStore:
    """Asks each store in turn; the first non-None blob wins."""

    def __init__(self, *stores: BlobStore) -> None:
        self._stores = stores

    async def get_blob(self, project_id: str, media_id: str) -> Optional[MediaBlob]:
        for store in self._stores:
            blob = await store.get_blob(project_id, media_id)
            if blob is not None:
                return blob
        return None
