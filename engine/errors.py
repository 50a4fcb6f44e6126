"""
engine/errors.py — Exceptions raised when a correct document cannot be produced.
Recoverable preview conditions are logged, not raised.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from models import ValidationResult


class GiftBuildError(Exception):
    """Base class for user-facing pipeline failures."""


class TemplateLoadError(GiftBuildError):
    """Template metadata or markup is missing or malformed."""


class ExportValidationError(GiftBuildError):
    """Export refused because the project has blocking validation errors."""

    def __init__(self, result: ValidationResult) -> None:
        self.result = result
        lines = "; ".join(e.message for e in result.errors)
        super().__init__(f"Export blocked by {len(result.errors)} error(s): {lines}")


class MissingMediaError(GiftBuildError):
    """A referenced media blob is absent from the store at export time."""

    def __init__(self, kind: str, filename: str, media_id: str) -> None:
        self.kind = kind
        self.filename = filename
        self.media_id = media_id
        super().__init__(
            f"{kind.capitalize()} blob missing: {filename} (ID: {media_id}). Please re-upload."
        )


class VideoBudgetError(GiftBuildError):
    """A video, or all videos together, exceed the configured budget."""
