"""
config.py — Central configuration for Gift Builder.
Loads settings from environment variables / .env file.
"""

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings
from pydantic import Field


# ── Project Paths ──────────────────────────────────────────────
ROOT_DIR = Path(__file__).resolve().parent
DATA_DIR = ROOT_DIR / "data"
OUTPUT_DIR = DATA_DIR / "output"
LOG_DIR = DATA_DIR / "logs"
TEMPLATES_DIR = ROOT_DIR / "templates"

# Ensure data subdirectories exist at import time
for _dir in (OUTPUT_DIR, LOG_DIR):
    _dir.mkdir(parents=True, exist_ok=True)


# ── Application Settings ──────────────────────────────────────
class Settings(BaseSettings):
    """Typed application settings, loaded from env vars or a .env file."""

    # --- Video Budget ---
    video_max_size_mb: float = Field(
        default=25.0, gt=0,
        description="Maximum size of a single video asset",
    )
    video_max_duration_seconds: float = Field(
        default=60.0, gt=0,
        description="Maximum duration of a single video asset",
    )
    video_total_budget_mb: float = Field(
        default=60.0, gt=0,
        description="Maximum combined size of all videos in one document",
    )

    # --- Asset Warnings (non-blocking) ---
    image_warning_size_kb: int = Field(
        default=400, ge=1,
        description="Images above this size are flagged as likely to bloat the export",
    )
    audio_warning_size_mb: float = Field(
        default=4.0, gt=0,
        description="Audio tracks above this size are flagged as likely to bloat the export",
    )

    # --- Media Resolution ---
    media_concurrency: int = Field(
        default=6, ge=1,
        description="Max concurrent blob-store reads per render pass",
    )
    media_fetch_retries: int = Field(
        default=3, ge=1,
        description="Attempts per blob read when the store raises a transient error",
    )

    # --- Preview ---
    preview_debounce_ms: int = Field(
        default=300, ge=0,
        description="Delay after the last edit before the preview is rebuilt",
    )
    preview_cache_ttl_seconds: int = Field(
        default=300, ge=1,
        description="Lifetime of a cached preview document",
    )
    preview_cache_max_entries: int = Field(
        default=50, ge=1,
        description="Max cached preview documents (oldest evicted first)",
    )
    preview_url_cache_size: int = Field(
        default=100, ge=1,
        description="Max live preview media handles (LRU)",
    )

    # --- Runtime Engine ---
    slideshow_interval_ms: int = Field(
        default=4000, ge=500,
        description="Auto-advance interval of fullscreen slideshows",
    )

    # --- Theming ---
    default_theme: str = Field(
        default="romantic",
        description="Predefined theme used when the project has no custom theme",
    )

    # --- Paths ---
    templates_dir: Path = Field(default=TEMPLATES_DIR)
    media_dir: Optional[Path] = Field(
        default=None,
        description="Root of the on-disk media store used by the CLI",
    )
    output_dir: Path = Field(default=OUTPUT_DIR)

    log_level: str = Field(default="INFO")

    model_config = {
        "env_file": str(ROOT_DIR / ".env"),
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


def get_settings() -> Settings:
    """Factory that loads and returns validated settings."""
    return Settings()
