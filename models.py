"""
models.py — Shared Pydantic data models used across the pipeline.
Project, template and render-pass types accept the camelCase JSON written by
the authoring tool as well as snake_case field names.
"""

from __future__ import annotations

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


RenderMode = Literal["preview", "export"]
GalleryLayout = Literal[
    "carousel", "gridWithZoom", "fullscreenSlideshow", "heroWithThumbnails", "timeline",
]
ScreenType = Literal[
    "intro", "gallery", "text", "blessings", "single", "birth-details", "event-details",
]
OverlayType = Literal["heart", "birthday", "save_the_date", "custom"]
Intensity = Literal["low", "medium", "high"]
Speed = Literal["slow", "normal", "fast"]

DEFAULT_GALLERY_LAYOUT: GalleryLayout = "carousel"


class GiftModel(BaseModel):
    """Base for all project/template records: frozen, camelCase-aware."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


# ── Styling ─────────────────────────────────────────────────


class NoAnimation(GiftModel):
    type: Literal["none"] = "none"


class ParticleAnimation(GiftModel):
    """DOM particle styles: hearts/bubbles float up, sparkles/stars twinkle."""
    type: Literal["hearts", "bubbles", "sparkles", "stars"]
    intensity: Intensity = "medium"
    speed: Speed = "normal"
    color: Optional[str] = None


class CanvasAnimation(GiftModel):
    """Canvas physics styles."""
    type: Literal["confetti", "fireworks"]
    intensity: Intensity = "medium"
    speed: Speed = "normal"
    color: Optional[str] = None


BackgroundAnimation = Annotated[
    Union[NoAnimation, ParticleAnimation, CanvasAnimation],
    Field(discriminator="type"),
]


class ButtonColors(GiftModel):
    background: Optional[str] = None
    text: Optional[str] = None
    border: Optional[str] = None


class StyleColors(GiftModel):
    background: Optional[str] = None
    text: Optional[str] = None
    title: Optional[str] = None
    button: Optional[ButtonColors] = None


class ScreenStyle(GiftModel):
    """Style override for one screen, or for the whole gift when global."""
    colors: Optional[StyleColors] = None
    background_animation: Optional[BackgroundAnimation] = None

    @property
    def active_animation(self) -> Optional[Union[ParticleAnimation, CanvasAnimation]]:
        anim = self.background_animation
        if anim is None or anim.type == "none":
            return None
        return anim


class ThemeColors(GiftModel):
    text: Optional[str] = None
    text_secondary: Optional[str] = None
    background: Optional[str] = None
    background_secondary: Optional[str] = None
    accent: Optional[str] = None
    border: Optional[str] = None
    button: Optional[str] = None
    button_text: Optional[str] = None
    overlay: Optional[str] = None


class ThemeFonts(GiftModel):
    heading: Optional[str] = None
    body: Optional[str] = None


class ThemeConfig(GiftModel):
    name: str
    type: Literal["predefined", "custom"] = "custom"
    colors: ThemeColors = Field(default_factory=ThemeColors)
    fonts: Optional[ThemeFonts] = None


# ── Media ───────────────────────────────────────────────────


class ImageData(GiftModel):
    id: str
    filename: str = "image"
    mime: str = "image/webp"
    size: int = 0
    width: Optional[int] = None
    height: Optional[int] = None


class VideoData(GiftModel):
    id: str
    filename: str = "video"
    mime: str = "video/mp4"
    size: int = 0
    duration: float = 0.0
    width: Optional[int] = None
    height: Optional[int] = None
    poster_data_url: Optional[str] = None


class AudioFile(GiftModel):
    id: str
    filename: str = "audio"
    mime: str = "audio/mpeg"
    size: int = 0
    duration: Optional[float] = None


class AudioData(GiftModel):
    global_track: Optional[AudioFile] = Field(default=None, alias="global")
    screens: Dict[str, AudioFile] = Field(default_factory=dict)
    library: List[AudioFile] = Field(default_factory=list)


# ── Overlay ─────────────────────────────────────────────────


class EmojiButton(GiftModel):
    emoji: str = "🎉"
    size: int = 48
    animation: Literal["pulse", "bounce", "rotate", "scale"] = "pulse"


class TextButton(GiftModel):
    text: str = "Start Experience"
    frame_style: Literal[
        "solid", "dashed", "double", "shadow", "gradient", "heart", "star",
        "circle", "oval", "rectangle", "square",
    ] = "solid"
    background_color: Optional[str] = None
    text_color: Optional[str] = None
    border_color: Optional[str] = None


class OverlayConfig(GiftModel):
    type: OverlayType = "heart"
    main_text: Optional[str] = None
    sub_text: Optional[str] = None
    button_text: Optional[str] = None
    button_style: Literal["default", "emoji-animated", "text-framed"] = "default"
    emoji_button: Optional[EmojiButton] = None
    text_button: Optional[TextButton] = None


class Blessing(GiftModel):
    sender: str = ""
    text: str = ""


# ── Template ────────────────────────────────────────────────


class ScreenConfig(GiftModel):
    """Template-declared shape of one screen."""
    screen_id: str
    type: ScreenType = "text"
    placeholders: List[str] = Field(default_factory=list)
    required: List[str] = Field(default_factory=list)
    order: int = 0
    supports_music: bool = False
    gallery_image_count: Optional[int] = None
    blessing_count: Optional[int] = None


class DesignVariable(GiftModel):
    key: str
    name: str = ""
    type: Literal["color", "font"] = "color"
    default_value: str = ""


class DesignConfig(GiftModel):
    background: Optional[str] = None
    default_placeholders: Dict[str, str] = Field(default_factory=dict)


class TemplateMeta(GiftModel):
    """Declarative description of a template's screens and design."""
    template_id: str
    template_name: str
    overlay_type: OverlayType = "heart"
    screens: List[ScreenConfig] = Field(default_factory=list)
    global_placeholders: List[str] = Field(default_factory=list)
    design_variables: List[DesignVariable] = Field(default_factory=list)
    design_config: Optional[DesignConfig] = None


class CustomTemplate(GiftModel):
    is_custom: bool = False
    theme: Optional[ThemeConfig] = None
    custom_screens: List[Dict[str, Any]] = Field(default_factory=list)


# ── Project ─────────────────────────────────────────────────


class ScreenData(GiftModel):
    """The user's actual content for one screen."""
    title: Optional[str] = None
    text: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    media_mode: Literal["classic", "video"] = "classic"
    video_id: Optional[str] = None
    audio_id: Optional[str] = None
    extend_music_to_next: bool = False
    gallery_layout: Optional[GalleryLayout] = None
    style: Optional[ScreenStyle] = None

    @property
    def is_video_mode(self) -> bool:
        return self.media_mode == "video"

    @property
    def layout(self) -> GalleryLayout:
        return self.gallery_layout or DEFAULT_GALLERY_LAYOUT


class ProjectData(GiftModel):
    recipient_name: Optional[str] = None
    sender_name: Optional[str] = None
    event_title: Optional[str] = None
    main_greeting: Optional[str] = None

    screens: Dict[str, ScreenData] = Field(default_factory=dict)
    images: List[ImageData] = Field(default_factory=list)
    videos: List[VideoData] = Field(default_factory=list)
    audio: AudioData = Field(default_factory=AudioData)
    overlay: OverlayConfig = Field(default_factory=OverlayConfig)
    blessings: List[Blessing] = Field(default_factory=list)
    custom_template: Optional[CustomTemplate] = None
    global_style: Optional[ScreenStyle] = None

    dynamic_screens: Optional[List[ScreenConfig]] = None
    dynamic_screens_template_id: Optional[str] = None

    def screen(self, screen_id: str) -> ScreenData:
        """Content for a screen; an empty record when the user never touched it."""
        return self.screens.get(screen_id) or ScreenData()

    def image(self, image_id: str) -> Optional[ImageData]:
        return next((img for img in self.images if img.id == image_id), None)

    def video(self, video_id: str) -> Optional[VideoData]:
        return next((v for v in self.videos if v.id == video_id), None)

    def audio_file(self, audio_id: str) -> Optional[AudioFile]:
        if self.audio.global_track and self.audio.global_track.id == audio_id:
            return self.audio.global_track
        for track in list(self.audio.screens.values()) + list(self.audio.library):
            if track.id == audio_id:
                return track
        return None

    def global_field(self, name: str) -> Optional[str]:
        """Look up a global text placeholder by its camelCase token name."""
        field_name = GLOBAL_TEXT_FIELDS.get(name)
        return getattr(self, field_name) if field_name else None


GLOBAL_TEXT_FIELDS: Dict[str, str] = {
    "recipientName": "recipient_name",
    "senderName": "sender_name",
    "eventTitle": "event_title",
    "mainGreeting": "main_greeting",
}


class Project(GiftModel):
    id: str
    name: str = "My Gift"
    template_id: str
    schema_version: int = 1
    language: str = "en"
    data: ProjectData = Field(default_factory=ProjectData)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


# ── Immutable updates ───────────────────────────────────────


def update_project(project: Project, **changes: Any) -> Project:
    """Return a copy of the project with top-level fields replaced."""
    return project.model_copy(update=changes)


def update_project_data(project: Project, **changes: Any) -> Project:
    """Return a copy of the project with ProjectData fields replaced."""
    return project.model_copy(update={"data": project.data.model_copy(update=changes)})


def update_screen(project: Project, screen_id: str, **changes: Any) -> Project:
    """Return a copy of the project with one screen's content updated."""
    screen = project.data.screen(screen_id).model_copy(update=changes)
    screens = {**project.data.screens, screen_id: screen}
    return update_project_data(project, screens=screens)


# ── Render pass ─────────────────────────────────────────────


class BuildOptions(BaseModel):
    """Per-call render options."""
    mode: RenderMode = "preview"
    start_screen_id: Optional[str] = None
    single_screen_only: bool = False
    hide_empty_screens: bool = False


class ValidationIssue(BaseModel):
    field: str
    message: str
    section: Optional[str] = None


class ValidationResult(BaseModel):
    is_valid: bool = True
    errors: List[ValidationIssue] = Field(default_factory=list)
    warnings: List[ValidationIssue] = Field(default_factory=list)

    def to_report(self) -> Dict[str, Any]:
        """Caller-facing `{isValid, errors, warnings}` report."""
        return {
            "isValid": self.is_valid,
            "errors": [i.model_dump(exclude_none=True) for i in self.errors],
            "warnings": [i.model_dump(exclude_none=True) for i in self.warnings],
        }


class MediaUrls(BaseModel):
    """Resolved media references for exactly one render pass."""
    images: Dict[str, str] = Field(default_factory=dict)
    audio: Dict[str, str] = Field(default_factory=dict)
    videos: Dict[str, str] = Field(default_factory=dict)
    warnings: List[ValidationIssue] = Field(default_factory=list)
