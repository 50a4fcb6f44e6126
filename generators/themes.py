"""
generators/themes.py — Centralised gift theme definitions.
Each theme is exposed to templates as CSS custom properties (`--gift-*`) and
as `{{theme_<key>}}` tokens, so static markup and generated CSS stay in sync.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, Optional, Tuple

from models import ThemeConfig


def _rgb(h: str) -> Optional[Tuple[int, int, int]]:
    """Convert '#RRGGBB' (or '#RGB') to an int triple; None for non-hex values."""
    h = h.strip().lstrip("#")
    if len(h) == 3:
        h = "".join(c * 2 for c in h)
    if len(h) != 6:
        return None
    try:
        return int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16)
    except ValueError:
        return None


@dataclass(frozen=True)
class GiftTheme:
    """A complete colour / font palette for one visual style."""

    # Metadata
    name: str
    display_name: str

    # Core colours
    text: str
    text_secondary: str
    background: str
    background_secondary: str
    accent: str
    border: str
    button: str
    button_text: str
    overlay: str  # any CSS background value, usually a gradient

    # Fonts
    heading_font: str = "'Inter', sans-serif"
    body_font: str = "'Inter', sans-serif"

    is_custom: bool = False

    # ── Derived ────────────────────────────────────────────
    @property
    def accent_rgb(self) -> str:
        """'r, g, b' for rgba() shadows; falls back to a neutral grey."""
        rgb = _rgb(self.accent) or (128, 128, 128)
        return ", ".join(str(c) for c in rgb)

    @property
    def is_dark_background(self) -> bool:
        rgb = _rgb(self.background)
        if rgb is None:
            return False
        r, g, b = (c / 255 for c in rgb)
        return (0.299 * r + 0.587 * g + 0.114 * b) < 0.5

    def tokens(self) -> Dict[str, str]:
        """Values for `{{theme_<key>}}` tokens, keyed by camelCase name."""
        return {
            "text": self.text,
            "textSecondary": self.text_secondary,
            "background": self.background,
            "backgroundSecondary": self.background_secondary,
            "accent": self.accent,
            "border": self.border,
            "button": self.button,
            "buttonText": self.button_text,
            "overlay": self.overlay,
            "headingFont": self.heading_font,
            "bodyFont": self.body_font,
        }

    def css_variables(self) -> Dict[str, str]:
        return {
            "--gift-text": self.text,
            "--gift-text-secondary": self.text_secondary,
            "--gift-bg": self.background,
            "--gift-bg-secondary": self.background_secondary,
            "--gift-accent": self.accent,
            "--gift-accent-rgb": self.accent_rgb,
            "--gift-border": self.border,
            "--gift-button": self.button,
            "--gift-button-text": self.button_text,
            "--gift-overlay": self.overlay,
            "--gift-font-heading": self.heading_font,
            "--gift-font-body": self.body_font,
        }

    def to_dict(self) -> Dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict) -> GiftTheme:
        return cls(**d)

    @classmethod
    def from_config(cls, config: ThemeConfig, base: Optional[GiftTheme] = None) -> GiftTheme:
        """Overlay a user-defined ThemeConfig on a predefined base theme."""
        base = base or THEME_ROMANTIC
        colors = config.colors
        fonts = config.fonts
        return cls(
            name=config.name.lower().replace(" ", "_"),
            display_name=config.name,
            text=colors.text or base.text,
            text_secondary=colors.text_secondary or base.text_secondary,
            background=colors.background or base.background,
            background_secondary=colors.background_secondary or base.background_secondary,
            accent=colors.accent or base.accent,
            border=colors.border or base.border,
            button=colors.button or base.button,
            button_text=colors.button_text or base.button_text,
            overlay=colors.overlay or base.overlay,
            heading_font=(fonts.heading if fonts and fonts.heading else base.heading_font),
            body_font=(fonts.body if fonts and fonts.body else base.body_font),
            is_custom=config.type == "custom",
        )


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Built-in Themes
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

THEME_ROMANTIC = GiftTheme(
    name="romantic",
    display_name="Romantic",
    text="#333333",
    text_secondary="#666666",
    background="#ffffff",
    background_secondary="#fef2f2",
    accent="#ec4899",
    border="#fce7f3",
    button="#ec4899",
    button_text="#ffffff",
    overlay="linear-gradient(135deg, #ec4899 0%, #be185d 100%)",
    heading_font="'Playfair Display', serif",
    body_font="'Inter', sans-serif",
)

THEME_BIRTHDAY = GiftTheme(
    name="birthday",
    display_name="Birthday",
    text="#1f2937",
    text_secondary="#6b7280",
    background="#ffffff",
    background_secondary="#fef3c7",
    accent="#f59e0b",
    border="#fde68a",
    button="#f59e0b",
    button_text="#ffffff",
    overlay="linear-gradient(135deg, #fbbf24 0%, #f59e0b 100%)",
    heading_font="'Comic Sans MS', cursive",
)

THEME_MINIMAL = GiftTheme(
    name="minimal",
    display_name="Minimal",
    text="#111827",
    text_secondary="#6b7280",
    background="#ffffff",
    background_secondary="#f9fafb",
    accent="#3b82f6",
    border="#e5e7eb",
    button="#3b82f6",
    button_text="#ffffff",
    overlay="linear-gradient(135deg, #3b82f6 0%, #2563eb 100%)",
)

THEME_DARK = GiftTheme(
    name="dark",
    display_name="Dark",
    text="#f9fafb",
    text_secondary="#d1d5db",
    background="#111827",
    background_secondary="#1f2937",
    accent="#8b5cf6",
    border="#374151",
    button="#8b5cf6",
    button_text="#ffffff",
    overlay="linear-gradient(135deg, #1f2937 0%, #111827 100%)",
)

THEME_BRIGHT = GiftTheme(
    name="bright",
    display_name="Bright",
    text="#111827",
    text_secondary="#4b5563",
    background="#ffffff",
    background_secondary="#fef3c7",
    accent="#10b981",
    border="#d1fae5",
    button="#10b981",
    button_text="#ffffff",
    overlay="linear-gradient(135deg, #34d399 0%, #10b981 100%)",
)

# Registry
BUILTIN_THEMES: Dict[str, GiftTheme] = {
    t.name: t for t in [
        THEME_ROMANTIC,
        THEME_BIRTHDAY,
        THEME_MINIMAL,
        THEME_DARK,
        THEME_BRIGHT,
    ]
}


def get_theme(name: str) -> GiftTheme:
    """Return a theme by its short name (e.g. 'romantic'); display names work too."""
    key = name.strip().lower()
    if key not in BUILTIN_THEMES:
        raise ValueError(
            f"Unknown theme '{name}'. Available: {list(BUILTIN_THEMES.keys())}"
        )
    return BUILTIN_THEMES[key]


def resolve_theme(config: Optional[ThemeConfig], default_name: str = "romantic") -> GiftTheme:
    """Pick the theme a project renders with.

    Predefined configs map to the registry by name; custom configs are
    layered over the default theme so partial palettes still render.
    """
    default = get_theme(default_name)
    if config is None:
        return default
    if config.type == "predefined" and config.name.strip().lower() in BUILTIN_THEMES:
        return get_theme(config.name)
    return GiftTheme.from_config(config, base=default)
