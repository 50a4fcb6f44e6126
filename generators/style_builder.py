"""
generators/style_builder.py — Generated CSS: theme variables, per-screen colour
overrides, the overlay start button and background-animation settings.

Colour precedence for a screen: screen style > global style >
template design default > theme.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Union

from generators.themes import GiftTheme
from models import (
    CanvasAnimation,
    DesignVariable,
    OverlayConfig,
    ParticleAnimation,
    ScreenStyle,
)

INTENSITY_COUNT: Dict[str, int] = {"low": 10, "medium": 25, "high": 50}
SPEED_SECONDS: Dict[str, float] = {"slow": 8.0, "normal": 5.0, "fast": 3.0}
SPEED_MULTIPLIER: Dict[str, float] = {"slow": 0.5, "normal": 1.0, "fast": 2.0}

DEFAULT_ANIMATION_COLOR: Dict[str, str] = {
    "hearts": "#ff6b9d",
    "sparkles": "#ffd700",
    "bubbles": "#87ceeb",
    "stars": "#ffd700",
    "confetti": "#ff6b9d",
    "fireworks": "#ff6b9d",
}
CANVAS_PALETTE = ["#4ecdc4", "#ffe66d", "#ff6b9d", "#95e1d3", "#f38181"]
FIREWORK_BURST_SIZE = 30
FIREWORK_DECAY = 0.02
FIREWORK_SPAWN_CHANCE = 0.02
CONFETTI_GRAVITY = 0.1

HEART_CLIP = (
    "polygon(50% 0%, 61% 0%, 68% 11%, 79% 11%, 86% 0%, 100% 0%, 100% 50%, "
    "50% 100%, 0% 50%, 0% 0%, 14% 0%, 21% 11%, 32% 11%)"
)
STAR_CLIP = "polygon(50% 0%, 61% 35%, 98% 35%, 68% 57%, 79% 91%, 50% 70%, 21% 91%, 32% 57%, 2% 35%, 39% 35%)"

_UNSAFE_CSS = re.compile(r"[;{}<>\\]")


def css_value(value: str) -> str:
    """Strip characters that could end a declaration or the style block."""
    return _UNSAFE_CSS.sub("", value).strip()


def _css_string(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def _block(selector: str, declarations: Dict[str, Optional[str]]) -> str:
    body = "; ".join(f"{k}: {css_value(v)}" for k, v in declarations.items() if v)
    return f"{selector} {{ {body}; }}" if body else ""


@dataclass(frozen=True)
class ResolvedColors:
    background: str
    text: str
    title: str
    button_background: str
    button_text: str
    button_border: str


AnimationStyle = Union[ParticleAnimation, CanvasAnimation]


class StyleBuilder:
    """Turns the theme and the project's style records into CSS."""

    def __init__(self, theme: GiftTheme, template_background: Optional[str] = None):
        self.theme = theme
        self.template_background = template_background

    # ── Theme ──────────────────────────────────────────────

    def root_css(self, design_variables: Optional[List[DesignVariable]] = None) -> str:
        declarations: Dict[str, Optional[str]] = dict(self.theme.css_variables())
        for variable in design_variables or []:
            declarations[f"--theme-{variable.key}"] = variable.default_value
        return _block(":root", declarations)

    # ── Screen colours ─────────────────────────────────────

    def resolve_colors(
        self,
        screen_style: Optional[ScreenStyle],
        global_style: Optional[ScreenStyle],
    ) -> ResolvedColors:
        def pick(*candidates: Optional[str]) -> str:
            return next(c for c in candidates if c)

        screen = screen_style.colors if screen_style and screen_style.colors else None
        glob = global_style.colors if global_style and global_style.colors else None
        s_btn = screen.button if screen and screen.button else None
        g_btn = glob.button if glob and glob.button else None
        theme = self.theme

        return ResolvedColors(
            background=pick(
                screen.background if screen else None,
                glob.background if glob else None,
                self.template_background,
                theme.background,
            ),
            text=pick(screen.text if screen else None, glob.text if glob else None, theme.text),
            title=pick(
                screen.title if screen else None,
                glob.title if glob else None,
                screen.text if screen else None,
                theme.text,
            ),
            button_background=pick(
                s_btn.background if s_btn else None,
                g_btn.background if g_btn else None,
                theme.button,
            ),
            button_text=pick(s_btn.text if s_btn else None, g_btn.text if g_btn else None, theme.button_text),
            button_border=pick(s_btn.border if s_btn else None, g_btn.border if g_btn else None, theme.border),
        )

    def screen_css(self, screen_id: str, colors: ResolvedColors) -> str:
        selector = f'.gift-screen[data-screen-id="{_css_string(screen_id)}"]'
        rules = [
            _block(selector, {
                "background": colors.background,
                "color": colors.text,
                "--gift-title": colors.title,
            }),
            _block(f"{selector} .gift-title", {"color": colors.title}),
            _block(f"{selector} .gift-text", {"color": colors.text}),
        ]
        return "\n".join(r for r in rules if r)

    # ── Overlay button ─────────────────────────────────────

    def overlay_button_css(self, overlay: OverlayConfig, global_style: Optional[ScreenStyle]) -> str:
        if overlay.button_style != "text-framed":
            return ""

        button = overlay.text_button
        g_btn = global_style.colors.button if global_style and global_style.colors else None
        bg = (button.background_color if button else None) or (g_btn.background if g_btn else None) or "white"
        fg = (button.text_color if button else None) or (g_btn.text if g_btn else None) or "#333"
        border = (button.border_color if button else None) or (g_btn.border if g_btn else None) or "#333"
        frame = button.frame_style if button else "solid"

        frames: Dict[str, Dict[str, Optional[str]]] = {
            "solid": {"border": f"2px solid {border}", "background": bg, "border-radius": "8px"},
            "dashed": {"border": f"2px dashed {border}", "background": bg, "border-radius": "8px"},
            "double": {"border": f"4px double {border}", "background": bg, "border-radius": "8px"},
            "shadow": {
                "border": f"1px solid {border}",
                "box-shadow": "0 0 10px rgba(0,0,0,0.3)",
                "background": bg,
                "border-radius": "8px",
            },
            "gradient": {
                "border": "none",
                "background": "linear-gradient(45deg, #ff6b6b, #4ecdc4)",
                "border-radius": "8px",
            },
            "heart": {
                "border": "none",
                "background": "#ff6b6b" if bg == "white" else bg,
                "clip-path": HEART_CLIP,
                "width": "120px",
                "height": "100px",
                "font-size": "14px",
                "border-radius": "0",
            },
            "star": {
                "border": "none",
                "background": "#ffd93d" if bg == "white" else bg,
                "clip-path": STAR_CLIP,
                "width": "100px",
                "height": "100px",
                "font-size": "12px",
                "border-radius": "0",
            },
            "circle": {
                "border-radius": "50%", "border": f"3px solid {border}", "background": bg,
                "width": "120px", "height": "120px",
            },
            "oval": {
                "border-radius": "50%", "border": f"3px solid {border}", "background": bg,
                "width": "160px", "height": "100px",
            },
            "rectangle": {"border-radius": "4px", "border": f"3px solid {border}", "background": bg},
            "square": {
                "border-radius": "4px", "border": f"3px solid {border}", "background": bg,
                "width": "120px", "height": "120px",
            },
        }
        declarations = {"color": fg, **frames.get(frame, frames["solid"])}
        return _block(f".gift-text-btn.frame-{frame}", declarations)

    # ── Background animation ───────────────────────────────

    @staticmethod
    def effective_animation(
        screen_style: Optional[ScreenStyle],
        global_style: Optional[ScreenStyle],
    ) -> Optional[AnimationStyle]:
        """Screen animation wins when present and not `none`; else the global one."""
        if screen_style is not None and screen_style.active_animation is not None:
            return screen_style.active_animation
        if global_style is not None:
            return global_style.active_animation
        return None

    @staticmethod
    def animation_settings(animation: Optional[AnimationStyle]) -> Optional[Dict[str, object]]:
        """Runtime parameters for one screen's animation engine."""
        if animation is None:
            return None

        color = animation.color or DEFAULT_ANIMATION_COLOR[animation.type]
        settings: Dict[str, object] = {
            "type": animation.type,
            "count": INTENSITY_COUNT[animation.intensity],
            "color": css_value(color),
        }
        if isinstance(animation, CanvasAnimation):
            multiplier = SPEED_MULTIPLIER[animation.speed]
            settings.update({
                "kind": "canvas",
                "multiplier": multiplier,
                "palette": [css_value(color)] + CANVAS_PALETTE,
                "gravity": CONFETTI_GRAVITY * multiplier,
                "burstSize": FIREWORK_BURST_SIZE,
                "decay": FIREWORK_DECAY,
                "spawnChance": FIREWORK_SPAWN_CHANCE,
            })
        else:
            settings.update({"kind": "particle", "duration": SPEED_SECONDS[animation.speed]})
        return settings
