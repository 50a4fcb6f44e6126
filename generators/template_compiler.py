"""
generators/template_compiler.py — Turns (project, template, screens, media) into
the gift body: markup with every `{{token}}` substituted, plus the CSS,
gallery seeds and animation settings the RuntimeEmitter needs.

Steps, in order:
  1. structure   canonical screen markup, or static template markup restructured
  2. flat tokens global/overlay/screen text, theme values
  3. galleries   one of five layouts per gallery token
  4. video       <video> blocks (budget re-checked on export)
  5. blessings   repeated blessing cards
  6. theming     CSS variables and per-screen overrides
Any token left over is replaced with "" so no token reaches the document.
"""

from __future__ import annotations

import html as html_lib
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from bs4 import BeautifulSoup, Doctype, Tag
from markupsafe import Markup

from config import Settings, get_settings
from engine.errors import VideoBudgetError
from engine.pipeline_logger import PipelineLogger
from engine.video_budget import VideoUsage, video_budget_issues
from generators.gallery_builder import GalleryBuilder, GallerySeed
from generators.markup import TOKEN_RE, escape_user_text, render_snippet
from generators.style_builder import StyleBuilder, css_value
from generators.themes import GiftTheme, resolve_theme
from models import (
    GLOBAL_TEXT_FIELDS,
    BuildOptions,
    MediaUrls,
    Project,
    ScreenConfig,
    TemplateMeta,
)
from snippets.screen_snippets import (
    BLESSINGS,
    BUTTON_DEFAULT,
    BUTTON_EMOJI,
    BUTTON_TEXT_FRAMED,
    MUTE_BUTTON,
    NAV_BAR,
    OVERLAY,
    SCREEN_INNER,
    SCREEN_SECTION,
    VIDEO,
    VIDEO_PLACEHOLDER,
    ZOOM_VIEWER,
)

DEFAULT_OVERLAY_BUTTON_TEXT = "Tap to Begin"


@dataclass
class CompiledBody:
    """Everything the RuntimeEmitter needs besides the project itself."""

    html: str
    theme: GiftTheme
    root_css: str = ""
    generated_css: str = ""
    template_styles: List[str] = field(default_factory=list)
    gallery_seeds: List[GallerySeed] = field(default_factory=list)
    animations: Dict[str, Dict[str, object]] = field(default_factory=dict)
    video_usages: List[VideoUsage] = field(default_factory=list)
    unresolved_tokens: List[str] = field(default_factory=list)


class TemplateCompiler:
    """Compiles project content into gift markup and styles."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        gallery_builder: Optional[GalleryBuilder] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._log = PipelineLogger("TemplateCompiler")
        self._galleries = gallery_builder or GalleryBuilder()

    # ── Public API ──────────────────────────────────────────

    def compile(
        self,
        project: Project,
        template: TemplateMeta,
        screens: List[ScreenConfig],
        media: MediaUrls,
        markup: Optional[str] = None,
        options: Optional[BuildOptions] = None,
    ) -> CompiledBody:
        options = options or BuildOptions()
        data = project.data
        theme_config = data.custom_template.theme if data.custom_template else None
        theme = resolve_theme(theme_config, self._settings.default_theme)
        design = template.design_config
        style = StyleBuilder(theme, design.background if design else None)

        self._log.action(
            "Compile Body",
            f"template={template.template_id} screens={len(screens)} theme={theme.name} "
            f"markup={'static' if markup else 'canonical'}",
        )

        usages = self._video_usages(project, screens)
        if options.mode == "export":
            issues = video_budget_issues(usages, self._settings)
            if issues:
                raise VideoBudgetError("; ".join(i.message for i in issues))

        # 1. structure
        body, template_styles = self._structure(project, template, screens, markup)

        # 2–5. token table
        table, seeds = self._token_table(project, template, screens, media, theme)

        unresolved: List[str] = []
        body = self._substitute(body, table, unresolved)
        css_tokens = self._theme_tokens(project, template, theme)
        template_styles = [self._substitute(s, css_tokens, unresolved) for s in template_styles]

        if unresolved:
            self._log.warning(f"Removed {len(unresolved)} unresolved token(s): {sorted(set(unresolved))}")

        # 6. theming
        generated = []
        animations: Dict[str, Dict[str, object]] = {}
        for screen in screens:
            screen_style = data.screen(screen.screen_id).style
            colors = style.resolve_colors(screen_style, data.global_style)
            generated.append(style.screen_css(screen.screen_id, colors))
            anim = style.animation_settings(style.effective_animation(screen_style, data.global_style))
            if anim:
                animations[screen.screen_id] = anim
        generated.append(style.overlay_button_css(data.overlay, data.global_style))

        return CompiledBody(
            html=body,
            theme=theme,
            root_css=style.root_css(template.design_variables),
            generated_css="\n".join(g for g in generated if g),
            template_styles=template_styles,
            gallery_seeds=seeds,
            animations=animations,
            video_usages=usages,
            unresolved_tokens=unresolved,
        )

    # ── Step 1: structure ───────────────────────────────────

    def _screen_section(self, project: Project, screen: ScreenConfig, index: int) -> Markup:
        return render_snippet(
            SCREEN_SECTION,
            screen_id=screen.screen_id,
            screen_type=screen.type,
            index=index,
            inner=self._screen_inner(project, screen),
        )

    @staticmethod
    def _screen_inner(project: Project, screen: ScreenConfig) -> Markup:
        data = project.data.screen(screen.screen_id)
        sid = screen.screen_id
        if data.is_video_mode:
            media = "video"
        elif screen.type == "gallery" or data.images:
            media = "gallery"
        else:
            media = None
        return render_snippet(
            SCREEN_INNER,
            screen_type=screen.type,
            media=media,
            blessings=screen.type == "blessings",
            tokens={
                "recipient": "{{recipientName}}",
                "title": f"{{{{{sid}_title}}}}",
                "text": f"{{{{{sid}_text}}}}",
                "gallery": f"{{{{{sid}_gallery}}}}",
                "video": f"{{{{{sid}_video}}}}",
                "blessings": f"{{{{{sid}_blessings}}}}",
            },
        )

    def _overlay(self, project: Project, template: TemplateMeta) -> Markup:
        overlay = project.data.overlay
        return render_snippet(
            OVERLAY,
            overlay_type=overlay.type or template.overlay_type,
            tokens={"main": "{{overlayMainText}}", "sub": "{{overlaySubText}}"},
            button=self._overlay_button(project),
        )

    @staticmethod
    def _overlay_button(project: Project) -> Markup:
        overlay = project.data.overlay

        def default() -> Markup:
            return render_snippet(BUTTON_DEFAULT, token="{{overlayButtonText}}")

        def emoji() -> Markup:
            cfg = overlay.emoji_button
            if cfg is None:
                return default()
            return render_snippet(
                BUTTON_EMOJI,
                size=cfg.size,
                animation=cfg.animation,
                emoji=escape_user_text(cfg.emoji),
                label=escape_user_text(overlay.button_text or DEFAULT_OVERLAY_BUTTON_TEXT),
            )

        def text_framed() -> Markup:
            cfg = overlay.text_button
            text = (cfg.text if cfg else None) or overlay.button_text or "Start Experience"
            frame = cfg.frame_style if cfg else "solid"
            return render_snippet(BUTTON_TEXT_FRAMED, frame=frame, text=escape_user_text(text))

        dispatch: Dict[str, Callable[[], Markup]] = {
            "default": default,
            "emoji-animated": emoji,
            "text-framed": text_framed,
        }
        return dispatch.get(overlay.button_style, default)()

    def _chrome(self, project: Project, root: Optional[Tag] = None) -> Markup:
        """Nav bar, mute button (only with audio) and zoom viewer.

        Pieces the static markup under `root` already provides are skipped.
        """
        audio = project.data.audio
        parts = [("[data-gift-nav]", NAV_BAR), ("[data-gift-zoom]", ZOOM_VIEWER)]
        if audio.global_track or audio.screens:
            parts.insert(1, ("[data-gift-mute]", MUTE_BUTTON))
        return Markup("\n").join(
            render_snippet(snippet)
            for selector, snippet in parts
            if root is None or root.select_one(selector) is None
        )

    def _structure(
        self,
        project: Project,
        template: TemplateMeta,
        screens: List[ScreenConfig],
        markup: Optional[str],
    ) -> Tuple[str, List[str]]:
        sections = {s.screen_id: self._screen_section(project, s, i) for i, s in enumerate(screens)}

        if not markup:
            body = "\n".join([
                str(self._overlay(project, template)),
                '<main class="gift-screens" data-gift-screens>',
                *(str(sections[s.screen_id]) for s in screens),
                "</main>",
                str(self._chrome(project)),
            ])
            return body, []

        soup = BeautifulSoup(markup, "html.parser")
        styles: List[str] = []
        for tag in soup.find_all("style"):
            styles.append(tag.get_text())
            tag.decompose()
        for tag in soup.find_all("head"):
            tag.decompose()
        for tag in soup.find_all(["script", "title", "meta", "link"]):
            tag.decompose()
        for node in [c for c in soup.contents if isinstance(c, Doctype)]:
            node.extract()

        root = soup.body or soup.find("html") or soup
        if root.name == "html":
            root.unwrap()
            root = soup

        index = {s.screen_id: i for i, s in enumerate(screens)}
        seen = set()
        for element in root.select("[data-screen-id]"):
            sid = element.get("data-screen-id")
            if sid not in index or sid in seen:
                element.decompose()
                continue
            seen.add(sid)
            canonical = BeautifulSoup(str(sections[sid]), "html.parser").find("section")
            element.clear()
            for child in list(canonical.contents):
                element.append(child)
            classes = element.get("class", [])
            for cls in canonical.get("class", []):
                if cls not in classes:
                    classes.append(cls)
            element["class"] = classes
            element["data-screen-index"] = str(index[sid])
            element["aria-hidden"] = "true"

        missing = [s for s in screens if s.screen_id not in seen]
        if missing:
            container = root.select_one("[data-gift-screens], .gift-screens")
            if container is None:
                container = soup.new_tag("main", attrs={"class": "gift-screens", "data-gift-screens": ""})
                root.append(container)
            for screen in missing:
                container.append(BeautifulSoup(str(sections[screen.screen_id]), "html.parser"))
            self._log.decision(
                "Appended screens missing from markup",
                ", ".join(s.screen_id for s in missing),
            )

        if root.select_one("[data-gift-overlay]") is None:
            root.insert(0, BeautifulSoup(str(self._overlay(project, template)), "html.parser"))
        chrome = self._chrome(project, root)
        if chrome:
            root.append(BeautifulSoup(str(chrome), "html.parser"))

        body = root.decode_contents() if root is not soup else str(soup)
        return body, styles

    # ── Steps 2–5: token values ─────────────────────────────

    def _token_table(
        self,
        project: Project,
        template: TemplateMeta,
        screens: List[ScreenConfig],
        media: MediaUrls,
        theme: GiftTheme,
    ) -> Tuple[Dict[str, Markup], List[GallerySeed]]:
        data = project.data
        defaults = template.design_config.default_placeholders if template.design_config else {}
        table: Dict[str, Markup] = {}

        # Flat global fields
        for token in GLOBAL_TEXT_FIELDS:
            table[token] = escape_user_text(data.global_field(token) or defaults.get(token))

        overlay = data.overlay
        table["overlayMainText"] = escape_user_text(overlay.main_text or defaults.get("overlayMainText"))
        table["overlaySubText"] = escape_user_text(overlay.sub_text or defaults.get("overlaySubText"))
        table["overlayButtonText"] = escape_user_text(overlay.button_text or DEFAULT_OVERLAY_BUTTON_TEXT)

        for key, value in self._theme_tokens(project, template, theme).items():
            table[key] = Markup(html_lib.escape(value, quote=True))

        blessings = render_snippet(BLESSINGS, blessings=[
            {"sender": escape_user_text(b.sender), "text": escape_user_text(b.text)}
            for b in data.blessings
        ])

        seeds: List[GallerySeed] = []
        for screen in screens:
            sid = screen.screen_id
            screen_data = data.screen(sid)
            table[f"{sid}_title"] = escape_user_text(screen_data.title)
            table[f"{sid}_text"] = escape_user_text(screen_data.text)

            image_ids = [] if screen_data.is_video_mode else list(screen_data.images)
            if screen_data.is_video_mode:
                gallery_html = Markup("")
            else:
                block = self._galleries.build(sid, image_ids, project, media, screen_data.layout)
                gallery_html = block.html
                if block.seed is not None:
                    seeds.append(block.seed)
            table[f"{sid}_gallery"] = gallery_html
            table[f"{sid}_images"] = gallery_html

            for n, image_id in enumerate(image_ids, start=1):
                table[f"{sid}_image{n}"] = Markup(html_lib.escape(media.images.get(image_id, ""), quote=True))

            table[f"{sid}_video"] = self._video_html(project, sid, media)
            table[f"{sid}_blessings"] = blessings

            track = data.audio.screens.get(sid)
            table[f"music_{sid}"] = Markup(
                html_lib.escape(media.audio.get(track.id, ""), quote=True) if track else ""
            )

        return table, seeds

    @staticmethod
    def _video_html(project: Project, screen_id: str, media: MediaUrls) -> Markup:
        screen_data = project.data.screen(screen_id)
        if not screen_data.is_video_mode or not screen_data.video_id:
            return Markup("")
        url = media.videos.get(screen_data.video_id, "")
        if not url:
            return render_snippet(VIDEO_PLACEHOLDER)
        video = project.data.video(screen_data.video_id)
        poster = video.poster_data_url if video else None
        return render_snippet(VIDEO, url=url, poster=poster)

    @staticmethod
    def _theme_tokens(project: Project, template: TemplateMeta, theme: GiftTheme) -> Dict[str, str]:
        """`theme_<key>` values: theme < template design defaults < explicit custom colours."""
        values: Dict[str, str] = {f"theme_{k}": v for k, v in theme.tokens().items()}
        for variable in template.design_variables:
            values[f"theme_{variable.key}"] = variable.default_value

        custom = project.data.custom_template
        if custom and custom.theme and custom.theme.type == "custom":
            explicit = custom.theme.colors.model_dump(by_alias=True, exclude_none=True)
            for key, value in explicit.items():
                values[f"theme_{key}"] = value
        return {k: css_value(v) for k, v in values.items()}

    @staticmethod
    def _video_usages(project: Project, screens: List[ScreenConfig]) -> List[VideoUsage]:
        usages: List[VideoUsage] = []
        for screen in screens:
            screen_data = project.data.screen(screen.screen_id)
            if screen_data.is_video_mode and screen_data.video_id:
                video = project.data.video(screen_data.video_id)
                if video is not None:
                    usages.append((screen.screen_id, video))
        return usages

    # ── Substitution ────────────────────────────────────────

    @staticmethod
    def _substitute(text: str, table: Mapping[str, str], unresolved: List[str]) -> str:
        def replace(match) -> str:
            name = match.group(1)
            if name in table:
                return str(table[name])
            unresolved.append(name)
            return ""

        return TOKEN_RE.sub(replace, text)

