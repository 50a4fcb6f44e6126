"""
generators/markup.py — Jinja2 environments and escaping shared by the generators.
"""

from __future__ import annotations

import html
import re
from functools import lru_cache
from typing import Any, Optional

from jinja2 import BaseLoader, Environment, Template
from markupsafe import Markup

# `{{token}}` placeholders in template markup
TOKEN_RE = re.compile(r"\{\{\s*([A-Za-z0-9_\-]+)\s*\}\}")

# Markup snippets: values are escaped unless already Markup
_SNIPPET_ENV = Environment(loader=BaseLoader(), autoescape=True)
# Document shell and runtime script: values are trusted, pre-built strings
_RAW_ENV = Environment(loader=BaseLoader(), autoescape=False, keep_trailing_newline=True)


@lru_cache(maxsize=64)
def _compiled(source: str, raw: bool) -> Template:
    env = _RAW_ENV if raw else _SNIPPET_ENV
    return env.from_string(source)


def render_snippet(source: str, **context: Any) -> Markup:
    """Render an autoescaped markup snippet."""
    return Markup(_compiled(source, False).render(**context).strip())


def render_raw(source: str, **context: Any) -> str:
    """Render a template whose inputs are already safe (shell, script)."""
    return _compiled(source, True).render(**context)


def escape_user_text(value: Optional[str]) -> Markup:
    """HTML-escape user text and entity-encode braces so it can never form a token."""
    if not value:
        return Markup("")
    escaped = html.escape(value, quote=True).replace("&#x27;", "&#039;")
    return Markup(escaped.replace("{", "&#123;").replace("}", "&#125;"))
