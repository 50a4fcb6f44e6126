"""
snippets/screen_snippets.py — Jinja2 markup for the overlay, screens, media blocks,
navigation chrome and the document shell.

Screen markup carries `{{token}}` strings (passed in as plain values) that the
TemplateCompiler substitutes afterwards, exactly as it does for static
template markup.
"""

OVERLAY = """
<div class="gift-overlay gift-overlay-{{ overlay_type }}" data-gift-overlay>
  <h1 class="gift-overlay-main">{{ tokens.main }}</h1>
  <p class="gift-overlay-sub">{{ tokens.sub }}</p>
  {{ button }}
</div>"""

BUTTON_DEFAULT = """<button type="button" class="gift-start-btn" data-gift-action="start">{{ token }}</button>"""

BUTTON_EMOJI = """<button type="button" class="gift-emoji-btn" data-gift-action="start" style="font-size: {{ size }}px; width: {{ size * 2 }}px; height: {{ size * 2 }}px;" aria-label="{{ label }}"><span class="emoji-{{ animation }}">{{ emoji }}</span></button>"""

BUTTON_TEXT_FRAMED = """<button type="button" class="gift-text-btn frame-{{ frame }}" data-gift-action="start">{{ text }}</button>"""

SCREEN_SECTION = """
<section class="gift-screen gift-screen-{{ screen_type }}" data-screen-id="{{ screen_id }}" data-screen-index="{{ index }}" aria-hidden="true">{{ inner }}</section>"""

SCREEN_INNER = """
<div class="gift-screen-inner">
{%- if screen_type == 'intro' %}
  <p class="gift-recipient">{{ tokens.recipient }}</p>
{%- endif %}
  <h2 class="gift-title">{{ tokens.title }}</h2>
  <p class="gift-text">{{ tokens.text }}</p>
{%- if media == 'video' %}
  <div class="gift-media">{{ tokens.video }}</div>
{%- elif media == 'gallery' %}
  <div class="gift-media">{{ tokens.gallery }}</div>
{%- endif %}
{%- if blessings %}
  <div class="gift-blessings">{{ tokens.blessings }}</div>
{%- endif %}
</div>"""

VIDEO = """<video class="gift-video" src="{{ url }}"{% if poster %} poster="{{ poster }}"{% endif %} controls playsinline preload="metadata"></video>"""

VIDEO_PLACEHOLDER = """<div class="gift-image-placeholder gift-video-placeholder">Video unavailable</div>"""

BLESSINGS = """
<div class="blessings-list">
{%- for blessing in blessings %}
  <div class="blessing-card">
    <div class="blessing-sender">{{ blessing.sender }}</div>
    <div class="blessing-text">{{ blessing.text }}</div>
  </div>
{%- endfor %}
</div>"""

NAV_BAR = """
<nav class="gift-nav" data-gift-nav>
  <button type="button" class="gift-nav-btn" data-gift-action="previous" data-gift-prev disabled>&larr; Back</button>
  <button type="button" class="gift-nav-btn" data-gift-action="next" data-gift-next>Next &rarr;</button>
</nav>"""

MUTE_BUTTON = """
<button type="button" class="gift-mute-btn" data-gift-action="mute" data-gift-mute aria-pressed="false" aria-label="Mute">&#128266;</button>"""

ZOOM_VIEWER = """
<div class="gift-zoom" data-gift-zoom data-gift-action="zoom-close"><img alt=""></div>"""

SCREEN_NOT_FOUND = """
<div class="gift-screens">
  <section class="gift-screen is-active" data-screen-id="">
    <div class="gift-screen-inner">
      <h2 class="gift-title">Screen not found</h2>
      <p class="gift-text">The screen "{{ screen_id }}" is not part of this gift.</p>
    </div>
  </section>
</div>"""

DOCUMENT_SHELL = """<!DOCTYPE html>
<html lang="{{ lang }}"{% if rtl %} dir="rtl"{% endif %}>
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>{{ title }}</title>
<!-- gift:styles:start -->
<style>
{{ css }}
</style>
<!-- gift:styles:end -->
</head>
<body class="gift-mode-{{ mode }}">
<!-- gift:content:start -->
{{ body }}
<!-- gift:content:end -->
<!-- gift:runtime:start -->
{%- if script %}
<script>
{{ script }}
</script>
{%- endif %}
<!-- gift:runtime:end -->
</body>
</html>
"""
