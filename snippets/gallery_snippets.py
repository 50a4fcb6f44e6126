"""
snippets/gallery_snippets.py — Jinja2 markup for the five gallery layouts.

Context: gallery_id, images (list of {url, alt}), index.
Thumbnails carry no src of their own; the runtime copies it from the matching
slide so each image is embedded only once.
"""

_PICTURE_MACRO = """
{%- macro picture(img, zoom=False) -%}
{%- if img.url -%}
<img src="{{ img.url }}" alt="{{ img.alt }}" loading="lazy"{% if zoom %} data-gift-action="zoom"{% endif %}>
{%- else -%}
<div class="gift-image-placeholder">Image unavailable</div>
{%- endif -%}
{%- endmacro -%}
{%- macro thumbs(images, gallery_id, index) -%}
<div class="gallery-thumbs">
{%- for img in images %}
<button type="button" class="{% if loop.index0 == index %}is-current{% endif %}" data-gallery-thumb="{{ loop.index0 }}" data-gift-action="gallery-goto" data-gallery-target="{{ gallery_id }}" data-index="{{ loop.index0 }}" aria-label="Show image {{ loop.index }}"><img alt="" data-thumb-for="{{ loop.index0 }}"></button>
{%- endfor %}
</div>
{%- endmacro -%}
{%- macro arrows(images, gallery_id) -%}
{%- if images|length > 1 %}
<button type="button" class="gallery-arrow prev" data-gift-action="gallery-prev" data-gallery-target="{{ gallery_id }}" aria-label="Previous image">&#8249;</button>
<button type="button" class="gallery-arrow next" data-gift-action="gallery-next" data-gallery-target="{{ gallery_id }}" aria-label="Next image">&#8250;</button>
{%- endif %}
{%- endmacro -%}
{%- macro slides(images, index) -%}
{%- for img in images %}
<figure class="gallery-slide{% if loop.index0 == index %} is-current{% endif %}" data-gallery-slide="{{ loop.index0 }}">{{ picture(img) }}</figure>
{%- endfor %}
{%- endmacro -%}
"""

_CAROUSEL = """
<div class="gift-gallery gallery-carousel" id="{{ gallery_id }}" data-layout="carousel">
  <div class="gallery-stage">{{ slides(images, index) }}{{ arrows(images, gallery_id) }}</div>
  <div class="gallery-counter" data-gallery-counter>{{ index + 1 }} / {{ images|length }}</div>
  {{ thumbs(images, gallery_id, index) }}
</div>"""

_GRID = """
<div class="gift-gallery gallery-grid" id="{{ gallery_id }}" data-layout="gridWithZoom">
{%- for img in images %}
  <figure class="gallery-cell" data-gallery-slide="{{ loop.index0 }}">{{ picture(img, zoom=True) }}</figure>
{%- endfor %}
</div>"""

_SLIDESHOW = """
<div class="gift-gallery gallery-slideshow" id="{{ gallery_id }}" data-layout="fullscreenSlideshow">
  <div class="gallery-stage">{{ slides(images, index) }}{{ arrows(images, gallery_id) }}</div>
  <div class="gallery-counter" data-gallery-counter>{{ index + 1 }} / {{ images|length }}</div>
</div>"""

_HERO = """
<div class="gift-gallery gallery-hero" id="{{ gallery_id }}" data-layout="heroWithThumbnails">
  <div class="gallery-stage">{{ slides(images, index) }}</div>
  {{ thumbs(images, gallery_id, index) }}
</div>"""

_TIMELINE = """
<div class="gift-gallery gallery-timeline" id="{{ gallery_id }}" data-layout="timeline">
{%- for img in images %}
  <div class="timeline-item" data-gallery-slide="{{ loop.index0 }}">
    <span class="timeline-badge">{{ loop.index }}</span>
    {{ picture(img, zoom=True) }}
  </div>
{%- endfor %}
</div>"""

EMPTY_GALLERY = """<div class="gift-gallery gallery-empty" id="{{ gallery_id }}"><p class="gift-empty-note">No photos added yet</p></div>"""

GALLERY_SNIPPETS = {
    "carousel": _PICTURE_MACRO + _CAROUSEL,
    "gridWithZoom": _PICTURE_MACRO + _GRID,
    "fullscreenSlideshow": _PICTURE_MACRO + _SLIDESHOW,
    "heroWithThumbnails": _PICTURE_MACRO + _HERO,
    "timeline": _PICTURE_MACRO + _TIMELINE,
}
