"""
snippets/layout_css.py — Static stylesheet shared by every gift document.
Colours come from the `--gift-*` custom properties emitted by the style builder.
"""

BASE_CSS = """
*, *::before, *::after { box-sizing: border-box; }
html, body { margin: 0; padding: 0; height: 100%; }
body {
  font-family: var(--gift-font-body);
  color: var(--gift-text);
  background: var(--gift-bg);
  overflow: hidden;
}
h1, h2, h3 { font-family: var(--gift-font-heading); }

/* Overlay */
.gift-overlay {
  position: fixed; inset: 0; z-index: 50;
  display: flex; flex-direction: column; align-items: center; justify-content: center;
  gap: 24px; padding: 32px; text-align: center;
  background: var(--gift-overlay); color: #ffffff;
  transition: opacity 0.6s ease;
}
.gift-overlay.is-hidden { opacity: 0; pointer-events: none; }
.gift-overlay-main { font-size: 2.25rem; margin: 0; }
.gift-overlay-sub { font-size: 1.125rem; margin: 0; max-width: 40rem; line-height: 1.6; }
.gift-start-btn {
  padding: 14px 32px; border: none; border-radius: 999px; cursor: pointer;
  font-size: 1.125rem; font-weight: 600;
  background: var(--gift-button); color: var(--gift-button-text);
  animation: pulse 2s infinite;
}
.gift-emoji-btn {
  background: none; border: none; cursor: pointer; border-radius: 50%;
  display: flex; align-items: center; justify-content: center;
}
.gift-text-btn {
  padding: 12px 24px; cursor: pointer; font-weight: bold;
  transition: all 0.3s ease;
  display: flex; align-items: center; justify-content: center;
}

/* Screens */
.gift-screens { position: relative; width: 100%; height: 100%; }
.gift-screen {
  position: absolute; inset: 0; display: none; overflow-y: auto;
  padding: 48px 24px 96px; text-align: center;
}
.gift-screen.is-active { display: block; }
.gift-screen-inner { position: relative; z-index: 2; max-width: 56rem; margin: 0 auto; }
.gift-title { font-size: 2rem; margin: 0 0 16px; color: var(--gift-title, var(--gift-text)); }
.gift-text { font-size: 1.125rem; line-height: 1.7; white-space: pre-line; margin: 0 0 24px; }
.gift-empty-note { color: var(--gift-text-secondary); font-style: italic; }

/* Navigation */
.gift-nav {
  position: fixed; left: 0; right: 0; bottom: 16px; z-index: 20;
  display: flex; justify-content: center; gap: 12px;
}
.gift-nav-btn, .gift-mute-btn {
  padding: 10px 20px; border-radius: 999px; cursor: pointer;
  border: 1px solid var(--gift-border);
  background: var(--gift-button); color: var(--gift-button-text);
}
.gift-nav-btn:disabled { opacity: 0.4; cursor: default; }
.gift-mute-btn { position: fixed; top: 16px; right: 16px; z-index: 30; padding: 8px 12px; }

/* Media */
.gift-image-placeholder {
  display: flex; align-items: center; justify-content: center;
  min-height: 160px; border-radius: 12px;
  background: var(--gift-bg-secondary); color: var(--gift-text-secondary);
}
.gift-video { width: 100%; max-height: 70vh; border-radius: 12px; background: #000; }

/* Gallery: carousel */
.gallery-carousel .gallery-stage { position: relative; }
.gallery-carousel [data-gallery-slide], .gallery-hero [data-gallery-slide],
.gallery-slideshow [data-gallery-slide] { display: none; }
.gallery-carousel [data-gallery-slide].is-current, .gallery-hero [data-gallery-slide].is-current,
.gallery-slideshow [data-gallery-slide].is-current { display: block; }
.gallery-stage img { width: 100%; max-height: 60vh; object-fit: contain; border-radius: 12px; }
.gallery-arrow {
  position: absolute; top: 50%; transform: translateY(-50%);
  border: none; border-radius: 50%; width: 40px; height: 40px; cursor: pointer;
  background: rgba(0, 0, 0, 0.45); color: #ffffff; font-size: 1.25rem;
}
.gallery-arrow.prev { left: 8px; }
.gallery-arrow.next { right: 8px; }
.gallery-counter { margin: 8px 0; color: var(--gift-text-secondary); font-size: 0.875rem; }
.gallery-thumbs { display: flex; gap: 8px; justify-content: center; overflow-x: auto; padding: 4px; }
.gallery-thumbs button { padding: 0; border: 2px solid transparent; border-radius: 8px; background: none; cursor: pointer; }
.gallery-thumbs button.is-current { border-color: var(--gift-accent); }
.gallery-thumbs img { width: 64px; height: 64px; object-fit: cover; border-radius: 6px; display: block; }

/* Gallery: grid with zoom */
.gallery-grid { display: grid; grid-template-columns: repeat(auto-fill, minmax(180px, 1fr)); gap: 12px; }
.gallery-grid img { width: 100%; height: 180px; object-fit: cover; border-radius: 10px; cursor: zoom-in; }

/* Gallery: fullscreen slideshow */
.gallery-slideshow { position: relative; }
.gallery-slideshow img { width: 100%; height: 70vh; object-fit: cover; border-radius: 12px; }
.gallery-slideshow.is-paused .gallery-counter::after { content: " (paused)"; }

/* Gallery: hero with thumbnails */
.gallery-hero .gallery-thumbs { justify-content: flex-start; }

/* Gallery: timeline */
.gallery-timeline { position: relative; padding-left: 48px; text-align: left; }
.gallery-timeline::before {
  content: ""; position: absolute; left: 19px; top: 0; bottom: 0;
  width: 2px; background: var(--gift-accent);
}
.timeline-item { position: relative; margin-bottom: 24px; }
.timeline-badge {
  position: absolute; left: -48px; top: 0; width: 40px; height: 40px; border-radius: 50%;
  display: flex; align-items: center; justify-content: center;
  background: var(--gift-accent); color: #ffffff; font-weight: 600;
}
.timeline-item img { width: 100%; max-height: 320px; object-fit: cover; border-radius: 10px; cursor: zoom-in; }

/* Zoom viewer */
.gift-zoom {
  position: fixed; inset: 0; z-index: 60; display: none;
  align-items: center; justify-content: center; background: rgba(0, 0, 0, 0.85);
}
.gift-zoom.is-open { display: flex; }
.gift-zoom img { max-width: 92vw; max-height: 92vh; border-radius: 8px; }

/* Blessings */
.blessings-list { display: grid; gap: 16px; text-align: left; }
.blessing-card {
  padding: 16px 20px; border-radius: 12px;
  background: var(--gift-bg-secondary); border: 1px solid var(--gift-border);
}
.blessing-sender { font-weight: 600; color: var(--gift-accent); margin-bottom: 6px; }
.blessing-text { line-height: 1.6; white-space: pre-line; }

/* Background animations */
.gift-anim-layer { position: absolute; inset: 0; z-index: 1; overflow: hidden; pointer-events: none; }
.gift-anim-layer canvas { width: 100%; height: 100%; display: block; }
.gift-particle { position: absolute; bottom: -40px; font-size: 24px; will-change: transform; }
.gift-particle.float { animation-name: floatUp; animation-iteration-count: infinite; animation-timing-function: linear; }
.gift-particle.bubble {
  border-radius: 50%; border: 2px solid currentColor; background: transparent;
  animation-name: bubbleUp; animation-iteration-count: infinite; animation-timing-function: ease-in;
}
.gift-particle.twinkle { bottom: auto; animation-name: twinkle; animation-iteration-count: infinite; }
.gift-particle.sparkle { bottom: auto; animation-name: sparkle; animation-iteration-count: infinite; }

@keyframes floatUp {
  0% { transform: translateY(0) translateX(0) scale(1); opacity: 0.7; }
  50% { transform: translateY(-50vh) translateX(8px) scale(1.2); opacity: 1; }
  100% { transform: translateY(-110vh) translateX(-8px) scale(0.8); opacity: 0; }
}
@keyframes bubbleUp {
  0% { transform: translateY(0) translateX(0) scale(0.5); opacity: 0.5; }
  50% { transform: translateY(-50vh) translateX(12px) scale(1); opacity: 0.8; }
  100% { transform: translateY(-110vh) translateX(-12px) scale(1.2); opacity: 0; }
}
@keyframes sparkle {
  0%, 100% { opacity: 0; transform: scale(0) rotate(0deg); }
  50% { opacity: 1; transform: scale(1) rotate(180deg); }
}
@keyframes twinkle {
  0%, 100% { opacity: 0.3; transform: scale(0.8); }
  50% { opacity: 1; transform: scale(1.2); }
}
@keyframes pulse {
  0%, 100% { transform: scale(1); opacity: 1; }
  50% { transform: scale(1.05); opacity: 0.9; }
}
@keyframes emoji-pulse {
  0%, 100% { transform: scale(1); opacity: 1; }
  50% { transform: scale(1.1); opacity: 0.8; }
}
@keyframes emoji-bounce {
  0%, 100% { transform: translateY(0); }
  50% { transform: translateY(-10px); }
}
@keyframes emoji-rotate {
  from { transform: rotate(0deg); }
  to { transform: rotate(360deg); }
}
@keyframes emoji-scale {
  0%, 100% { transform: scale(1); }
  50% { transform: scale(1.2); }
}
.emoji-pulse { animation: emoji-pulse 2s infinite; }
.emoji-bounce { animation: emoji-bounce 1s infinite; }
.emoji-rotate { animation: emoji-rotate 2s infinite linear; }
.emoji-scale { animation: emoji-scale 1.5s infinite; }

[dir="rtl"] .gallery-timeline { padding-left: 0; padding-right: 48px; text-align: right; }
[dir="rtl"] .gallery-timeline::before { left: auto; right: 19px; }
[dir="rtl"] .timeline-badge { left: auto; right: -48px; }
"""
