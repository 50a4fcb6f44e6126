"""
snippets/runtime_js.py — The runtime engine shipped inside every gift document.

A fixed Jinja2 template; the only parameter is `config_json`, the serialized
RuntimeConfig. Navigation, audio and gallery moves are lookups into tables
the pipeline computed. All state lives in one closure; the only global is
window.GiftRuntime.
"""

RUNTIME_JS = """
(function () {
  'use strict';

  var config = {{ config_json }};
  var screenEls = [];
  var current = -1;
  var overlayEl = null;

  function $(selector, scope) { return (scope || document).querySelector(selector); }
  function $all(selector, scope) { return Array.prototype.slice.call((scope || document).querySelectorAll(selector)); }

  /* ── Audio manager: one voice at a time ─────────────── */
  var audio = (function () {
    var currentAudio = null;
    var currentTrack = null;
    var muted = false;

    function stopAll() {
      if (currentAudio) {
        currentAudio.pause();
        currentAudio.currentTime = 0;
      }
      currentAudio = null;
      currentTrack = null;
    }

    function play(trackId) {
      stopAll();
      if (muted || !trackId) return;
      var url = config.audio.tracks[trackId];
      if (!url) return;
      try {
        var el = new Audio(url);
        el.loop = trackId === config.audio.globalTrack;
        var pending = el.play();
        if (pending && pending.catch) pending.catch(function () {});
        currentAudio = el;
        currentTrack = trackId;
      } catch (err) {
        currentAudio = null;
        currentTrack = null;
      }
    }

    /* arrival is 'fresh', 'fromPrev' or 'fromNext'; config.audio.enter holds the action */
    function enterScreen(index, arrival) {
      if (muted) return;
      var row = config.audio.enter[index];
      var cue = config.audio.plan[index];
      if (!row || !cue) return;
      var action = row[arrival || 'fresh'];
      if (action === 'play') play(cue.track);
      else if (action === 'stop') stopAll();
    }

    function playGlobal() {
      var track = config.audio.globalTrack;
      if (!track || (track === currentTrack && currentAudio)) return;
      play(track);
    }

    function playForScreen(screenId) {
      var index = config.screens.indexOf(screenId);
      if (index < 0) return;
      stopAll();
      enterScreen(index, 'fresh');
    }

    function toggleMute() {
      muted = !muted;
      if (muted) {
        stopAll();
      } else if (current >= 0) {
        enterScreen(current, 'fresh');
      }
      var btn = $('[data-gift-mute]');
      if (btn) {
        btn.setAttribute('aria-pressed', muted ? 'true' : 'false');
        btn.innerHTML = muted ? '&#128263;' : '&#128266;';
      }
      return muted;
    }

    function isMuted() { return muted; }

    return {
      enterScreen: enterScreen,
      playGlobal: playGlobal,
      playForScreen: playForScreen,
      stopAll: stopAll,
      toggleMute: toggleMute,
      isMuted: isMuted
    };
  })();

  /* ── Gallery controllers ────────────────────────────── */
  var galleries = {};

  function createGallery(seed) {
    var el = document.getElementById(seed.id);
    var count = seed.images.length;
    var index = seed.index || 0;
    var timer = null;
    var hovering = false;

    if (el) {
      $all('[data-thumb-for]', el).forEach(function (thumb) {
        var source = $('[data-gallery-slide="' + thumb.getAttribute('data-thumb-for') + '"] img', el);
        if (source) thumb.src = source.src;
      });
    }

    function render() {
      if (!el) return;
      $all('[data-gallery-slide]', el).forEach(function (slide) {
        slide.classList.toggle('is-current', Number(slide.getAttribute('data-gallery-slide')) === index);
      });
      $all('[data-gallery-thumb]', el).forEach(function (thumb) {
        thumb.classList.toggle('is-current', Number(thumb.getAttribute('data-gallery-thumb')) === index);
      });
      var counter = $('[data-gallery-counter]', el);
      if (counter) counter.textContent = seed.labels[index];
    }

    function goTo(i) {
      if (seed.labels[i] === undefined) return index;
      index = i;
      render();
      return index;
    }

    function stopAutoplay() {
      if (timer) { clearInterval(timer); timer = null; }
    }

    function startAutoplay() {
      stopAutoplay();
      if (seed.layout !== 'fullscreenSlideshow' || count < 2) return;
      timer = setInterval(function () {
        if (!hovering) goTo(seed.next[index]);
      }, config.slideshowInterval);
    }

    if (el && seed.layout === 'fullscreenSlideshow') {
      el.addEventListener('mouseenter', function () { hovering = true; el.classList.add('is-paused'); });
      el.addEventListener('mouseleave', function () { hovering = false; el.classList.remove('is-paused'); });
    }

    return {
      screen: seed.screen,
      next: function () { return goTo(seed.next[index]); },
      prev: function () { return goTo(seed.prev[index]); },
      goTo: goTo,
      index: function () { return index; },
      activate: startAutoplay,
      deactivate: stopAutoplay
    };
  }

  /* ── Zoom viewer ────────────────────────────────────── */
  var zoom = {
    open: function (src) {
      var viewer = $('[data-gift-zoom]');
      if (!viewer || !src) return;
      $('img', viewer).src = src;
      viewer.classList.add('is-open');
    },
    close: function () {
      var viewer = $('[data-gift-zoom]');
      if (viewer) viewer.classList.remove('is-open');
    }
  };

  /* ── Background animations ──────────────────────────── */
  var activeAnimation = null;

  var PARTICLE_SYMBOLS = { hearts: '\\u2764\\ufe0f', sparkles: '\\u2728', stars: '\\u2b50' };
  var PARTICLE_CLASS = { hearts: 'float', bubbles: 'bubble', sparkles: 'sparkle', stars: 'twinkle' };

  function runParticles(layer, cfg) {
    for (var i = 0; i < cfg.count; i++) {
      var p = document.createElement('span');
      p.className = 'gift-particle ' + PARTICLE_CLASS[cfg.type];
      p.style.left = (Math.random() * 100) + '%';
      p.style.color = cfg.color;
      p.style.animationDuration = (cfg.duration * (0.7 + Math.random() * 0.6)) + 's';
      p.style.animationDelay = (Math.random() * cfg.duration) + 's';
      if (cfg.type === 'bubbles') {
        var size = 10 + Math.random() * 30;
        p.style.width = size + 'px';
        p.style.height = size + 'px';
      } else {
        p.textContent = PARTICLE_SYMBOLS[cfg.type];
        if (cfg.type !== 'hearts') p.style.top = (Math.random() * 100) + '%';
      }
      layer.appendChild(p);
    }
    return function () {};
  }

  function runCanvas(layer, cfg) {
    var canvas = document.createElement('canvas');
    layer.appendChild(canvas);
    var ctx = canvas.getContext('2d');
    if (!ctx) return function () {};
    var frame = null;
    var particles = [];
    var mult = cfg.multiplier;

    function resize() {
      canvas.width = layer.clientWidth || window.innerWidth;
      canvas.height = layer.clientHeight || window.innerHeight;
    }
    resize();
    window.addEventListener('resize', resize);

    function confettiPiece(initial) {
      return {
        x: Math.random() * canvas.width,
        y: initial ? Math.random() * -canvas.height : -10,
        vx: (Math.random() - 0.5) * 2 * mult,
        vy: (Math.random() * 2 + 1) * mult,
        size: 4 + Math.random() * 6,
        rotation: Math.random() * 360,
        color: cfg.palette[Math.floor(Math.random() * cfg.palette.length)]
      };
    }

    function burst() {
      var cx = Math.random() * canvas.width;
      var cy = Math.random() * canvas.height * 0.5;
      for (var i = 0; i < cfg.burstSize; i++) {
        var angle = (Math.PI * 2 * i) / cfg.burstSize;
        var speed = (Math.random() * 3 + 1) * mult;
        particles.push({
          x: cx, y: cy,
          vx: Math.cos(angle) * speed,
          vy: Math.sin(angle) * speed,
          life: 1,
          color: cfg.palette[Math.floor(Math.random() * cfg.palette.length)]
        });
      }
    }

    if (cfg.type === 'confetti') {
      for (var i = 0; i < cfg.count; i++) particles.push(confettiPiece(true));
    }

    function tick() {
      if (cfg.type === 'confetti') {
        ctx.clearRect(0, 0, canvas.width, canvas.height);
        particles.forEach(function (p, idx) {
          p.vy += cfg.gravity;
          p.x += p.vx;
          p.y += p.vy;
          p.rotation += 5 * mult;
          if (p.y > canvas.height + 10) particles[idx] = confettiPiece(false);
          ctx.save();
          ctx.translate(p.x, p.y);
          ctx.rotate(p.rotation * Math.PI / 180);
          ctx.fillStyle = p.color;
          ctx.fillRect(-p.size / 2, -p.size / 2, p.size, p.size * 0.6);
          ctx.restore();
        });
      } else {
        ctx.fillStyle = 'rgba(0, 0, 0, 0.1)';
        ctx.fillRect(0, 0, canvas.width, canvas.height);
        if (Math.random() < cfg.spawnChance) burst();
        particles = particles.filter(function (p) {
          p.x += p.vx;
          p.y += p.vy;
          p.vy += 0.05 * mult;
          p.life -= cfg.decay;
          if (p.life <= 0) return false;
          ctx.globalAlpha = p.life;
          ctx.fillStyle = p.color;
          ctx.beginPath();
          ctx.arc(p.x, p.y, 2, 0, Math.PI * 2);
          ctx.fill();
          ctx.globalAlpha = 1;
          return true;
        });
      }
      frame = window.requestAnimationFrame(tick);
    }
    frame = window.requestAnimationFrame(tick);

    return function () {
      if (frame) window.cancelAnimationFrame(frame);
      window.removeEventListener('resize', resize);
    };
  }

  function stopAnimation() {
    if (!activeAnimation) return;
    activeAnimation.stop();
    if (activeAnimation.layer.parentNode) activeAnimation.layer.parentNode.removeChild(activeAnimation.layer);
    activeAnimation = null;
  }

  function startAnimation(index) {
    stopAnimation();
    var screenId = config.screens[index];
    var cfg = config.animations[screenId];
    var host = screenEls[index];
    if (!cfg || !host) return;
    var layer = document.createElement('div');
    layer.className = 'gift-anim-layer';
    host.insertBefore(layer, host.firstChild);
    var stop = cfg.kind === 'canvas' ? runCanvas(layer, cfg) : runParticles(layer, cfg);
    activeAnimation = { layer: layer, stop: stop };
  }

  /* ── Navigation ─────────────────────────────────────── */
  function updateNavButtons() {
    var row = config.nav[current];
    var prevBtn = $('[data-gift-prev]');
    var nextBtn = $('[data-gift-next]');
    if (prevBtn) prevBtn.disabled = !row || row.prev === null;
    if (nextBtn) nextBtn.disabled = !row || row.next === null;
  }

  function show(index, arrival) {
    if (index < 0 || index >= config.screens.length) return;
    current = index;
    screenEls.forEach(function (el, i) {
      if (!el) return;
      el.classList.toggle('is-active', i === index);
      el.setAttribute('aria-hidden', i === index ? 'false' : 'true');
    });
    updateNavButtons();
    Object.keys(galleries).forEach(function (id) {
      var g = galleries[id];
      if (g.screen === config.screens[index]) { g.activate(); } else { g.deactivate(); }
    });
    startAnimation(index);
    audio.enterScreen(index, arrival);
  }

  function start() {
    if (overlayEl) overlayEl.classList.add('is-hidden');
    if (current < 0) show(config.startIndex === null ? 0 : config.startIndex, 'fresh');
  }

  function next() {
    var row = config.nav[current];
    if (row && row.next !== null) show(row.next, 'fromPrev');
  }

  function previous() {
    var row = config.nav[current];
    if (row && row.prev !== null) show(row.prev, 'fromNext');
  }

  /* ── Event delegation ───────────────────────────────── */
  function onClick(event) {
    var target = event.target.closest ? event.target.closest('[data-gift-action]') : null;
    if (!target) return;
    var action = target.getAttribute('data-gift-action');
    var galleryId = target.getAttribute('data-gallery-target');
    switch (action) {
      case 'start': start(); break;
      case 'next': next(); break;
      case 'previous': previous(); break;
      case 'mute': audio.toggleMute(); break;
      case 'gallery-next': if (galleries[galleryId]) galleries[galleryId].next(); break;
      case 'gallery-prev': if (galleries[galleryId]) galleries[galleryId].prev(); break;
      case 'gallery-goto':
        if (galleries[galleryId]) galleries[galleryId].goTo(Number(target.getAttribute('data-index')));
        break;
      case 'zoom': zoom.open(target.getAttribute('src')); break;
      case 'zoom-close': if (event.target === target) zoom.close(); break;
    }
  }

  function onKey(event) {
    if (current < 0) return;
    if (event.key === 'ArrowRight') next();
    if (event.key === 'ArrowLeft') previous();
    if (event.key === 'Escape') zoom.close();
  }

  function init() {
    overlayEl = $('[data-gift-overlay]');
    screenEls = config.screens.map(function (id) {
      return $('.gift-screen[data-screen-id="' + id + '"]');
    });
    config.galleries.forEach(function (seed) { galleries[seed.id] = createGallery(seed); });
    document.addEventListener('click', onClick);
    document.addEventListener('keydown', onKey);
    updateNavButtons();
    if (config.startIndex !== null) start();
  }

  window.GiftRuntime = {
    start: start,
    next: next,
    previous: previous,
    current: function () { return current; },
    gallery: {
      next: function (id) { return galleries[id] ? galleries[id].next() : -1; },
      prev: function (id) { return galleries[id] ? galleries[id].prev() : -1; },
      goTo: function (id, i) { return galleries[id] ? galleries[id].goTo(i) : -1; }
    },
    zoom: zoom,
    audio: {
      playGlobal: audio.playGlobal,
      playForScreen: audio.playForScreen,
      stopAll: audio.stopAll,
      toggleMute: audio.toggleMute,
      isMuted: audio.isMuted
    }
  };

  if (document.readyState === 'loading') {
    document.addEventListener('DOMContentLoaded', init);
  } else {
    init();
  }
})();
"""
