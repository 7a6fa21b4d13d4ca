#!/usr/bin/env python3
"""
Glyph Crowd application entry point and UI/renderer coordination.

What this module does
- Starts two event loops: a Pygame rendering thread (viewport) and the Dear PyGui UI
  (running on the main thread).
- Maintains a shared CrowdController that owns the bodies and crowd settings;
  all access is guarded by a re-entrant lock for thread-safety.
- Provides the glyph shape provider (a Pygame font), the viewport drawing of
  glyphs, deformations and click ripples, and a Dear PyGui control window for
  entering text, clearing the crowd and tuning repulsion and character size.

Threading model
- PygameRenderer runs in a background thread and performs: input handling (for the viewport),
  stepping the crowd once per frame, and drawing. It locks the controller around short
  critical sections to read/update shared state.
- The UI class runs in the main thread via Dear PyGui. Its callbacks invoke CrowdController
  methods, which are lock-protected.

Units and conventions
- World coordinates are pixels of the 1000x600 arena; the viewport shows the arena 1:1.
- Colors are RGB tuples in 0..255.

Running
1) Install dependencies: `pip install pygame dearpygui`
2) Run this module: `python glyph_crowd.py [--preset canonical.json] [--font path.ttf]`

Windows/OS notes
- Two windows will open: the viewport (Pygame) and the controls (Dear PyGui). Closing either
  will shut down the application cleanly.
"""

import argparse
import logging
import random
import threading
from typing import Optional

# GUI and Rendering libs
import pygame
import dearpygui.dearpygui as dpg

from crowd.config import CrowdSettings
from crowd.constants import (
    BACKGROUND_COLOR,
    DEFAULT_CHARACTER_SIZE,
    DEFAULT_REPULSION_FORCE,
    RIPPLE_COLOR,
    VIEW_HEIGHT,
    VIEW_WIDTH,
)
from crowd.controller import CrowdController, CrowdError
from crowd.glyphs import GlyphShapeCache
from crowd.presets_loader import list_presets, load_preset
from crowd.render import TrackingRenderSink, outline_width

logger = logging.getLogger("glyph_crowd")

FONT_CANDIDATES = "notosansjp,notosanscjkjp,hiraginosans,yugothic,msgothic,takaogothic,ipagothic"

# ============================================================
# Glyph shapes
# ============================================================

class PygameGlyphProvider:
    """
    Shape provider backed by a Pygame font.

    Shapes are white-on-transparent glyph surfaces; the viewport tints and
    scales them. Font objects are created per size on demand and released on
    close().
    """
    def __init__(self, font_path: Optional[str] = None):
        self.font_path = font_path
        self._fonts = {}

    def open(self) -> None:
        if not pygame.font.get_init():
            pygame.font.init()

    def close(self) -> None:
        self._fonts.clear()

    def _font(self, size: int):
        font = self._fonts.get(size)
        if font is None:
            if self.font_path:
                font = pygame.font.Font(self.font_path, size)
            else:
                font = pygame.font.SysFont(FONT_CANDIDATES, size)
            self._fonts[size] = font
        return font

    def shape(self, glyph: str, size: int):
        return self._font(size).render(glyph, True, (255, 255, 255))


def collision_chime(glyph: str) -> None:
    logger.debug("Bump: %s", glyph)

# ============================================================
# Pygame Renderer Thread
# ============================================================

class PygameRenderer(threading.Thread):
    """
    Pygame loop: steps the crowd, draws glyphs with their deformation and
    contact outline, and draws click ripples. Left click pushes glyphs away.
    """
    def __init__(self, crowd: CrowdController, sink: TrackingRenderSink, shapes: GlyphShapeCache):
        super().__init__(daemon=True)
        self.crowd = crowd
        self.sink = sink
        self.shapes = shapes
        self.surface = None
        self.clock = None
        self.running = True

    def run(self):
        pygame.init()
        pygame.display.set_caption("Glyph Crowd - Viewport")
        self.surface = pygame.display.set_mode((VIEW_WIDTH, VIEW_HEIGHT))
        self.clock = pygame.time.Clock()

        while self.running and self.crowd.running:
            self.handle_events()

            with self.crowd.lock:
                playing = self.crowd.playing
            if playing:
                self.crowd.step()

            self.draw()

            # Limit FPS
            self.clock.tick(60)

        pygame.quit()

    def handle_events(self):
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.crowd.running = False
                self.running = False

            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                self.intervene(event.pos)

    def intervene(self, pos):
        point = (float(pos[0]), float(pos[1]))
        now = self.crowd.now()
        touched = self.crowd.intervene(point)
        with self.crowd.lock:
            self.sink.add_ripple(point)
            for body, effect in touched:
                self.sink.morph(body, effect * 0.8, now)

    def draw(self):
        surf = self.surface
        surf.fill(BACKGROUND_COLOR)

        # Copy bodies snapshot for consistency during draw
        with self.crowd.lock:
            now = self.crowd.now()
            drawables = []
            for body in self.crowd.bodies:
                if not body.ready:
                    continue
                shape = self.shapes.acquire(body.glyph, body.size)
                if shape is not None:
                    drawables.append((body, shape, self.sink.deformations.scale(body.body_id, now)))
            self.sink.advance_ripples()
            ripples = list(self.sink.ripples)

        for body, shape, (sx, sy) in drawables:
            w, h = shape.get_size()
            w_scaled = max(1, int(w * sx))
            h_scaled = max(1, int(h * sy))
            glyph_img = pygame.transform.smoothscale(shape, (w_scaled, h_scaled))
            glyph_img.fill(body.color + (255,), special_flags=pygame.BLEND_RGBA_MULT)
            rect = glyph_img.get_rect(center=(int(body.position[0]), int(body.position[1])))
            surf.blit(glyph_img, rect)

            width = outline_width(body.collision_started_at, now)
            if width > 2:
                pygame.draw.circle(surf, body.color, rect.center, int(body.radius), min(width, int(body.radius)))

        for ripple in ripples:
            alpha = max(0, min(255, int(ripple.opacity * 255)))
            ring = pygame.Surface((VIEW_WIDTH, VIEW_HEIGHT), pygame.SRCALPHA)
            pygame.draw.circle(ring, RIPPLE_COLOR + (alpha,),
                               (int(ripple.center[0]), int(ripple.center[1])), int(ripple.radius), 3)
            surf.blit(ring, (0, 0))

        pygame.display.flip()

# ============================================================
# Dear PyGui UI
# ============================================================

class UI:
    """
    Dear PyGui interface: text entry, start/add/clear, sliders and presets.
    """
    def __init__(self, crowd: CrowdController):
        self.crowd = crowd
        self.text_input_id = None
        self.status_msg_id = None
        self._preset_map = {}

        self._build_ui()
        self._schedule_sync()

    def _schedule_sync(self):
        """Reschedule the periodic sync callback using frame callbacks (approx ~10Hz)."""
        current = dpg.get_frame_count()
        dpg.set_frame_callback(current + 6, self._sync_ui_with_crowd)

    # -----------------------
    # UI Construction
    # -----------------------

    def _build_ui(self):
        dpg.create_context()
        dpg.create_viewport(title='Glyph Crowd - Controls', width=460, height=300)

        with dpg.window(label="Controls", width=440, height=280, pos=(10, 10), tag="main_window"):
            self.text_input_id = dpg.add_input_text(label="Hiragana", width=300, on_enter=True,
                                                    callback=lambda s, a, u: self._on_start())
            with dpg.group(horizontal=True):
                dpg.add_button(label="Start", callback=self._on_start)
                dpg.add_button(label="Add", callback=self._on_add)
                dpg.add_button(label="Clear", callback=self._on_clear)
                dpg.add_button(label="Play/Pause", callback=self._toggle_play)

            dpg.add_separator()

            dpg.add_slider_int(label="Repulsion", min_value=10, max_value=300,
                               default_value=DEFAULT_REPULSION_FORCE, width=260, tag="repulsion_slider",
                               callback=lambda s, a, u: self.crowd.set_repulsion_force(int(a)))
            dpg.add_slider_int(label="Character size", min_value=20, max_value=120,
                               default_value=DEFAULT_CHARACTER_SIZE, width=260, tag="size_slider",
                               callback=lambda s, a, u: self.crowd.set_character_size(int(a)))

            with dpg.group(horizontal=True):
                dpg.add_text("Preset:")
                self._preset_map = {display: fn for fn, display in list_presets()}
                items = list(self._preset_map.keys())
                dpg.add_combo(items, default_value=(items[0] if items else ""), width=200, tag="preset_combo")
                dpg.add_button(label="Load", callback=lambda: self.load_preset(dpg.get_value("preset_combo")))

            dpg.add_separator()
            self.status_msg_id = dpg.add_text("")

        dpg.setup_dearpygui()
        dpg.show_viewport()
        dpg.set_primary_window("main_window", True)

    # -----------------------
    # UI Callbacks
    # -----------------------

    def _set_status(self, msg: str, color=(180, 220, 180)):
        dpg.set_value(self.status_msg_id, msg)
        dpg.configure_item(self.status_msg_id, color=color)

    def _set_error(self, msg: str):
        dpg.set_value(self.status_msg_id, msg)
        dpg.configure_item(self.status_msg_id, color=(255, 120, 120))

    def _take_text(self) -> str:
        text = dpg.get_value(self.text_input_id) or ""
        dpg.set_value(self.text_input_id, "")
        return text

    def _on_start(self):
        try:
            count = self.crowd.start_text(self._take_text())
        except CrowdError as exc:
            self._set_error(str(exc))
            return
        self._set_status(f"Gathering {count} glyph(s).")

    def _on_add(self):
        try:
            count = self.crowd.add_text(self._take_text())
        except CrowdError as exc:
            self._set_error(str(exc))
            return
        self._set_status(f"Added {count} glyph(s).")

    def _on_clear(self):
        count = self.crowd.clear()
        dpg.set_value(self.text_input_id, "")
        self._set_status(f"Scattered {count} glyph(s).")

    def _toggle_play(self):
        with self.crowd.lock:
            self.crowd.set_playing(not self.crowd.playing)
            state = "Playing" if self.crowd.playing else "Paused"
        self._set_status(f"Simulation {state}.")

    def load_preset(self, name: str):
        fn = self._preset_map.get(name)
        if fn is None:
            self._set_error(f"Unknown preset '{name}'.")
            return
        settings, display_name = load_preset(fn, base=self.crowd.settings)
        self.crowd.apply_settings(settings)
        dpg.set_value("repulsion_slider", settings.repulsion_force)
        dpg.set_value("size_slider", settings.character_size)
        self._set_status(f"Loaded preset: {display_name}")

    def _sync_ui_with_crowd(self):
        """Periodic UI update: surface controller messages in the status line."""
        with self.crowd.lock:
            msg = self.crowd.last_message
            self.crowd.last_message = None
        if msg:
            self._set_error(msg)
        self._schedule_sync()

# ============================================================
# Application Entry
# ============================================================

def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Hiragana glyphs that jostle, gather and scatter.")
    parser.add_argument("--preset", help="preset file name under presets/ (e.g. classic.json)")
    parser.add_argument("--font", help="path to a TTF/OTF font with Japanese glyphs")
    parser.add_argument("--seed", type=int, help="seed the random source for a reproducible run")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    settings = CrowdSettings()
    if args.preset:
        settings, _ = load_preset(args.preset, base=settings)

    sink = TrackingRenderSink()
    shapes = GlyphShapeCache(PygameGlyphProvider(args.font))
    shapes.open()
    crowd = CrowdController(settings,
                            rng=random.Random(args.seed),
                            shapes=shapes,
                            on_collision=collision_chime,
                            render_sink=sink)

    renderer = PygameRenderer(crowd, sink, shapes)

    # Start Pygame renderer thread
    renderer.start()

    ui = UI(crowd)

    # Keyboard shortcut in UI window: Escape scatters the crowd
    with dpg.handler_registry():
        def key_down(sender, app_data):
            if app_data == dpg.mvKey_Escape:
                ui._on_clear()
        dpg.add_key_down_handler(callback=key_down)

    # Run Dear PyGui event loop
    try:
        dpg.start_dearpygui()
    finally:
        # Stop simulation and renderer
        crowd.running = False
        renderer.running = False
        renderer.join(timeout=2.0)
        shapes.close()
        dpg.destroy_context()


if __name__ == "__main__":
    main()
