#!/usr/bin/env python3
"""
Shared crowd state between the viewport thread and the control window.

CrowdController owns the Simulation, the SpawnPlanner and the (optional)
glyph shape cache. Every public method takes the re-entrant lock, so the
viewport can step frames while the controls start, add or clear glyphs.
"""
import logging
import random
import threading
from typing import Callable, List, Optional, Tuple

from .config import CrowdSettings
from .constants import GATHER_DURATION_MS, MAX_GLYPHS, QUICK_CLEAR_MS
from .data_models import Body
from .forces import CollisionHook
from .glyphs import GlyphShapeCache, filter_glyphs
from .render import RenderSink
from .scheduler import DeferredTask
from .simulation import FrameReport, PausableClock, Simulation
from .spawn import ADD_PROFILE, START_PROFILE, SpawnPlan, SpawnPlanner, SpawnProfile
from .vector_utils import Vec2

logger = logging.getLogger(__name__)


class CrowdError(Exception):
    """User-facing problem with a crowd request (bad input, cap reached)."""


class CrowdController:
    def __init__(self, settings: Optional[CrowdSettings] = None,
                 rng: Optional[random.Random] = None,
                 clock: Optional[Callable[[], float]] = None,
                 shapes: Optional[GlyphShapeCache] = None,
                 on_collision: Optional[CollisionHook] = None,
                 render_sink: Optional[RenderSink] = None,
                 max_glyphs: int = MAX_GLYPHS):
        self.lock = threading.RLock()
        self.running = True  # app running
        self.playing = True  # simulation running
        self.rng = rng if rng is not None else random.Random()
        self.clock = PausableClock(clock)
        self.simulation = Simulation(settings, self.rng, self.clock, on_collision, render_sink)
        self.planner = SpawnPlanner(self.simulation.settings, self.rng)
        self.shapes = shapes
        self.max_glyphs = max_glyphs
        self.last_message: Optional[str] = None
        self._pending_restart: Optional[DeferredTask] = None

    @property
    def settings(self) -> CrowdSettings:
        return self.simulation.settings

    @property
    def bodies(self) -> List[Body]:
        return self.simulation.bodies

    def now(self) -> float:
        return self.simulation.clock()

    def set_playing(self, playing: bool) -> None:
        """Pause or resume; crowd time does not advance while paused."""
        with self.lock:
            self.playing = playing
            if playing:
                self.clock.resume()
            else:
                self.clock.pause()

    # -----------------------
    # Configuration
    # -----------------------

    def set_repulsion_force(self, value: int):
        with self.lock:
            self.simulation.set_repulsion_force(value)

    def set_character_size(self, size: int):
        with self.lock:
            self.simulation.set_character_size(size)
            if self.shapes is not None:
                for body in self.bodies:
                    body.ready = self.shapes.acquire(body.glyph, body.size) is not None

    def apply_settings(self, settings: CrowdSettings):
        with self.lock:
            self.simulation.apply_settings(settings)
            self.planner.settings = settings

    # -----------------------
    # Spawning
    # -----------------------

    def spawn(self, glyph: str, start: Vec2, target: Vec2, now: Optional[float] = None,
              profile: SpawnProfile = START_PROFILE) -> Body:
        """Create a gathering body at start heading for target; returns its handle."""
        with self.lock:
            now = self.now() if now is None else now
            plan = SpawnPlan(glyph, start, target,
                             self.planner.initial_velocity(start, target, profile.boosted),
                             1.2 + self.rng.random() * 1.0)
            body = self._materialize(plan, now)
            self._schedule_settle(body, now)
            return body

    def _materialize(self, plan: SpawnPlan, now: float) -> Body:
        body = self.planner.build_body(plan, now)
        if self.shapes is not None:
            body.ready = self.shapes.acquire(body.glyph, body.size) is not None
        return self.simulation.add(body)

    def _schedule_settle(self, body: Body, now: float) -> None:
        def settle():
            if body.is_gathering:
                body.settle()
        self.simulation.tasks.schedule(now + GATHER_DURATION_MS, settle, body_id=body.body_id, label="settle")

    def _spawn_batch(self, glyphs: List[str], profile: SpawnProfile, now: float) -> List[Body]:
        plans = self.planner.plan_batch(glyphs, self.bodies, profile)
        spawned = [self._materialize(plan, now) for plan in plans]
        for body in spawned:
            self._schedule_settle(body, now)
        return spawned

    def start_text(self, text: str, now: Optional[float] = None) -> int:
        """
        Replace the crowd with the hiragana in text.

        Existing bodies are scattered first and removed 800 ms later, at
        which point the new glyphs are spawned. Returns how many glyphs will
        appear.
        """
        glyphs = filter_glyphs(text, self.max_glyphs)
        if not glyphs:
            logger.warning("Rejected start input without hiragana: %r", text)
            raise CrowdError("Please enter hiragana.")
        with self.lock:
            now = self.now() if now is None else now
            if self._pending_restart is not None:
                self.simulation.tasks.cancel(self._pending_restart)
                self._pending_restart = None
            if not self.bodies:
                self._spawn_batch(glyphs, START_PROFILE, now)
                logger.info("Started crowd with %d glyph(s)", len(glyphs))
                return len(glyphs)

            self.simulation.explode_all(now, outward=False)
            due = now + QUICK_CLEAR_MS

            def restart():
                self._pending_restart = None
                self.simulation.clear()
                self._spawn_batch(glyphs, START_PROFILE, due)
                logger.info("Restarted crowd with %d glyph(s)", len(glyphs))

            self._pending_restart = self.simulation.tasks.schedule(due, restart, label="restart")
            return len(glyphs)

    def add_text(self, text: str, now: Optional[float] = None) -> int:
        """Add the hiragana in text to the crowd, up to the glyph cap."""
        glyphs = filter_glyphs(text, None)
        if not glyphs:
            logger.warning("Rejected add input without hiragana: %r", text)
            raise CrowdError("Please enter hiragana.")
        with self.lock:
            now = self.now() if now is None else now
            allowed = self.max_glyphs - len(self.bodies)
            if allowed <= 0:
                raise CrowdError(f"Up to {self.max_glyphs} glyphs can be shown. Clear first.")
            if len(glyphs) > allowed:
                glyphs = glyphs[:allowed]
                self.last_message = f"Up to {self.max_glyphs} glyphs can be shown; added only {allowed}."
                logger.warning("Glyph cap reached, adding %d of the requested glyphs", allowed)
            self._spawn_batch(glyphs, ADD_PROFILE, now)
            logger.info("Added %d glyph(s), crowd size %d", len(glyphs), len(self.bodies))
            return len(glyphs)

    def clear(self, now: Optional[float] = None) -> int:
        """Blow every glyph outward; they leave the crowd once off-screen."""
        with self.lock:
            if not self.bodies:
                return 0
            return self.simulation.explode_all(now, outward=True)

    def remove(self, body: Body) -> bool:
        with self.lock:
            return self.simulation.remove(body)

    # -----------------------
    # Frame and interaction
    # -----------------------

    def step(self, now: Optional[float] = None) -> List[FrameReport]:
        with self.lock:
            return self.simulation.step(now)

    def intervene(self, point: Vec2) -> List[Tuple[Body, float]]:
        """Apply the click impulse at point (world coordinates)."""
        with self.lock:
            return self.simulation.apply_impulse(point)

    def snapshot(self) -> List[Body]:
        with self.lock:
            return list(self.bodies)
