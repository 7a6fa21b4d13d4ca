#!/usr/bin/env python3
"""
Frame driver for Glyph Crowd

Responsibilities
- Own the active body collection and the deferred-task records checked
  against the simulation clock.
- Advance every ready body by one frame: expire Exploding after 3 s, apply
  the force model for its mode, integrate, apply the boundary step and, unless
  it is exploding, the positional overlap cleanup.
- Report each body's collision state to the render sink and drop exploding
  bodies once they are fully off-screen.
- Accept the one-shot inputs from outside the frame loop: bulk dispersal
  (explode_all), the click impulse (apply_impulse) and configuration changes.

Threading
- Single writer. Nothing here locks; CrowdController serialises access when
  the viewport and the controls run on separate threads. The collection is
  only changed between body updates, never while one is in progress.
"""

import logging
import math
import random
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from .boundary import apply_boundary
from .collisions import OverlapSettings, resolve_overlaps
from .config import CrowdSettings, PhysicsTuning
from .constants import (
    EXPLODE_DURATION_MS,
    INTERVENTION_BOOST,
    INTERVENTION_FALLOFF,
    INTERVENTION_STRENGTH,
)
from .data_models import Body
from .forces import CollisionHook, ContactReport, ForceModel, integrate
from .render import NullRenderSink, RenderSink
from .scheduler import DeferredTasks
from .vector_utils import Vec2, random_unit

logger = logging.getLogger(__name__)


def monotonic_ms() -> float:
    return time.perf_counter() * 1000.0


class PausableClock:
    """Millisecond clock that stands still while paused."""

    def __init__(self, source: Optional[Callable[[], float]] = None):
        self.source = source if source is not None else monotonic_ms
        self._offset = 0.0
        self._paused_at: Optional[float] = None

    @property
    def paused(self) -> bool:
        return self._paused_at is not None

    def pause(self) -> None:
        if self._paused_at is None:
            self._paused_at = self.source()

    def resume(self) -> None:
        if self._paused_at is not None:
            self._offset += self.source() - self._paused_at
            self._paused_at = None

    def __call__(self) -> float:
        if self._paused_at is not None:
            return self._paused_at - self._offset
        return self.source() - self._offset


@dataclass
class FrameReport:
    body: Body
    contact: ContactReport


class Simulation:
    """
    The crowd's per-frame physics and state machine.

    Bodies are updated sequentially in collection order; each one sees its
    neighbours' most recent state, so results depend on order only up to
    floating-point accumulation.
    """

    def __init__(self, settings: Optional[CrowdSettings] = None,
                 rng: Optional[random.Random] = None,
                 clock: Optional[Callable[[], float]] = None,
                 on_collision: Optional[CollisionHook] = None,
                 render_sink: Optional[RenderSink] = None):
        """
        Initialize the simulation.

        Args:
            settings: World size, focal point, slider values and tuning.
            rng: Random source shared by the force model and dispersal;
                pass a seeded Random for deterministic replay.
            clock: Millisecond clock used when step() is called without a time.
            on_collision: Side effect fired with a glyph on (rate limited) overlap.
            render_sink: Receives spawn/update/remove notifications.
        """
        self.settings = settings if settings is not None else CrowdSettings()
        self.rng = rng if rng is not None else random.Random()
        self.clock = clock if clock is not None else monotonic_ms
        self.render_sink = render_sink if render_sink is not None else NullRenderSink()
        self.forces = ForceModel(self.settings, self.rng, on_collision)
        self.tasks = DeferredTasks()
        self.bodies: List[Body] = []
        self.frame = 0

    # -----------------------
    # Collection
    # -----------------------

    def add(self, body: Body) -> Body:
        self.bodies.append(body)
        self.render_sink.spawn(body)
        return body

    def contains(self, body: Body) -> bool:
        return any(b is body for b in self.bodies)

    def remove(self, body: Body) -> bool:
        """Remove body and its pending tasks. Safe to call more than once."""
        for i, b in enumerate(self.bodies):
            if b is body:
                del self.bodies[i]
                break
        else:
            return False
        self.tasks.drop_for(body.body_id)
        self.render_sink.remove(body)
        logger.debug("Removed %s#%d", body.glyph, body.body_id)
        return True

    def clear(self) -> None:
        for body in list(self.bodies):
            self.remove(body)

    # -----------------------
    # Configuration
    # -----------------------

    def apply_settings(self, settings: CrowdSettings) -> None:
        size_changed = settings.character_size != self.settings.character_size
        tuning_changed = settings.tuning != self.settings.tuning
        self.settings = settings
        self.forces.settings = settings
        if tuning_changed:
            self.set_tuning(settings.tuning)
        if size_changed:
            self.set_character_size(settings.character_size)

    def set_repulsion_force(self, value: int) -> None:
        self.settings.repulsion_force = int(value)

    def set_tuning(self, tuning: PhysicsTuning) -> None:
        self.settings.tuning = tuning
        logger.info("Tuning set: center_pull=%.3f, overlap_passes=%d", tuning.center_pull, tuning.overlap_passes)

    def set_character_size(self, size: int) -> None:
        """Rescale radius and mass of every body for a new character size."""
        if size <= 0:
            raise ValueError("character size must be positive")
        self.settings.character_size = int(size)
        for body in self.bodies:
            body.resize(size)

    # -----------------------
    # Frame
    # -----------------------

    def expire_mode(self, body: Body, now: float) -> None:
        if body.is_exploding and now - body.mode_started_at > EXPLODE_DURATION_MS:
            body.settle()
            logger.debug("%s#%d returned from exploding", body.glyph, body.body_id)

    def step_body(self, body: Body, now: float) -> ContactReport:
        self.expire_mode(body, now)
        contact = self.forces.apply(body, self.bodies, now)
        integrate(body)
        apply_boundary(body, self.settings)
        if not body.is_exploding:
            resolve_overlaps(body, self.bodies, self.settings, self.rng,
                             OverlapSettings.from_crowd(self.settings))
        return contact

    def step(self, now: Optional[float] = None) -> List[FrameReport]:
        """
        Advance the crowd by one frame.

        Due deferred tasks run first, then every ready body is updated in
        order, then exploding bodies that left the view (or were never drawn)
        are removed.
        """
        now = self.clock() if now is None else now
        self.tasks.run_due(now)

        reports: List[FrameReport] = []
        for body in list(self.bodies):
            if not body.ready or not self.contains(body):
                continue
            contact = self.step_body(body, now)
            self.render_sink.update(body, contact.collided, contact.intensity, contact.deform, now)
            if contact.collided and logger.isEnabledFor(logging.DEBUG):
                logger.debug("%s#%d collision, intensity %.3f", body.glyph, body.body_id, contact.intensity)
            reports.append(FrameReport(body, contact))

        # unready bodies never move, so an exploding one could never leave the view
        for body in [b for b in self.bodies if b.is_exploding and (not b.ready or b.is_off_screen(self.settings.width, self.settings.height))]:
            self.remove(body)

        self.frame += 1
        return reports

    # -----------------------
    # One-shot inputs
    # -----------------------

    def explode_all(self, now: Optional[float] = None, outward: bool = True) -> int:
        """
        Send every body into Exploding with a fresh dispersal velocity.

        outward=True aims each body away from the focal point (speed 20..35,
        boost 2.5..4.0); otherwise directions are uniformly random
        (speed 20..35, boost 3.0). Returns the number of bodies launched.
        """
        now = self.clock() if now is None else now
        fx, fy = self.settings.focal_point
        for body in self.bodies:
            body.start_exploding(now)
            if outward:
                dx = body.position[0] - fx
                dy = body.position[1] - fy
                dist = math.hypot(dx, dy)
                direction = (dx / dist, dy / dist) if dist > 0 else random_unit(self.rng)
                speed = 20.0 + self.rng.random() * 15.0
                body.collision_boost = 2.5 + self.rng.random() * 1.5
            else:
                direction = random_unit(self.rng)
                speed = 20.0 + self.rng.random() * 15.0
                body.collision_boost = 3.0
            body.velocity = (direction[0] * speed, direction[1] * speed)
        logger.info("Exploding %d bodies (%s)", len(self.bodies), "outward" if outward else "scatter")
        return len(self.bodies)

    def apply_impulse(self, point: Vec2, strength: float = INTERVENTION_STRENGTH,
                      falloff: float = INTERVENTION_FALLOFF) -> List[Tuple[Body, float]]:
        """
        Push bodies away from point.

        Each body within falloff gets an outward velocity kick of
        strength * (1 - d / falloff) / mass and its collision boost raised to at
        least half the effect. Returns (body, effect) for every body touched.
        """
        touched: List[Tuple[Body, float]] = []
        for body in self.bodies:
            dx = body.position[0] - point[0]
            dy = body.position[1] - point[1]
            dist = math.hypot(dx, dy)
            if dist <= 0:
                continue
            effect = max(0.0, 1.0 - dist / falloff)
            if effect <= 0:
                continue
            kick = strength * effect / body.mass
            body.velocity = (body.velocity[0] + dx / dist * kick, body.velocity[1] + dy / dist * kick)
            body.collision_boost = max(body.collision_boost, effect * INTERVENTION_BOOST)
            touched.append((body, effect))
        return touched
