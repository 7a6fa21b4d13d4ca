#!/usr/bin/env python3
"""
Spawn planning for Glyph Crowd.

New glyphs enter from outside the arena and gather toward collision-aware
settle targets around the focal point:

- start point: random direction from the focal point (a base angle plus up to
  +/-72 degrees of jitter) at a random distance within the profile's range;
- settle target: random angle at 80..160 px from the focal point, rejection
  sampled (bounded attempts) against every target or body already placed,
  then clamped into the arena;
- initial velocity: aimed from start to target, with a magnitude that grows
  with the travel distance up to a bounded multiplier.

Planned bodies start in Gathering mode. Returning them to Normal is the
caller's job (CrowdController schedules it); the planner only plans.
"""
import logging
import math
import random
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from .config import CrowdSettings
from .constants import GLYPH_COLORS, RADIUS_FACTOR, SIZE_VARIATION_MIN, SIZE_VARIATION_SPAN
from .data_models import Body
from .vector_utils import Vec2, clamp, unit_from_angle

logger = logging.getLogger(__name__)

Occupied = Tuple[Vec2, float]  # (position, radius)


@dataclass(frozen=True)
class SpawnProfile:
    """
    Start-distance range and velocity style for one kind of spawn.

    boosted: base speed 15..25 scaled by clamp(d / 100, 1, 2);
    otherwise base speed 8..18 scaled by min(1, d / 200).
    """
    min_start: float = 150.0
    max_start: float = 400.0
    boosted: bool = True


START_PROFILE = SpawnProfile(150.0, 400.0)
ADD_PROFILE = SpawnProfile(150.0, 300.0)


@dataclass
class SpawnPlan:
    glyph: str
    start: Vec2
    target: Vec2
    velocity: Vec2
    collision_boost: float


class SpawnPlanner:
    def __init__(self, settings: CrowdSettings, rng: Optional[random.Random] = None,
                 max_attempts: int = 50,
                 target_min: float = 80.0, target_span: float = 80.0):
        self.settings = settings
        self.rng = rng if rng is not None else random.Random()
        self.max_attempts = max(1, int(max_attempts))
        self.target_min = target_min
        self.target_span = target_span

    def start_point(self, profile: SpawnProfile = START_PROFILE) -> Vec2:
        base = self.rng.random() * math.pi * 2
        jitter = (self.rng.random() - 0.5) * math.pi * 0.8
        dist = profile.min_start + self.rng.random() * (profile.max_start - profile.min_start)
        ux, uy = unit_from_angle(base + jitter)
        fx, fy = self.settings.focal_point
        return (fx + ux * dist, fy + uy * dist)

    def is_occupied(self, point: Vec2, occupied: Iterable[Occupied]) -> bool:
        clearance = self.settings.character_size * 1.2
        for (ox, oy), radius in occupied:
            if math.hypot(point[0] - ox, point[1] - oy) < clearance + radius:
                return True
        return False

    def settle_target(self, occupied: Iterable[Occupied]) -> Vec2:
        """Rejection-sample a free target; the last candidate wins if none is free."""
        occupied = list(occupied)
        fx, fy = self.settings.focal_point
        candidate = (fx, fy)
        for _ in range(self.max_attempts):
            ux, uy = unit_from_angle(self.rng.random() * math.pi * 2)
            dist = self.target_min + self.rng.random() * self.target_span
            candidate = (fx + ux * dist, fy + uy * dist)
            if not self.is_occupied(candidate, occupied):
                break
        margin = self.settings.character_size * RADIUS_FACTOR
        return (
            clamp(candidate[0], margin, self.settings.width - margin),
            clamp(candidate[1], margin, self.settings.height - margin),
        )

    def initial_velocity(self, start: Vec2, target: Vec2, boosted: bool = True) -> Vec2:
        dx = target[0] - start[0]
        dy = target[1] - start[1]
        dist = math.hypot(dx, dy)
        if dist > 0:
            if boosted:
                speed = (15.0 + self.rng.random() * 10.0) * clamp(dist / 100.0, 1.0, 2.0)
            else:
                speed = (8.0 + self.rng.random() * 10.0) * min(1.0, dist / 200.0)
            return (dx / dist * speed, dy / dist * speed)

        cx = self.settings.focal_point[0] - start[0]
        cy = self.settings.focal_point[1] - start[1]
        center_dist = math.hypot(cx, cy)
        if center_dist > 0:
            speed = 15.0 if boosted else 8.0
            return (cx / center_dist * speed, cy / center_dist * speed)
        return (0.0, 0.0)

    def plan(self, glyph: str, occupied: List[Occupied], profile: SpawnProfile = START_PROFILE) -> SpawnPlan:
        """Plan one spawn and record its target in occupied."""
        target = self.settle_target(occupied)
        start = self.start_point(profile)
        velocity = self.initial_velocity(start, target, profile.boosted)
        occupied.append((target, self.settings.character_size / 2.0))
        return SpawnPlan(glyph, start, target, velocity, 1.2 + self.rng.random() * 1.0)

    def plan_batch(self, glyphs: Iterable[str], existing: Iterable[Body],
                   profile: SpawnProfile = START_PROFILE) -> List[SpawnPlan]:
        occupied: List[Occupied] = [(b.position, b.radius) for b in existing]
        plans = [self.plan(glyph, occupied, profile) for glyph in glyphs]
        if plans:
            logger.debug("Planned %d spawn(s) against %d occupied slot(s)",
                         len(plans), len(occupied) - len(plans))
        return plans

    def build_body(self, plan: SpawnPlan, now: float) -> Body:
        """Create the gathering body described by plan."""
        variation = SIZE_VARIATION_MIN + self.rng.random() * SIZE_VARIATION_SPAN
        body = Body.from_size(
            plan.glyph,
            plan.start,
            base_size=self.settings.character_size,
            size_variation=variation,
            velocity=plan.velocity,
            collision_boost=plan.collision_boost,
            color=self.rng.choice(GLYPH_COLORS),
        )
        body.start_gathering(now)
        return body
