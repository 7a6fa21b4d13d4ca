#!/usr/bin/env python3
"""
Mode-dependent force model for Glyph Crowd

Responsibilities
- Normal: weak centripetal pull toward the focal point, mass-weighted pairwise
  repulsion between overlapping bodies, damping and a speed cap that breathes
  with recent collision intensity.
- Gathering: drag plus a two-stage ease-in near the focal point, with a weak
  separation nudge between gathering neighbours.
- Exploding: ballistic flight under constant downward acceleration and mild
  anisotropic drag.
- Integration: one explicit Euler position update per frame, identical for
  every mode.

Units and conventions
- Positions in pixels, velocities in pixels per frame, one call per frame.
- Forces are accumulated per body, then applied as velocity += force / mass.

Numerical notes
- Pairs closer than one pixel get a random separation direction drawn from the
  injected random source and a clamped distance of 1, so the force never
  divides by zero and exact coincidence is broken.
- Complexity: O(N) per body and O(N^2) per frame (direct summation). The crowd
  is capped at 50 glyphs, so no spatial index is used.
- Bodies are processed sequentially, each seeing its neighbours' latest state.
"""

import math
import random
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Tuple

from .config import CrowdSettings
from .constants import (
    BASE_SPEED_CAP,
    BOOST_DECAY,
    BOOST_PER_DEPTH,
    BOOST_SPEED_FACTOR,
    COLLISION_COOLDOWN_MS,
    CONTACT_FACTOR,
    EMERGENCY_DEPTH_RATIO,
    EMERGENCY_MULTIPLIER,
    EXPLODE_DRAG_X,
    EXPLODE_DRAG_Y,
    EXPLODE_GRAVITY,
    GATHER_CONTACT_FACTOR,
    GATHER_DRAG,
    GATHER_INNER_RADIUS,
    GATHER_OUTER_RADIUS,
    GATHER_SEPARATION,
    REGULAR_MULTIPLIER,
    REPULSION_SCALE,
)
from .data_models import Body, Mode
from .vector_utils import Vec2, separation_axis, vec_len, vec_sub

CollisionHook = Callable[[str], None]


@dataclass
class ContactReport:
    """What one body touched during a frame, for the render sink."""
    collided: bool = False
    intensity: float = 0.0
    deform: Vec2 = (0.0, 0.0)


class ForceModel:
    """
    Per-frame velocity update for a single body, branching strictly on its mode.

    The repulsion a body feels from an overlapping neighbour is

        F = depth * repulsion_force * 0.005 * m_other / (m_self + m_other) * k

    where depth = (r_self + r_other) * 0.8 - distance and k is 4 when the depth
    exceeds half the body's radius, else 1.5. The velocity change is F / m_self,
    so a heavy neighbour pushes harder and a heavy body moves less.
    """

    def __init__(self, settings: CrowdSettings, rng: Optional[random.Random] = None,
                 on_collision: Optional[CollisionHook] = None):
        """
        Initialize the force model.

        Args:
            settings: Shared crowd settings; read on every call so slider
                changes take effect on the next frame.
            rng: Random source for degenerate separation directions.
            on_collision: Side effect fired with the glyph on overlap, rate
                limited per body.
        """
        self.settings = settings
        self.rng = rng if rng is not None else random.Random()
        self.on_collision = on_collision

    def apply(self, body: Body, others: Iterable[Body], now: float) -> ContactReport:
        """Update body.velocity for one frame according to its mode."""
        kind = body.kind
        if kind is Mode.NORMAL:
            return self.apply_normal(body, others, now)
        if kind is Mode.GATHERING:
            self.apply_gathering(body, others)
        else:
            self.apply_exploding(body)
        return ContactReport()

    # -----------------------
    # Normal
    # -----------------------

    def normal_force(self, body: Body, others: Iterable[Body], now: float) -> Tuple[Vec2, ContactReport]:
        """
        Accumulate the Normal-mode force on body without touching its velocity.

        Side effects limited to collision bookkeeping: collision_boost is
        raised to at least depth * 0.04, collision_started_at is stamped on
        first contact and the collision hook may fire.

        Returns:
            ((fx, fy), ContactReport)
        """
        fx, fy = 0.0, 0.0
        focal = self.settings.focal_point

        to_focal = vec_sub(focal, body.position)
        focal_dist = vec_len(to_focal)
        if focal_dist > 0:
            pull = self.settings.tuning.center_pull / body.mass
            fx += to_focal[0] / focal_dist * pull
            fy += to_focal[1] / focal_dist * pull

        report = ContactReport()
        deform_x, deform_y = 0.0, 0.0
        repulsion = self.settings.repulsion_force

        for other in others:
            if other is body or not other.ready or other.is_exploding:
                continue
            min_dist = (body.radius + other.radius) * CONTACT_FACTOR
            dx = body.position[0] - other.position[0]
            dy = body.position[1] - other.position[1]
            if dx * dx + dy * dy >= min_dist * min_dist:
                continue

            (nx, ny), dist, _ = separation_axis(body.position, other.position, self.rng)
            depth = min_dist - dist
            mass_ratio = other.mass / (body.mass + other.mass)
            strength = depth * repulsion * REPULSION_SCALE * mass_ratio
            if depth > body.radius * EMERGENCY_DEPTH_RATIO:
                strength *= EMERGENCY_MULTIPLIER
            else:
                strength *= REGULAR_MULTIPLIER
            fx += nx * strength
            fy += ny * strength

            body.collision_boost = max(body.collision_boost, depth * BOOST_PER_DEPTH)
            if body.collision_started_at is None:
                body.collision_started_at = now
            self._notify_collision(body, now)

            intensity = depth / body.radius * mass_ratio
            deform_x -= nx * intensity
            deform_y -= ny * intensity
            report.collided = True
            report.intensity = max(report.intensity, intensity)

        report.deform = (deform_x, deform_y)
        return (fx, fy), report

    def apply_normal(self, body: Body, others: Iterable[Body], now: float) -> ContactReport:
        (fx, fy), report = self.normal_force(body, others, now)
        vx = (body.velocity[0] + fx / body.mass) * body.damping
        vy = (body.velocity[1] + fy / body.mass) * body.damping
        body.collision_boost *= BOOST_DECAY

        cap = speed_cap(body)
        speed = math.hypot(vx, vy)
        if speed > cap:
            vx = vx / speed * cap
            vy = vy / speed * cap
        body.velocity = (vx, vy)
        return report

    def _notify_collision(self, body: Body, now: float) -> None:
        if body.last_hook_at is not None and now - body.last_hook_at <= COLLISION_COOLDOWN_MS:
            return
        body.last_hook_at = now
        if self.on_collision is not None:
            self.on_collision(body.glyph)

    # -----------------------
    # Gathering
    # -----------------------

    def apply_gathering(self, body: Body, others: Iterable[Body]) -> None:
        """
        Drag plus a compounded two-stage ease-in toward the focal point.

        Below 250 px the velocity is scaled by 0.88 + (d/250)^0.7 * 0.1, and
        below 100 px additionally by 0.75 + (d/100)^0.5 * 0.2, so the approach
        slows continuously instead of snapping.
        """
        vx, vy = body.velocity
        vx *= GATHER_DRAG
        vy *= GATHER_DRAG

        focal_dist = vec_len(vec_sub(body.position, self.settings.focal_point))
        if focal_dist < GATHER_OUTER_RADIUS:
            outer = 0.88 + math.pow(focal_dist / GATHER_OUTER_RADIUS, 0.7) * 0.1
            vx *= outer
            vy *= outer
        if focal_dist < GATHER_INNER_RADIUS:
            inner = 0.75 + math.pow(focal_dist / GATHER_INNER_RADIUS, 0.5) * 0.2
            vx *= inner
            vy *= inner

        for other in others:
            if other is body or not other.ready or not other.is_gathering:
                continue
            dx = body.position[0] - other.position[0]
            dy = body.position[1] - other.position[1]
            dist = math.hypot(dx, dy)
            min_dist = (body.radius + other.radius) * GATHER_CONTACT_FACTOR
            if 1.0 < dist < min_dist:
                nudge = (min_dist - dist) * GATHER_SEPARATION
                vx += dx / dist * nudge
                vy += dy / dist * nudge

        body.velocity = (vx, vy)

    # -----------------------
    # Exploding
    # -----------------------

    @staticmethod
    def apply_exploding(body: Body) -> None:
        vx, vy = body.velocity
        vy += EXPLODE_GRAVITY
        body.velocity = (vx * EXPLODE_DRAG_X, vy * EXPLODE_DRAG_Y)


def speed_cap(body: Body) -> float:
    """Momentary speed ceiling: (1.5 / mass) * (1 + collision_boost * 20)."""
    return BASE_SPEED_CAP / body.mass * (1.0 + body.collision_boost * BOOST_SPEED_FACTOR)


def integrate(body: Body) -> None:
    """Advance position by one frame of velocity."""
    body.position = (body.position[0] + body.velocity[0], body.position[1] + body.velocity[1])
