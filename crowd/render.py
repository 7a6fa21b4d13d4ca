#!/usr/bin/env python3
"""
Rendering contracts for Glyph Crowd.

The simulation reports each frame's outcome to a render sink; the sink owns
on-screen elements. This module holds the sink protocol and the small pieces
of state a sink needs that do not depend on any drawing library:

- DeformationTracker: squash/stretch triggered by collisions, reverting after
  a short interval unless re-triggered.
- outline_width: grows the glyph outline while a body stays in contact.
- Ripple: expanding ring left by a user click.
"""
from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol, Set, Tuple

from .constants import DEFORM_REVERT_MS
from .data_models import Body
from .vector_utils import Vec2


class RenderSink(Protocol):
    def spawn(self, body: Body) -> None: ...

    def update(self, body: Body, collided: bool, intensity: float, deform: Vec2, now: float) -> None: ...

    def remove(self, body: Body) -> None: ...


class NullRenderSink:
    """Sink that draws nothing; used when the crowd runs headless."""

    def spawn(self, body: Body) -> None:
        pass

    def update(self, body: Body, collided: bool, intensity: float, deform: Vec2, now: float) -> None:
        pass

    def remove(self, body: Body) -> None:
        pass


def morph_scale(intensity: float) -> Tuple[float, float]:
    """Map a deformation intensity to (scale_x, scale_y): squash sideways, stretch up."""
    amount = min(max(intensity, 0.0) * 0.5, 1.0)
    return max(0.7, 1.0 - amount * 0.3), min(1.5, 1.0 + amount * 0.5)


@dataclass
class Deformation:
    scale: Tuple[float, float]
    expires_at: float


class DeformationTracker:
    """Per-body transient deformation, keyed by body id."""

    def __init__(self, revert_after_ms: float = DEFORM_REVERT_MS):
        self.revert_after_ms = revert_after_ms
        self._active: Dict[int, Deformation] = {}

    def trigger(self, body_id: int, intensity: float, now: float) -> Deformation:
        deformation = Deformation(morph_scale(intensity), now + self.revert_after_ms)
        self._active[body_id] = deformation
        return deformation

    def current(self, body_id: int, now: float) -> Optional[Deformation]:
        deformation = self._active.get(body_id)
        if deformation is None:
            return None
        if now >= deformation.expires_at:
            del self._active[body_id]
            return None
        return deformation

    def scale(self, body_id: int, now: float) -> Tuple[float, float]:
        deformation = self.current(body_id, now)
        return deformation.scale if deformation else (1.0, 1.0)

    def restore(self, body_id: int) -> None:
        self._active.pop(body_id, None)

    forget = restore


def outline_width(collision_started_at: Optional[float], now: float) -> int:
    """
    Outline width for a glyph that has been in contact since collision_started_at.

    Stays at 2 for the first three seconds, then grows by one per further
    whole second, capped at 20.
    """
    if collision_started_at is None:
        return 2
    elapsed = now - collision_started_at
    if elapsed <= 3000:
        return 2
    extra_seconds = int((elapsed - 3000) // 1000)
    return min(2 + extra_seconds, 20)


@dataclass
class Ripple:
    """Expanding click ring; purely visual."""
    center: Vec2
    radius: float = 5.0
    opacity: float = 0.8

    @property
    def alive(self) -> bool:
        return self.opacity > 0

    def advance(self) -> None:
        self.radius += 4.0
        self.opacity -= 0.05


class TrackingRenderSink:
    """
    Render sink that keeps the per-body visual state a viewport draws from.

    Collisions (re)trigger a deformation; it is not cleared when contact
    ends, it simply expires after the revert interval.
    """

    def __init__(self, revert_after_ms: float = DEFORM_REVERT_MS):
        self.deformations = DeformationTracker(revert_after_ms)
        self.ripples: List[Ripple] = []
        self.visible: Set[int] = set()

    def spawn(self, body: Body) -> None:
        self.visible.add(body.body_id)

    def update(self, body: Body, collided: bool, intensity: float, deform: Vec2, now: float) -> None:
        if collided and intensity > 0:
            self.deformations.trigger(body.body_id, intensity, now)

    def remove(self, body: Body) -> None:
        self.visible.discard(body.body_id)
        self.deformations.forget(body.body_id)

    def morph(self, body: Body, intensity: float, now: float) -> None:
        self.deformations.trigger(body.body_id, intensity, now)

    def add_ripple(self, center: Vec2) -> Ripple:
        ripple = Ripple(center)
        self.ripples.append(ripple)
        return ripple

    def advance_ripples(self) -> None:
        for ripple in self.ripples:
            ripple.advance()
        self.ripples = [r for r in self.ripples if r.alive]
