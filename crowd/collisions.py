#!/usr/bin/env python3
"""
Overlap cleanup for Glyph Crowd.

The force model only pushes overlapping bodies apart gradually through their
velocities. This module runs after the boundary step and corrects positions
directly so that no two non-exploding bodies stay interpenetrated:

- For each other active, non-exploding body closer than
  (r_a + r_b) * 0.8, both bodies move apart along the separation axis by
  half the overlap depth each, which puts the pair exactly at contact.
- Each corrected position is clamped back into the world bounds; velocities
  are left untouched.
- The sweep repeats for a configurable number of passes to settle chains of
  contacts under dense packing.

Exploding bodies neither move nor are moved here.
"""
import logging
import random
from typing import List, Optional

from .config import CrowdSettings
from .constants import CONTACT_FACTOR
from .data_models import Body
from .vector_utils import clamp, separation_axis

logger = logging.getLogger(__name__)


class OverlapSettings:
    """Container for overlap-resolution settings."""
    def __init__(self, passes: int = 2, contact_factor: float = CONTACT_FACTOR):
        self.passes = max(1, int(passes))
        self.contact_factor = float(contact_factor)

    @classmethod
    def from_crowd(cls, settings: CrowdSettings) -> "OverlapSettings":
        return cls(passes=settings.tuning.overlap_passes)


def _clamp_into_world(body: Body, world: CrowdSettings) -> None:
    margin = body.radius
    body.position = (
        clamp(body.position[0], margin, world.width - margin),
        clamp(body.position[1], margin, world.height - margin),
    )


def separate_pair(a: Body, b: Body, world: CrowdSettings, rng: random.Random,
                  contact_factor: float = CONTACT_FACTOR) -> bool:
    """
    Push a and b apart if they overlap.

    Returns True if a correction was applied.
    """
    min_dist = (a.radius + b.radius) * contact_factor
    dx = a.position[0] - b.position[0]
    dy = a.position[1] - b.position[1]
    if dx * dx + dy * dy >= min_dist * min_dist:
        return False

    (nx, ny), dist, degenerate = separation_axis(a.position, b.position, rng)
    half = (min_dist - dist) * 0.5
    if degenerate:
        # Coincident pair: push from the shared point so the result is still at contact.
        half = min_dist * 0.5
        mid = ((a.position[0] + b.position[0]) * 0.5, (a.position[1] + b.position[1]) * 0.5)
        a.position = (mid[0] + nx * half, mid[1] + ny * half)
        b.position = (mid[0] - nx * half, mid[1] - ny * half)
    else:
        a.position = (a.position[0] + nx * half, a.position[1] + ny * half)
        b.position = (b.position[0] - nx * half, b.position[1] - ny * half)
    _clamp_into_world(a, world)
    _clamp_into_world(b, world)
    return True


def resolve_overlaps(body: Body, bodies: List[Body], world: CrowdSettings,
                     rng: Optional[random.Random] = None,
                     settings: Optional[OverlapSettings] = None) -> int:
    """
    De-penetrate one body against every other active, non-exploding body.

    Returns the number of corrections applied across all passes.
    """
    if body.is_exploding or not body.ready:
        return 0
    rng = rng if rng is not None else random.Random()
    settings = settings if settings is not None else OverlapSettings.from_crowd(world)

    corrections = 0
    for _ in range(settings.passes):
        moved = False
        for other in bodies:
            if other is body or not other.ready or other.is_exploding:
                continue
            if separate_pair(body, other, world, rng, settings.contact_factor):
                corrections += 1
                moved = True
        if not moved:
            break

    if corrections and logger.isEnabledFor(logging.DEBUG):
        logger.debug("Resolved %d overlap(s) for %s#%d", corrections, body.glyph, body.body_id)
    return corrections
