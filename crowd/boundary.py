#!/usr/bin/env python3
"""
Arena boundary handling for Glyph Crowd.

After integration each axis is checked independently against
[radius, dimension - radius]. A body crossing an edge is put back on it and
its outward velocity component is reflected with a mode-dependent restitution.

Exploding bodies are meant to leave the arena: they only bounce off the
ceiling (with the livelier exploding restitution) and pass freely through the
side walls and the floor, where gravity carries them out of view.
"""
import math
from typing import Tuple

from .config import CrowdSettings
from .constants import GATHER_EDGE_IMPULSE, RESTITUTION_EXPLODING, RESTITUTION_NORMAL
from .data_models import Body


def _reflect_axis(pos: float, vel: float, low: float, high: float, restitution: float) -> Tuple[float, float]:
    if pos < low:
        pos = low
        if vel < 0:
            vel = -vel * restitution
    elif pos > high:
        pos = high
        if vel > 0:
            vel = -vel * restitution
    return pos, vel


def clamp_to_world(body: Body, settings: CrowdSettings) -> None:
    """Clamp and reflect a Normal or Gathering body back inside the arena."""
    margin = body.radius
    x, y = body.position
    vx, vy = body.velocity
    x, vx = _reflect_axis(x, vx, margin, settings.width - margin, RESTITUTION_NORMAL)
    y, vy = _reflect_axis(y, vy, margin, settings.height - margin, RESTITUTION_NORMAL)
    body.position = (x, y)
    body.velocity = (vx, vy)


def bounce_exploding(body: Body) -> None:
    """Reflect an exploding body off the ceiling only."""
    margin = body.radius
    x, y = body.position
    vx, vy = body.velocity
    if y < margin:
        y = margin
        if vy < 0:
            vy = -vy * RESTITUTION_EXPLODING
    body.position = (x, y)
    body.velocity = (vx, vy)


def near_edge(body: Body, settings: CrowdSettings) -> bool:
    band = body.radius * 2
    x, y = body.position
    return x <= band or x >= settings.width - band or y <= band or y >= settings.height - band


def apply_boundary(body: Body, settings: CrowdSettings) -> None:
    """
    Boundary step for one body.

    Gathering bodies within two radii of any edge also get a fixed-magnitude
    velocity impulse toward the focal point so the ease-in damping cannot
    strand them against a wall.
    """
    if body.is_exploding:
        bounce_exploding(body)
        return

    clamp_to_world(body, settings)

    if body.is_gathering and near_edge(body, settings):
        fx = settings.focal_point[0] - body.position[0]
        fy = settings.focal_point[1] - body.position[1]
        dist = math.hypot(fx, fy)
        if dist > 0:
            body.velocity = (
                body.velocity[0] + fx / dist * GATHER_EDGE_IMPULSE,
                body.velocity[1] + fy / dist * GATHER_EDGE_IMPULSE,
            )
