#!/usr/bin/env python3
"""
Vector helper functions for 2D operations.

These are small, fast functions for vector math used throughout the app.
Vectors are plain (x, y) tuples.
"""
import math
import random
from typing import Tuple

Vec2 = Tuple[float, float]


def clamp(x: float, a: float, b: float) -> float:
    """Clamp x to the inclusive range [a, b]."""
    return max(a, min(b, x))


def vec_sub(a: Vec2, b: Vec2) -> Vec2:
    return (a[0] - b[0], a[1] - b[1])


def vec_len(a: Vec2) -> float:
    return math.hypot(a[0], a[1])


def unit_from_angle(angle: float) -> Vec2:
    return (math.cos(angle), math.sin(angle))


def random_unit(rng: random.Random) -> Vec2:
    """Uniformly distributed direction on the unit circle."""
    return unit_from_angle(rng.random() * math.pi * 2)


def separation_axis(a: Vec2, b: Vec2, rng: random.Random) -> Tuple[Vec2, float, bool]:
    """
    Unit direction pointing from b to a, and the distance between them.

    Points closer than one unit are treated as coincident: the direction is
    drawn from rng and the distance is clamped to 1. The third element tells
    the caller whether that happened.
    """
    dx = a[0] - b[0]
    dy = a[1] - b[1]
    dist = math.hypot(dx, dy)
    if dist < 1.0:
        return random_unit(rng), 1.0, True
    return (dx / dist, dy / dist), dist, False
