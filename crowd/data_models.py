#!/usr/bin/env python3
"""
Data models for Glyph Crowd.

This module defines the Body dataclass shared between physics, spawning and
rendering, plus the tagged mode variants a body moves through.

Units and usage
- position is in pixels, velocity in pixels per frame, radius in pixels.
- mass is dimensionless: 1.0 for a glyph of the reference size at variation 1.0.
- timestamps (mode start, collision start, hook cooldown) are milliseconds on
  the simulation clock.
- Access to Body instances is coordinated by CrowdController using a lock.
"""
import itertools
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Optional, Tuple, Union

from .constants import (
    DEFAULT_DAMPING,
    OFFSCREEN_MARGIN,
    RADIUS_FACTOR,
    REFERENCE_SIZE,
    WORLD_HEIGHT,
    WORLD_WIDTH,
)

_body_ids = itertools.count(1)


class Mode(Enum):
    NORMAL = "normal"
    GATHERING = "gathering"
    EXPLODING = "exploding"


@dataclass(frozen=True)
class Normal:
    kind: ClassVar[Mode] = Mode.NORMAL


@dataclass(frozen=True)
class Gathering:
    started_at: float
    kind: ClassVar[Mode] = Mode.GATHERING


@dataclass(frozen=True)
class Exploding:
    started_at: float
    kind: ClassVar[Mode] = Mode.EXPLODING


ModeState = Union[Normal, Gathering, Exploding]

NORMAL = Normal()


def size_to_mass(base_size: float, size_variation: float) -> float:
    return size_variation * (base_size / REFERENCE_SIZE)


def size_to_radius(base_size: float, size_variation: float) -> float:
    return base_size * size_variation * RADIUS_FACTOR


@dataclass
class Body:
    """
    Represents one glyph in the crowd.

    Fields:
    - glyph: The character this body displays
    - position: 2D position (x, y) in pixels
    - velocity: 2D velocity (vx, vy) in pixels per frame
    - mass: Resistance to force; heavier bodies also push harder
    - radius: Collision radius in pixels
    - size_variation: Random per-body size factor kept across resizes
    - mode: Exactly one of Normal, Gathering or Exploding
    - collision_boost: Transient raise of the speed cap after impacts
    - collision_started_at: First overlap time, drives the outline effect
    - last_hook_at: Last time the collision side effect fired
    - ready: False until the glyph shape is available
    """
    glyph: str
    position: Tuple[float, float]
    velocity: Tuple[float, float]
    mass: float
    radius: float
    size_variation: float = 1.0
    damping: float = DEFAULT_DAMPING
    mode: ModeState = NORMAL
    collision_boost: float = 0.0
    collision_started_at: Optional[float] = None
    last_hook_at: Optional[float] = None
    ready: bool = True
    color: Tuple[int, int, int] = (33, 37, 41)
    body_id: int = field(default_factory=lambda: next(_body_ids))

    def __post_init__(self):
        if not self.mass > 0:
            raise ValueError(f"mass must be positive, got {self.mass!r}")
        if not self.radius > 0:
            raise ValueError(f"radius must be positive, got {self.radius!r}")

    @classmethod
    def from_size(cls, glyph: str, position, base_size: float, size_variation: float, **kwargs) -> "Body":
        """Build a body whose mass and radius derive from its rendered size."""
        return cls(
            glyph=glyph,
            position=(float(position[0]), float(position[1])),
            velocity=kwargs.pop("velocity", (0.0, 0.0)),
            mass=size_to_mass(base_size, size_variation),
            radius=size_to_radius(base_size, size_variation),
            size_variation=size_variation,
            **kwargs,
        )

    @property
    def kind(self) -> Mode:
        return self.mode.kind

    @property
    def is_normal(self) -> bool:
        return self.mode.kind is Mode.NORMAL

    @property
    def is_gathering(self) -> bool:
        return self.mode.kind is Mode.GATHERING

    @property
    def is_exploding(self) -> bool:
        return self.mode.kind is Mode.EXPLODING

    @property
    def mode_started_at(self) -> Optional[float]:
        return getattr(self.mode, "started_at", None)

    @property
    def size(self) -> float:
        """Rendered glyph size in pixels."""
        return self.radius / RADIUS_FACTOR

    def start_gathering(self, now: float) -> None:
        self.mode = Gathering(started_at=now)

    def start_exploding(self, now: float) -> None:
        self.mode = Exploding(started_at=now)

    def settle(self) -> None:
        self.mode = NORMAL

    def resize(self, base_size: float) -> None:
        """Rescale radius and mass for a new configured character size."""
        if not base_size > 0:
            raise ValueError(f"character size must be positive, got {base_size!r}")
        self.radius = size_to_radius(base_size, self.size_variation)
        self.mass = size_to_mass(base_size, self.size_variation)

    def is_off_screen(self, width: float = WORLD_WIDTH, height: float = WORLD_HEIGHT) -> bool:
        """True once the body is entirely outside the world plus a safety margin."""
        margin = self.radius + OFFSCREEN_MARGIN
        x, y = self.position
        return x < -margin or x > width + margin or y < -margin or y > height + margin
