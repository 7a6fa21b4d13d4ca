#!/usr/bin/env python3
"""
Runtime configuration for Glyph Crowd.

PhysicsTuning holds the constants that differ between the two engine variants
the crowd has shipped with; CrowdSettings holds the externally owned inputs
(world size, focal point, slider values) read by the simulation every frame.
"""
from dataclasses import dataclass, field, replace
from typing import Tuple

from .constants import (
    DEFAULT_CHARACTER_SIZE,
    DEFAULT_REPULSION_FORCE,
    FOCAL_POINT,
    WORLD_HEIGHT,
    WORLD_WIDTH,
)


@dataclass(frozen=True)
class PhysicsTuning:
    """
    Variant-specific constants.

    - center_pull: numerator of the Normal-mode centripetal force (divided by mass)
    - overlap_passes: positional de-penetration passes per body per frame
    """
    center_pull: float = 0.08
    overlap_passes: int = 2

    def __post_init__(self):
        if self.center_pull < 0:
            raise ValueError("center_pull must be >= 0")
        if self.overlap_passes < 1:
            raise ValueError("overlap_passes must be >= 1")


CANONICAL_TUNING = PhysicsTuning()
CLASSIC_TUNING = PhysicsTuning(center_pull=0.15, overlap_passes=1)


@dataclass
class CrowdSettings:
    width: float = WORLD_WIDTH
    height: float = WORLD_HEIGHT
    focal_point: Tuple[float, float] = FOCAL_POINT
    repulsion_force: int = DEFAULT_REPULSION_FORCE
    character_size: int = DEFAULT_CHARACTER_SIZE
    tuning: PhysicsTuning = field(default_factory=PhysicsTuning)

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"world size must be positive, got {self.width}x{self.height}")
        if self.character_size <= 0:
            raise ValueError("character_size must be positive")

    def with_tuning(self, **changes) -> "CrowdSettings":
        return replace(self, tuning=replace(self.tuning, **changes))
