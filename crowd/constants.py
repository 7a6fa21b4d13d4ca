#!/usr/bin/env python3
"""
Shared constants for Glyph Crowd (pixels, frames and milliseconds).

Keeping constants in one place helps ensure values are consistent across the
codebase and makes tuning easier. Velocities are in pixels per frame; every
timer is in milliseconds.
"""

# World (arena) geometry
WORLD_WIDTH = 1000.0
WORLD_HEIGHT = 600.0
FOCAL_POINT = (500.0, 300.0)

# Body sizing
REFERENCE_SIZE = 60.0  # character size that maps to mass 1.0 at variation 1.0
RADIUS_FACTOR = 0.6  # radius = rendered size * RADIUS_FACTOR
SIZE_VARIATION_MIN = 0.5
SIZE_VARIATION_SPAN = 1.0
DEFAULT_DAMPING = 0.96

# Normal mode
CONTACT_FACTOR = 0.8  # minDistance = (r_a + r_b) * CONTACT_FACTOR
REPULSION_SCALE = 0.005
EMERGENCY_DEPTH_RATIO = 0.5
EMERGENCY_MULTIPLIER = 4.0
REGULAR_MULTIPLIER = 1.5
BOOST_PER_DEPTH = 0.04
BOOST_DECAY = 0.95
BASE_SPEED_CAP = 1.5
BOOST_SPEED_FACTOR = 20.0

# Gathering mode
GATHER_DRAG = 0.998
GATHER_OUTER_RADIUS = 250.0
GATHER_INNER_RADIUS = 100.0
GATHER_CONTACT_FACTOR = 0.6
GATHER_SEPARATION = 0.003
GATHER_EDGE_IMPULSE = 2.0

# Exploding mode
EXPLODE_GRAVITY = 0.3
EXPLODE_DRAG_X = 0.995
EXPLODE_DRAG_Y = 0.998
OFFSCREEN_MARGIN = 50.0

# Boundary restitution (applied as -factor to the outward component)
RESTITUTION_NORMAL = 0.3
RESTITUTION_EXPLODING = 0.6

# Timers (ms)
EXPLODE_DURATION_MS = 3000.0
GATHER_DURATION_MS = 1500.0
COLLISION_COOLDOWN_MS = 800.0
DEFORM_REVERT_MS = 150.0
QUICK_CLEAR_MS = 800.0

# User intervention
INTERVENTION_STRENGTH = 25.0
INTERVENTION_FALLOFF = 200.0
INTERVENTION_BOOST = 0.5

# Collection limits
MAX_GLYPHS = 50
DEFAULT_REPULSION_FORCE = 100
DEFAULT_CHARACTER_SIZE = 60

# Rendering (viewport)
VIEW_WIDTH = int(WORLD_WIDTH)
VIEW_HEIGHT = int(WORLD_HEIGHT)
BACKGROUND_COLOR = (248, 249, 250)
GLYPH_COLORS = (
    (33, 37, 41), (73, 80, 87), (108, 117, 125), (73, 80, 87),
    (52, 58, 64), (73, 80, 87), (33, 37, 41), (108, 117, 125),
)
RIPPLE_COLOR = (108, 117, 125)
