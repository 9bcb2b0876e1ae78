#!/usr/bin/env python3
"""
Shared constants for the galaxy simulator (scaled simulation units).

The simulation does not use SI units: masses, lengths and times are abstract
units chosen so that a handful of suns orbit each other visibly at G = 1.
Keeping the defaults in one place makes tuning easier.
"""

# Physical constants (scaled units)
G = 1.0  # gravitational constant
DEFAULT_SOFTENING = 1.0  # length; added in quadrature to pair separations
DEFAULT_CENTRAL_PULL = 0.0  # acceleration per unit distance toward the origin
DEFAULT_THETA = 0.5  # Barnes-Hut opening angle

# Sun generation
SUN_MIN_MASS = 10.0
SUN_MAX_MASS = 50.0
SUN_DENSITY = 0.02  # higher density -> smaller radius
SUN_MAX_STARTING_VELOCITY = 20.0
DEFAULT_BODY_COUNT = 12
DEFAULT_GALAXY_RADIUS = 400.0

# Physics controls
BASE_DT = 1 / 120.0  # time per physics tick at speed 1
MAX_SUBSTEPS = 1000  # cap per frame for stability/perf
DEFAULT_TIME_SCALE = 1.0
SPEED_FACTOR = 2.0  # multiplier applied by speed up / slow down
MIN_TIME_SCALE = 1.0 / 64.0
MAX_TIME_SCALE = 64.0

# Collisions
DEFAULT_RESTITUTION = 1.0
DEFAULT_MAX_COLLISION_PASSES = 8

# Traces
DEFAULT_TRACE_LENGTH = 200
DEFAULT_TRACE_STRIDE = 1  # record every tick
APP_TRACE_STRIDE = 3  # viewer default

# Rendering (viewport)
VIEW_WIDTH = 1200
VIEW_HEIGHT = 800
TARGET_FPS = 60
BACKGROUND_COLOR = (30, 40, 40)
TEXT_COLOR = (200, 200, 200)
DEFAULT_BODY_COLOR = (255, 204, 0)

# Camera zoom bounds (pixels per world unit)
DEFAULT_ZOOM = 1.0
MIN_ZOOM = 1e-3
MAX_ZOOM = 1e3
ZOOM_FACTOR = 1.2
ZOOM_SMOOTH = 0.1
MOVE_SMOOTH = 0.1

# Safety: avoid drawing outside reasonable integer pixel ranges
SAFE_COORD_LIMIT = 30000
