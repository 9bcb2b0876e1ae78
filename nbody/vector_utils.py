#!/usr/bin/env python3
"""
Vector helper functions for 2D operations.

Vectors are plain (x, y) tuples; every helper returns a new tuple so bodies
are updated by replacing their attributes, never by mutating shared vectors.
"""
import math
import random
from typing import Tuple

Vec2 = Tuple[float, float]

ZERO: Vec2 = (0.0, 0.0)


def clamp(x: float, a: float, b: float) -> float:
    """Clamp x to the inclusive range [a, b]."""
    return max(a, min(b, x))


def vec_sub(a: Vec2, b: Vec2) -> Vec2:
    return (a[0] - b[0], a[1] - b[1])


def vec_scale(a: Vec2, s: float) -> Vec2:
    return (a[0] * s, a[1] * s)


def vec_len(a: Vec2) -> float:
    return math.hypot(a[0], a[1])


def vec_from_angle(angle: float) -> Vec2:
    """Unit vector for an angle measured from the +y axis."""
    return (math.sin(angle), math.cos(angle))


def random_vec(max_magnitude: float, rng: random.Random) -> Vec2:
    """Vector with uniform random direction and magnitude in [0, max_magnitude)."""
    angle = rng.random() * 2.0 * math.pi
    return vec_scale(vec_from_angle(angle), rng.random() * max_magnitude)


def is_finite_vec(a: Vec2) -> bool:
    return math.isfinite(a[0]) and math.isfinite(a[1])
