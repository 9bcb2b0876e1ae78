#!/usr/bin/env python3
"""
Data models for the galaxy simulator.

This module defines the Body dataclass shared between physics, collisions, traces and
rendering, together with the mass-to-radius mapping every body is created with.

Units and usage
- position and velocity are (x, y) tuples in simulation units; they are replaced, never
  mutated in place.
- mass and radius are strictly positive for the lifetime of a body.
- id is assigned by the BodyRegistry and never changes; trace history is keyed by it.
"""
import math
from dataclasses import dataclass
from typing import Tuple

from .constants import DEFAULT_BODY_COLOR, SUN_DENSITY
from .errors import ConfigurationError
from .vector_utils import Vec2, is_finite_vec


def radius_from_mass(mass: float, density: float = SUN_DENSITY) -> float:
    """
    Radius of a uniform-density sphere holding the given mass.

    r = cbrt(3 * m / (4 * pi * density)); monotonic in mass, so a merged body is always
    larger than either of its parts.
    """
    if mass <= 0:
        raise ConfigurationError(f"mass must be positive, got {mass!r}")
    if density <= 0:
        raise ConfigurationError(f"density must be positive, got {density!r}")
    return (mass / density * 0.75 / math.pi) ** (1.0 / 3.0)


@dataclass
class Body:
    """
    Represents a sun in the simulation.

    Fields:
    - id: Stable identity within one run
    - mass: Mass (> 0)
    - radius: Collision/render radius (> 0), derived from mass
    - position: 2D position (x, y)
    - velocity: 2D velocity (vx, vy)
    - name: Display name
    - color: RGB tuple used for rendering
    """
    id: int
    mass: float
    radius: float
    position: Vec2
    velocity: Vec2
    name: str = ""
    color: Tuple[int, int, int] = DEFAULT_BODY_COLOR

    def __post_init__(self):
        if not (self.mass > 0 and math.isfinite(self.mass)):
            raise ConfigurationError(f"body {self.id}: mass must be positive and finite, got {self.mass!r}")
        if not (self.radius > 0 and math.isfinite(self.radius)):
            raise ConfigurationError(f"body {self.id}: radius must be positive and finite, got {self.radius!r}")
        self.position = (float(self.position[0]), float(self.position[1]))
        self.velocity = (float(self.velocity[0]), float(self.velocity[1]))
        if not is_finite_vec(self.position) or not is_finite_vec(self.velocity):
            raise ConfigurationError(f"body {self.id}: position and velocity must be finite")
        if not self.name:
            self.name = f"Sun {self.id}"

    @property
    def momentum(self) -> Vec2:
        return (self.mass * self.velocity[0], self.mass * self.velocity[1])

    @property
    def kinetic_energy(self) -> float:
        vx, vy = self.velocity
        return 0.5 * self.mass * (vx * vx + vy * vy)

    def is_finite(self) -> bool:
        """True when every kinematic attribute is a finite number."""
        return (is_finite_vec(self.position) and is_finite_vec(self.velocity)
                and math.isfinite(self.mass) and math.isfinite(self.radius))
