#!/usr/bin/env python3
"""
Force Accumulator for the galaxy simulator.

Responsibilities
- Compute the net gravitational force on every body from every other body, with
  Plummer-like softening.
- Optionally add a weak linear pull toward the origin that keeps a random galaxy bound.
- Provide small helpers for common orbital computations and energy diagnostics.

Numerical notes
- Softening: eps^2 is added to r^2, so the pair force is
      F_ij = G * m_i * m_j * r_ij / (|r_ij|^2 + eps^2)^(3/2)
  which stays bounded as two centers approach. Contact itself is handled by collisions.
- Complexity: the direct method visits each unordered pair once per call, O(N^2), and
  applies equal and opposite contributions, so pure gravity conserves total momentum to
  rounding. For large N the Barnes-Hut method (nbody.barnes_hut) is O(N log N) but only
  approximately momentum-conserving.

Forces are returned as a fresh id -> (fx, fy) mapping per call and are never stored
between ticks.
"""

import math
from typing import Dict, List

from . import barnes_hut
from .config import FORCE_METHODS
from .constants import DEFAULT_CENTRAL_PULL, DEFAULT_SOFTENING, DEFAULT_THETA, G
from .data_models import Body
from .errors import ConfigurationError
from .vector_utils import Vec2

Forces = Dict[int, Vec2]


class ForceAccumulator:
    """
    N-body gravitational force computation with softened gravity.

    method selects the pairwise scheme: "direct" (exact, default) or "barnes_hut"
    (quadtree approximation governed by theta).

    SimulationConfig requires a positive softening. The accumulator itself also accepts 0,
    which gives the plain Newtonian force and is only meant for analytic checks.
    """

    def __init__(self, gravitational_constant: float = G, softening: float = DEFAULT_SOFTENING,
                 method: str = "direct", theta: float = DEFAULT_THETA,
                 central_pull: float = DEFAULT_CENTRAL_PULL):
        if method not in FORCE_METHODS:
            raise ConfigurationError(f"unknown force method {method!r}")
        if softening < 0:
            raise ConfigurationError(f"softening must not be negative, got {softening!r}")
        self.G = float(gravitational_constant)
        self.softening = float(softening)
        self.method = method
        self.theta = float(theta)
        self.central_pull = float(central_pull)

    def compute_forces(self, bodies: List[Body]) -> Forces:
        """
        Net force on every body, keyed by body id.

        Args:
            bodies: Bodies in a stable order (ascending id from the registry).

        Returns:
            Mapping of body id to (fx, fy).
        """
        if self.method == "barnes_hut":
            forces = barnes_hut.compute_forces(bodies, self.G, self.softening, self.theta)
        else:
            forces = self._direct_forces(bodies)

        if self.central_pull > 0:
            k = self.central_pull
            for b in bodies:
                fx, fy = forces[b.id]
                forces[b.id] = (fx - k * b.mass * b.position[0], fy - k * b.mass * b.position[1])
        return forces

    def compute_accelerations(self, bodies: List[Body]) -> Forces:
        forces = self.compute_forces(bodies)
        return {b.id: (forces[b.id][0] / b.mass, forces[b.id][1] / b.mass) for b in bodies}

    def _direct_forces(self, bodies: List[Body]) -> Forces:
        n = len(bodies)
        fx = [0.0] * n
        fy = [0.0] * n

        # Precompute softening squared for efficiency
        eps_squared = self.softening * self.softening
        G = self.G

        for i in range(n):
            bi = bodies[i]
            xi, yi = bi.position
            for j in range(i + 1, n):
                bj = bodies[j]

                # Vector from body i to body j
                dx = bj.position[0] - xi
                dy = bj.position[1] - yi

                r_squared_soft = dx * dx + dy * dy + eps_squared
                if r_squared_soft == 0.0:
                    # Coincident centers without softening: no defined direction
                    continue

                magnitude = G * bi.mass * bj.mass / (r_squared_soft * math.sqrt(r_squared_soft))
                px = dx * magnitude
                py = dy * magnitude
                fx[i] += px
                fy[i] += py
                fx[j] -= px
                fy[j] -= py

        return {bodies[i].id: (fx[i], fy[i]) for i in range(n)}

    def potential_energy(self, bodies: List[Body]) -> float:
        """Softened pairwise potential energy, plus the central pull's harmonic term."""
        eps_squared = self.softening * self.softening
        energy = 0.0
        n = len(bodies)
        for i in range(n):
            bi = bodies[i]
            for j in range(i + 1, n):
                bj = bodies[j]
                dx = bj.position[0] - bi.position[0]
                dy = bj.position[1] - bi.position[1]
                r_soft = math.sqrt(dx * dx + dy * dy + eps_squared)
                if r_soft > 0:
                    energy -= self.G * bi.mass * bj.mass / r_soft
        if self.central_pull > 0:
            energy += sum(0.5 * self.central_pull * b.mass
                          * (b.position[0] ** 2 + b.position[1] ** 2) for b in bodies)
        return energy

    def total_energy(self, bodies: List[Body]) -> float:
        return kinetic_energy(bodies) + self.potential_energy(bodies)


def kinetic_energy(bodies: List[Body]) -> float:
    return sum(b.kinetic_energy for b in bodies)


def circular_orbit_velocity(central_mass: float, orbital_radius: float, gravitational_constant: float = G) -> float:
    """
    Velocity needed for a circular orbit around a fixed central mass.

    G * M / r^2 = v^2 / r, therefore v = sqrt(G * M / r).
    """
    if orbital_radius <= 0:
        return 0.0
    return math.sqrt(gravitational_constant * central_mass / orbital_radius)


def escape_velocity(total_mass: float, separation: float, gravitational_constant: float = G) -> float:
    """
    Escape velocity at a given separation: v_escape = sqrt(2 * G * M / r).

    Used by accretion collisions to decide between merging and bouncing.
    """
    if separation <= 0 or total_mass <= 0:
        return 0.0
    return math.sqrt(2.0 * gravitational_constant * total_mass / separation)
