#!/usr/bin/env python3
"""
Time integration of body states.

Two symplectic schemes are available:
- "symplectic_euler" (semi-implicit Euler): velocity is updated first from a = F / m,
  then position from the new velocity. First order, one force evaluation per tick, and
  unlike explicit Euler it does not make orbits spiral outward over many iterations.
- "velocity_verlet": half kick, drift, recompute forces, half kick. Second order and
  time-reversible at the cost of a second force evaluation per tick.

A step with a non-positive or non-finite dt is skipped entirely, leaving every body
untouched.
"""
import math
from typing import List, Optional

from .config import INTEGRATORS
from .data_models import Body
from .errors import ConfigurationError
from .physics import ForceAccumulator, Forces


class Integrator:
    def __init__(self, scheme: str = "symplectic_euler", max_dt: Optional[float] = None):
        if scheme not in INTEGRATORS:
            raise ConfigurationError(f"unknown integrator {scheme!r}")
        self.scheme = scheme
        self.max_dt = max_dt

    def effective_dt(self, dt: float) -> float:
        """dt limited to max_dt; 0.0 for anything that must not be integrated."""
        if not math.isfinite(dt) or dt <= 0:
            return 0.0
        if self.max_dt is not None:
            return min(dt, self.max_dt)
        return dt

    def step(self, bodies: List[Body], forces: Forces, dt: float,
             accumulator: Optional[ForceAccumulator] = None) -> bool:
        """
        Advance bodies in place by one time step.

        Args:
            bodies: Bodies to integrate.
            forces: Net force per body id, evaluated at the current positions.
            dt: Time step; skipped when not strictly positive.
            accumulator: Needed by velocity Verlet to re-evaluate forces after the drift.

        Returns:
            True if the bodies were advanced.
        """
        dt = self.effective_dt(dt)
        if dt == 0.0:
            return False
        if self.scheme == "velocity_verlet":
            if accumulator is None:
                raise ConfigurationError("velocity_verlet needs a ForceAccumulator to re-evaluate forces")
            self._velocity_verlet(bodies, forces, dt, accumulator)
        else:
            self._symplectic_euler(bodies, forces, dt)
        return True

    @staticmethod
    def _symplectic_euler(bodies: List[Body], forces: Forces, dt: float) -> None:
        for b in bodies:
            fx, fy = forces[b.id]
            vx = b.velocity[0] + fx / b.mass * dt
            vy = b.velocity[1] + fy / b.mass * dt
            b.velocity = (vx, vy)
            b.position = (b.position[0] + vx * dt, b.position[1] + vy * dt)

    @staticmethod
    def _velocity_verlet(bodies: List[Body], forces: Forces, dt: float, accumulator: ForceAccumulator) -> None:
        half = 0.5 * dt
        for b in bodies:
            fx, fy = forces[b.id]
            vx = b.velocity[0] + fx / b.mass * half
            vy = b.velocity[1] + fy / b.mass * half
            b.velocity = (vx, vy)
            b.position = (b.position[0] + vx * dt, b.position[1] + vy * dt)

        new_forces = accumulator.compute_forces(bodies)
        for b in bodies:
            fx, fy = new_forces[b.id]
            b.velocity = (b.velocity[0] + fx / b.mass * half, b.velocity[1] + fy / b.mass * half)
