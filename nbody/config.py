#!/usr/bin/env python3
"""
Startup configuration for a simulation run.

Both dataclasses are plain containers; `SimulationConfig.validate()` is the single place
where values are checked. Invalid values raise ConfigurationError and are never clamped,
so a typo in a scene or on the command line surfaces immediately.
"""
import math
from dataclasses import dataclass, field, replace
from typing import Optional

from .constants import (
    BASE_DT,
    DEFAULT_BODY_COUNT,
    DEFAULT_CENTRAL_PULL,
    DEFAULT_GALAXY_RADIUS,
    DEFAULT_MAX_COLLISION_PASSES,
    DEFAULT_RESTITUTION,
    DEFAULT_SOFTENING,
    DEFAULT_THETA,
    DEFAULT_TIME_SCALE,
    DEFAULT_TRACE_LENGTH,
    DEFAULT_TRACE_STRIDE,
    G,
    MAX_SUBSTEPS,
    SUN_DENSITY,
    SUN_MAX_MASS,
    SUN_MAX_STARTING_VELOCITY,
    SUN_MIN_MASS,
)
from .errors import ConfigurationError

COLLISION_MODES = ("elastic", "merge", "accretion")
PAIR_ENUMERATORS = ("direct", "grid")
FORCE_METHODS = ("direct", "barnes_hut")
INTEGRATORS = ("symplectic_euler", "velocity_verlet")


@dataclass
class CollisionSettings:
    """Container for collision-related settings."""
    enable: bool = True
    mode: str = "elastic"  # "elastic" | "merge" | "accretion"
    restitution: float = DEFAULT_RESTITUTION
    max_passes: int = DEFAULT_MAX_COLLISION_PASSES
    pair_enumerator: str = "direct"  # "direct" | "grid"

    def validate(self) -> None:
        if self.mode not in COLLISION_MODES:
            raise ConfigurationError(
                f"unknown collision mode {self.mode!r}, expected one of {', '.join(COLLISION_MODES)}")
        if self.pair_enumerator not in PAIR_ENUMERATORS:
            raise ConfigurationError(
                f"unknown pair enumerator {self.pair_enumerator!r}, expected one of {', '.join(PAIR_ENUMERATORS)}")
        if not 0.0 <= self.restitution <= 1.0:
            raise ConfigurationError(f"restitution must be within [0, 1], got {self.restitution!r}")
        if self.max_passes < 1:
            raise ConfigurationError(f"max_passes must be at least 1, got {self.max_passes!r}")


@dataclass
class SimulationConfig:
    """
    Everything the surrounding application supplies once at startup.

    The initial distribution fields (body_count .. max_initial_speed) are only read by
    nbody.scenes; the rest configure the physics components and the driver.
    """
    # Initial distribution
    body_count: int = DEFAULT_BODY_COUNT
    seed: Optional[int] = None
    galaxy_radius: float = DEFAULT_GALAXY_RADIUS
    min_mass: float = SUN_MIN_MASS
    max_mass: float = SUN_MAX_MASS
    max_initial_speed: float = SUN_MAX_STARTING_VELOCITY
    density: float = SUN_DENSITY

    # Forces
    gravitational_constant: float = G
    softening: float = DEFAULT_SOFTENING
    central_pull: float = DEFAULT_CENTRAL_PULL
    force_method: str = "direct"  # "direct" | "barnes_hut"
    theta: float = DEFAULT_THETA

    # Time stepping
    integrator: str = "symplectic_euler"  # "symplectic_euler" | "velocity_verlet"
    base_dt: float = BASE_DT
    max_substeps: int = MAX_SUBSTEPS
    time_scale: float = DEFAULT_TIME_SCALE

    # Traces and cleanup
    trace_length: int = DEFAULT_TRACE_LENGTH
    trace_stride: int = DEFAULT_TRACE_STRIDE
    bounds_radius: Optional[float] = None

    collision: CollisionSettings = field(default_factory=CollisionSettings)

    def with_overrides(self, **changes) -> "SimulationConfig":
        """Copy of this config with the given fields replaced (None values are ignored)."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    def validate(self) -> "SimulationConfig":
        """Raise ConfigurationError describing the first invalid field; return self otherwise."""
        if self.body_count < 0:
            raise ConfigurationError(f"body_count must not be negative, got {self.body_count!r}")
        _require_positive("galaxy_radius", self.galaxy_radius)
        _require_positive("min_mass", self.min_mass)
        _require_positive("max_mass", self.max_mass)
        if self.max_mass < self.min_mass:
            raise ConfigurationError(
                f"max_mass ({self.max_mass!r}) must not be smaller than min_mass ({self.min_mass!r})")
        _require_non_negative("max_initial_speed", self.max_initial_speed)
        _require_positive("density", self.density)

        _require_positive("gravitational_constant", self.gravitational_constant)
        _require_positive("softening", self.softening)
        _require_non_negative("central_pull", self.central_pull)
        if self.force_method not in FORCE_METHODS:
            raise ConfigurationError(
                f"unknown force method {self.force_method!r}, expected one of {', '.join(FORCE_METHODS)}")
        _require_positive("theta", self.theta)

        if self.integrator not in INTEGRATORS:
            raise ConfigurationError(
                f"unknown integrator {self.integrator!r}, expected one of {', '.join(INTEGRATORS)}")
        _require_positive("base_dt", self.base_dt)
        if self.max_substeps < 1:
            raise ConfigurationError(f"max_substeps must be at least 1, got {self.max_substeps!r}")
        _require_positive("time_scale", self.time_scale)

        if self.trace_length < 0:
            raise ConfigurationError(f"trace_length must not be negative, got {self.trace_length!r}")
        if self.trace_stride < 1:
            raise ConfigurationError(f"trace_stride must be at least 1, got {self.trace_stride!r}")
        if self.bounds_radius is not None:
            _require_positive("bounds_radius", self.bounds_radius)

        self.collision.validate()
        return self


def _require_positive(name: str, value: float) -> None:
    if not (isinstance(value, (int, float)) and math.isfinite(value) and value > 0):
        raise ConfigurationError(f"{name} must be a positive finite number, got {value!r}")


def _require_non_negative(name: str, value: float) -> None:
    if not (isinstance(value, (int, float)) and math.isfinite(value) and value >= 0):
        raise ConfigurationError(f"{name} must be a non-negative finite number, got {value!r}")
