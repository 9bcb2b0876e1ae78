#!/usr/bin/env python3
"""
Initial body distributions.

- random_galaxy: the default scene, a disk of randomly placed suns whose velocities are
  shifted so the center of mass stays at rest.
- Presets: two-body circular orbit, Lagrange triangle and figure-eight, expressed as body
  specs (dicts of mass/position/velocity/name/color) that populate() turns into bodies.

Presets take the gravitational constant and softening of the run, because the orbital
velocities that keep them periodic depend on both.
"""
import math
import random
from typing import Dict, Iterable, List

from .config import SimulationConfig
from .constants import G
from .data_models import Body
from .errors import ConfigurationError
from .registry import BodyRegistry
from .vector_utils import random_vec

SUN_COLORS = [
    (30, 144, 255), (50, 205, 50), (255, 99, 71), (255, 179, 0),
    (142, 68, 173), (0, 184, 148), (225, 112, 85), (9, 132, 227),
]

BodySpec = Dict[str, object]


def populate(registry: BodyRegistry, specs: Iterable[BodySpec]) -> List[Body]:
    """Create one body per spec; raise ConfigurationError describing the first bad entry."""
    created = []
    for index, spec in enumerate(specs):
        try:
            mass = float(spec["mass"])
            position = (float(spec["position"][0]), float(spec["position"][1]))
            velocity = spec.get("velocity", (0.0, 0.0))
            velocity = (float(velocity[0]), float(velocity[1]))
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            raise ConfigurationError(f"body #{index}: malformed body definition {spec!r}") from exc
        kwargs = {}
        if spec.get("name"):
            kwargs["name"] = str(spec["name"])
        if spec.get("color") is not None:
            kwargs["color"] = tuple(spec["color"])
        created.append(registry.create(mass=mass, position=position, velocity=velocity, **kwargs))
    return created


def random_galaxy(registry: BodyRegistry, config: SimulationConfig) -> List[Body]:
    """
    Fill the registry with config.body_count random suns.

    Masses are uniform in [min_mass, max_mass], positions uniform in direction with a
    magnitude up to galaxy_radius, velocities random up to max_initial_speed. Afterwards
    the mean velocity (total momentum / total mass) is subtracted from every sun.
    """
    rng = random.Random(config.seed)
    suns = []
    for i in range(config.body_count):
        mass = config.min_mass + rng.random() * (config.max_mass - config.min_mass)
        suns.append(registry.create(
            mass=mass,
            position=random_vec(config.galaxy_radius, rng),
            velocity=random_vec(config.max_initial_speed, rng),
            color=SUN_COLORS[i % len(SUN_COLORS)],
        ))

    # Adjust every sun's velocity to keep the center of mass at rest
    if suns:
        total_mass = sum(s.mass for s in suns)
        drift_x = sum(s.mass * s.velocity[0] for s in suns) / total_mass
        drift_y = sum(s.mass * s.velocity[1] for s in suns) / total_mass
        for s in suns:
            s.velocity = (s.velocity[0] - drift_x, s.velocity[1] - drift_y)
    return suns


def two_body_orbit(m1: float = 40.0, m2: float = 10.0, separation: float = 200.0,
                   gravitational_constant: float = G, softening: float = 0.0) -> List[BodySpec]:
    """
    Two bodies on circular orbits around their common center of mass.

    The relative orbit is circular when v_rel^2 / d equals the softened relative
    acceleration G * (m1 + m2) * d / (d^2 + eps^2)^(3/2).
    """
    total = m1 + m2
    d = separation
    accel = gravitational_constant * total * d / (d * d + softening * softening) ** 1.5
    v_rel = math.sqrt(accel * d)
    return [
        {"name": "Primary", "mass": m1, "position": (-d * m2 / total, 0.0),
         "velocity": (0.0, -v_rel * m2 / total), "color": SUN_COLORS[3]},
        {"name": "Companion", "mass": m2, "position": (d * m1 / total, 0.0),
         "velocity": (0.0, v_rel * m1 / total), "color": SUN_COLORS[0]},
    ]


def lagrange_triangle(mass: float = 30.0, radius: float = 150.0, gravitational_constant: float = G) -> List[BodySpec]:
    """
    Equal masses on an equilateral triangle rotating rigidly about its center.

    With side s = R * sqrt(3) each body feels G * m * sqrt(3) / s^2 toward the center,
    so omega^2 = G * m / (sqrt(3) * R^3).
    """
    omega = math.sqrt(gravitational_constant * mass / (math.sqrt(3) * radius ** 3))
    v = omega * radius
    specs = []
    for k, name in enumerate("ABC"):
        angle = 2.0 * math.pi * k / 3.0
        pos = (radius * math.cos(angle), radius * math.sin(angle))
        vel = (-v * math.sin(angle), v * math.cos(angle))
        specs.append({"name": name, "mass": mass, "position": pos, "velocity": vel, "color": SUN_COLORS[k]})
    return specs


def figure_eight(mass: float = 30.0, length: float = 150.0, gravitational_constant: float = G) -> List[BodySpec]:
    """Equal-mass figure-eight periodic solution (Chenciner-Montgomery), scaled from G = m = 1."""
    V = math.sqrt(gravitational_constant * mass / length)
    r = [(-0.97000436, 0.24308753), (0.97000436, -0.24308753), (0.0, 0.0)]
    v = [(0.4662036850, 0.4323657300), (0.4662036850, 0.4323657300), (-0.93240737, -0.86473146)]
    return [
        {"name": name, "mass": mass, "position": (r[k][0] * length, r[k][1] * length),
         "velocity": (v[k][0] * V, v[k][1] * V), "color": SUN_COLORS[k]}
        for k, name in enumerate("ABC")
    ]


PRESETS = {
    "two_body": two_body_orbit,
    "lagrange": lagrange_triangle,
    "figure_eight": figure_eight,
}


def preset_specs(name: str, config: SimulationConfig) -> List[BodySpec]:
    """Body specs of a built-in preset, tuned to the run's gravitational constant."""
    if name == "two_body":
        return two_body_orbit(gravitational_constant=config.gravitational_constant, softening=config.softening)
    if name in PRESETS:
        return PRESETS[name](gravitational_constant=config.gravitational_constant)
    raise ConfigurationError(f"unknown preset {name!r}, expected one of {', '.join(sorted(PRESETS))}")
