import math

import pytest

from nbody.config import SimulationConfig
from nbody.errors import ConfigurationError
from nbody.physics import ForceAccumulator
from nbody.registry import BodyRegistry
from nbody.scenes import figure_eight, lagrange_triangle, populate, preset_specs, random_galaxy, two_body_orbit


def test_random_galaxy_has_zero_momentum():
    config = SimulationConfig(body_count=30, seed=4)
    registry = BodyRegistry(config.density)
    suns = random_galaxy(registry, config)
    assert len(suns) == 30
    px, py = registry.total_momentum()
    assert px == pytest.approx(0.0, abs=1e-9)
    assert py == pytest.approx(0.0, abs=1e-9)
    assert all(config.min_mass <= s.mass <= config.max_mass for s in suns)
    assert all(math.hypot(*s.position) <= config.galaxy_radius for s in suns)


def test_empty_galaxy():
    config = SimulationConfig(body_count=0)
    registry = BodyRegistry()
    assert random_galaxy(registry, config) == []
    assert len(registry) == 0


def test_populate_rejects_malformed_specs(registry):
    with pytest.raises(ConfigurationError, match="#1"):
        populate(registry, [{"mass": 1.0, "position": (0, 0)}, {"position": (1, 1)}])


def test_populate_defaults_velocity_and_name(registry):
    (body,) = populate(registry, [{"mass": 2, "position": [3, 4]}])
    assert body.velocity == (0.0, 0.0)
    assert body.position == (3.0, 4.0)
    assert body.name == f"Sun {body.id}"


def test_two_body_orbit_has_zero_momentum_and_requested_separation():
    specs = two_body_orbit(m1=40.0, m2=10.0, separation=200.0)
    (x1, _), (x2, _) = specs[0]["position"], specs[1]["position"]
    assert x2 - x1 == pytest.approx(200.0)
    p = sum(s["mass"] * s["velocity"][1] for s in specs)
    assert p == pytest.approx(0.0, abs=1e-12)


def test_lagrange_triangle_rotates_rigidly(registry):
    specs = lagrange_triangle(mass=30.0, radius=150.0, gravitational_constant=1.0)
    bodies = populate(registry, specs)
    acc = ForceAccumulator(gravitational_constant=1.0, softening=0.0).compute_accelerations(bodies)
    for body in bodies:
        speed = math.hypot(*body.velocity)
        centripetal = speed * speed / 150.0
        ax, ay = acc[body.id]
        assert math.hypot(ax, ay) == pytest.approx(centripetal, rel=1e-9)
        # Acceleration points at the center
        assert ax * body.position[0] + ay * body.position[1] < 0


def test_figure_eight_has_zero_momentum():
    specs = figure_eight()
    px = sum(s["mass"] * s["velocity"][0] for s in specs)
    py = sum(s["mass"] * s["velocity"][1] for s in specs)
    assert px == pytest.approx(0.0, abs=1e-6)
    assert py == pytest.approx(0.0, abs=1e-6)


def test_preset_lookup():
    config = SimulationConfig()
    assert len(preset_specs("two_body", config)) == 2
    assert len(preset_specs("lagrange", config)) == 3
    with pytest.raises(ConfigurationError):
        preset_specs("solar_system", config)
