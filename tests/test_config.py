import pytest

from nbody.config import CollisionSettings, SimulationConfig
from nbody.data_models import Body, radius_from_mass
from nbody.errors import ConfigurationError, SimulationError


def test_defaults_are_valid():
    config = SimulationConfig().validate()
    assert config.collision.mode == "elastic"
    assert config.force_method == "direct"


@pytest.mark.parametrize("field, value", [
    ("body_count", -1),
    ("min_mass", 0.0),
    ("max_mass", -5.0),
    ("density", 0.0),
    ("base_dt", 0.0),
    ("base_dt", -0.01),
    ("gravitational_constant", 0.0),
    ("softening", -1.0),
    ("softening", 0.0),
    ("time_scale", 0.0),
    ("max_substeps", 0),
    ("trace_stride", 0),
    ("trace_length", -1),
    ("bounds_radius", 0.0),
    ("force_method", "fmm"),
    ("integrator", "rk4"),
    ("theta", 0.0),
    ("galaxy_radius", float("inf")),
])
def test_invalid_values_are_rejected(field, value):
    config = SimulationConfig(**{field: value})
    with pytest.raises(ConfigurationError, match=field.split("_")[0]):
        config.validate()


def test_mass_range_must_be_ordered():
    with pytest.raises(ConfigurationError, match="max_mass"):
        SimulationConfig(min_mass=10.0, max_mass=5.0).validate()


@pytest.mark.parametrize("settings", [
    CollisionSettings(mode="bounce"),
    CollisionSettings(restitution=1.5),
    CollisionSettings(restitution=-0.1),
    CollisionSettings(max_passes=0),
    CollisionSettings(pair_enumerator="octree"),
])
def test_invalid_collision_settings_are_rejected(settings):
    with pytest.raises(ConfigurationError):
        SimulationConfig(collision=settings).validate()


def test_configuration_error_is_a_value_error():
    assert issubclass(ConfigurationError, ValueError)
    assert issubclass(ConfigurationError, SimulationError)


def test_with_overrides_ignores_none():
    config = SimulationConfig(body_count=5).with_overrides(body_count=None, softening=2.0)
    assert config.body_count == 5
    assert config.softening == 2.0


def test_radius_grows_with_mass():
    assert radius_from_mass(8.0, 1.0) == pytest.approx(2.0 * radius_from_mass(1.0, 1.0))
    with pytest.raises(ConfigurationError):
        radius_from_mass(0.0)


@pytest.mark.parametrize("kwargs", [
    dict(mass=0.0, radius=1.0),
    dict(mass=1.0, radius=-1.0),
    dict(mass=1.0, radius=1.0, position=(float("nan"), 0.0)),
    dict(mass=1.0, radius=1.0, velocity=(0.0, float("inf"))),
])
def test_invalid_bodies_are_rejected(kwargs):
    values = dict(id=0, mass=1.0, radius=1.0, position=(0.0, 0.0), velocity=(0.0, 0.0))
    values.update(kwargs)
    with pytest.raises(ConfigurationError):
        Body(**values)
