import pytest

from nbody.config import CollisionSettings, SimulationConfig
from nbody.registry import BodyRegistry

# Dense bodies keep radii small (mass 1 -> radius ~0.062) so tests that are not about
# collisions never trigger one.
TEST_DENSITY = 1000.0


@pytest.fixture
def registry():
    return BodyRegistry(density=TEST_DENSITY)


@pytest.fixture
def make_config():
    def _make(collision=None, **overrides):
        values = dict(
            body_count=0,
            seed=1234,
            density=TEST_DENSITY,
            gravitational_constant=1.0,
            softening=0.1,
            base_dt=0.01,
            trace_stride=1,
            trace_length=50,
        )
        values.update(overrides)
        config = SimulationConfig(collision=collision or CollisionSettings(), **values)
        return config.validate()
    return _make


def pair_specs(m1=1.0, m2=1.0, p1=(-1.0, 0.0), p2=(1.0, 0.0), v1=(0.0, 0.0), v2=(0.0, 0.0)):
    return [
        {"mass": m1, "position": p1, "velocity": v1},
        {"mass": m2, "position": p2, "velocity": v2},
    ]
