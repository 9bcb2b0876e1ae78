import copy

import pytest

from conftest import pair_specs
from nbody.config import CollisionSettings, SimulationConfig
from nbody.constants import BASE_DT
from nbody.driver import Simulation, SimulationDriver, SimulationState
from nbody.errors import ConfigurationError, NumericalInstabilityError


def snapshot(sim):
    return copy.deepcopy(sim.bodies()), sim.traces()


def test_paused_advance_changes_nothing(make_config):
    sim = Simulation(make_config(body_count=8, galaxy_radius=50.0))
    sim.advance(0.05)
    sim.set_paused(True)
    before = snapshot(sim)
    ticks = sim.state.tick_count
    for _ in range(25):
        sim.advance(0.05, 4.0)
    assert snapshot(sim) == before
    assert sim.state.tick_count == ticks


def test_resume_after_pause(make_config):
    sim = Simulation(make_config(), pair_specs())
    sim.set_paused(True)
    assert sim.toggle_pause() is False
    sim.advance(0.01)
    assert sim.state.tick_count == 1


def test_speed_multiplier_runs_more_ticks(make_config):
    sim = Simulation(make_config(base_dt=0.01), pair_specs())
    sim.advance(0.05, 2.0)
    assert sim.state.tick_count == 10
    assert sim.state.sim_time == pytest.approx(0.1)


def test_time_scale_is_used_when_no_multiplier_given(make_config):
    sim = Simulation(make_config(base_dt=0.01), pair_specs())
    sim.set_speed(3.0)
    sim.advance(0.01)
    assert sim.state.tick_count == 3


def test_fractional_frames_use_equal_ticks(make_config):
    sim = Simulation(make_config(base_dt=0.01), pair_specs())
    sim.advance(0.025)
    assert sim.state.tick_count == 3
    assert sim.state.sim_time == pytest.approx(0.025)


def test_substeps_are_capped(make_config):
    sim = Simulation(make_config(base_dt=0.01, max_substeps=5), pair_specs())
    sim.advance(1.0)
    assert sim.state.tick_count == 5
    assert sim.state.sim_time == pytest.approx(0.05)


@pytest.mark.parametrize("time_delta, speed", [(0.0, 1.0), (-1.0, 1.0), (0.1, 0.0), (0.1, -2.0)])
def test_non_positive_duration_is_skipped(make_config, time_delta, speed):
    sim = Simulation(make_config(), pair_specs())
    before = snapshot(sim)
    sim.advance(time_delta, speed)
    assert snapshot(sim) == before
    assert sim.state.tick_count == 0


def test_set_speed_rejects_non_positive(make_config):
    sim = Simulation(make_config(), pair_specs())
    for bad in (0.0, -1.0, float("nan")):
        with pytest.raises(ConfigurationError):
            sim.set_speed(bad)


def test_speed_up_and_slow_down(make_config):
    sim = Simulation(make_config(time_scale=1.0), pair_specs())
    assert sim.speed_up() == 2.0
    assert sim.speed_up() == 4.0
    assert sim.slow_down() == 2.0


def test_step_once_ticks_while_paused(make_config):
    sim = Simulation(make_config(), pair_specs())
    sim.set_paused(True)
    sim.step_once()
    assert sim.state.tick_count == 1
    assert sim.paused


def test_non_finite_state_is_fatal(make_config):
    sim = Simulation(make_config(), pair_specs())
    sim.bodies()[0].velocity = (float("inf"), 0.0)
    with pytest.raises(NumericalInstabilityError):
        sim.advance(0.01)
    assert sim.state.valid is False
    with pytest.raises(NumericalInstabilityError):
        sim.advance(0.01)


def test_non_finite_body_is_fatal_even_when_it_escapes_bounds(make_config):
    sim = Simulation(make_config(bounds_radius=10.0), pair_specs())
    sim.bodies()[0].velocity = (float("inf"), 0.0)
    with pytest.raises(NumericalInstabilityError):
        sim.advance(0.01)
    assert sim.state.valid is False
    assert len(sim.bodies()) == 2


def test_default_config_records_a_trace_point_every_tick():
    sim = Simulation(SimulationConfig(), pair_specs(p1=(-50.0, 0.0), p2=(50.0, 0.0)))
    sim.advance(BASE_DT)
    assert sim.state.tick_count == 1
    for body in sim.bodies():
        assert sim.trace(body.id) == [body.position]
    sim.advance(BASE_DT)
    assert all(len(sim.trace(b.id)) == 2 for b in sim.bodies())


def test_traces_follow_ticks(make_config):
    sim = Simulation(make_config(trace_stride=1, trace_length=4), pair_specs())
    for _ in range(6):
        sim.advance(0.01)
    for body in sim.bodies():
        trace = sim.trace(body.id)
        assert len(trace) == 4
        assert trace[-1] == body.position


def test_head_on_bodies_merge(make_config):
    config = make_config(collision=CollisionSettings(mode="merge"), softening=0.1)
    sim = Simulation(config, pair_specs(p1=(-0.2, 0.0), p2=(0.2, 0.0), v1=(3.0, 0.0), v2=(-1.0, 0.0)))
    p_before = sim.total_momentum()
    for _ in range(20):
        sim.advance(0.01)
    assert len(sim.bodies()) == 1
    assert sim.total_momentum() == pytest.approx(p_before, abs=1e-9)
    assert sim.last_collision_msg.startswith("Merged")
    assert sim.bodies()[0].mass == pytest.approx(2.0)


def test_elastic_tick_leaves_no_overlap(make_config):
    config = make_config(collision=CollisionSettings(mode="elastic"))
    sim = Simulation(config, pair_specs(p1=(-0.07, 0.0), p2=(0.07, 0.0), v1=(1.0, 0.0), v2=(-1.0, 0.0)))
    p_before = sim.total_momentum()
    sim.advance(0.01)
    a, b = sim.bodies()
    assert b.position[0] - a.position[0] >= a.radius + b.radius
    assert a.velocity[0] < 0 < b.velocity[0]
    assert sim.total_momentum() == pytest.approx(p_before, abs=1e-12)


def test_escaped_bodies_are_removed(make_config):
    sim = Simulation(make_config(bounds_radius=10.0),
                     pair_specs(p1=(0.0, 0.0), p2=(9.999, 0.0), v2=(5.0, 0.0)))
    sim.advance(0.01)
    assert [b.position[0] < 10.0 for b in sim.bodies()] == [True]
    assert sim.trace(1) == []


def test_simulations_are_independent(make_config):
    first = Simulation(make_config(), pair_specs())
    second = Simulation(make_config(), pair_specs())
    first.advance(0.1)
    assert second.state.tick_count == 0
    assert [b.position for b in second.bodies()] == [(-1.0, 0.0), (1.0, 0.0)]


def test_driver_works_on_explicit_state(make_config):
    config = make_config()
    driver = SimulationDriver(config)
    state = SimulationState.from_config(config)
    state.registry.create(mass=1.0, position=(0.0, 0.0))
    state.registry.create(mass=1.0, position=(1.0, 0.0))
    returned = driver.tick(state, config.base_dt)
    assert returned is state
    assert state.tick_count == 1
    assert driver.substeps(0.02, 1.0) == 2
    assert driver.substeps(0.02, 0.0) == 0


def test_random_galaxy_is_reproducible(make_config):
    a = Simulation(make_config(body_count=10, seed=99))
    b = Simulation(make_config(body_count=10, seed=99))
    a.advance(0.1)
    b.advance(0.1)
    assert [(x.position, x.velocity) for x in a.bodies()] == [(y.position, y.velocity) for y in b.bodies()]
