#!/usr/bin/env python3
"""
Simulation clock/driver.

What this module does
- SimulationState is the explicit state of one run: the body registry, the trace buffer,
  the speed multiplier and the paused flag. Nothing is kept in module globals, so any number
  of simulations can coexist.
- SimulationDriver executes ticks against a state in a fixed order: accumulate forces,
  integrate, resolve collisions, check every body is finite, cull escaped bodies, record
  traces.
- Simulation bundles a state with its driver and exposes the query and control surfaces
  used by the rendering/input layer.

Threading model
- Single-threaded. The renderer calls advance() once per frame and reads bodies and traces
  only between calls; no locks are needed.

Speed scaling
- advance(time_delta, speed) covers time_delta * speed of simulation time by running
  several ticks of at most base_dt each, rather than one larger tick, so per-tick
  displacement stays small enough for collisions to be seen. At most max_substeps ticks
  run per call; time beyond that is dropped and the simulation runs slower than requested.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from .collisions import CollisionEvent, CollisionResolver
from .config import SimulationConfig
from .constants import MAX_TIME_SCALE, MIN_TIME_SCALE, SPEED_FACTOR
from .data_models import Body
from .errors import ConfigurationError, NumericalInstabilityError
from .integrator import Integrator
from .physics import ForceAccumulator, kinetic_energy
from .registry import BodyRegistry
from .scenes import populate, random_galaxy
from .traces import TraceBuffer
from .vector_utils import Vec2, clamp

logger = logging.getLogger(__name__)


@dataclass
class SimulationState:
    registry: BodyRegistry
    traces: TraceBuffer
    time_scale: float = 1.0
    paused: bool = False
    tick_count: int = 0
    sim_time: float = 0.0
    valid: bool = True
    last_collision_msg: Optional[str] = None
    last_events: List[CollisionEvent] = field(default_factory=list)

    @classmethod
    def from_config(cls, config: SimulationConfig, registry: Optional[BodyRegistry] = None) -> "SimulationState":
        return cls(
            registry=registry if registry is not None else BodyRegistry(config.density),
            traces=TraceBuffer(config.trace_length, config.trace_stride),
            time_scale=config.time_scale,
        )


class SimulationDriver:
    """Stateless with respect to bodies: every call receives and returns the state it works on."""

    def __init__(self, config: SimulationConfig):
        self.config = config.validate()
        self.forces = ForceAccumulator(
            gravitational_constant=config.gravitational_constant,
            softening=config.softening,
            method=config.force_method,
            theta=config.theta,
            central_pull=config.central_pull,
        )
        self.integrator = Integrator(config.integrator, max_dt=config.base_dt)
        self.collisions = CollisionResolver(config.collision, config.gravitational_constant)

    def substeps(self, time_delta: float, speed: float) -> int:
        """Number of ticks needed to cover time_delta * speed with ticks no longer than base_dt."""
        total = time_delta * speed
        if not math.isfinite(total) or total <= 0:
            return 0
        steps = math.ceil(total / self.config.base_dt - 1e-9)
        return int(clamp(steps, 1, self.config.max_substeps))

    def advance(self, state: SimulationState, time_delta: float,
                speed_multiplier: Optional[float] = None) -> SimulationState:
        """
        Advance the state by time_delta of wall-clock time scaled by the speed multiplier
        (the state's time_scale when omitted). Does nothing while paused or for a
        non-positive effective duration.
        """
        if state.paused:
            return state
        speed = state.time_scale if speed_multiplier is None else speed_multiplier
        steps = self.substeps(time_delta, speed)
        if steps == 0:
            logger.debug("Skipping advance with time_delta=%r speed=%r", time_delta, speed)
            return state

        dt = min(time_delta * speed / steps, self.config.base_dt)
        if steps == self.config.max_substeps and time_delta * speed > steps * self.config.base_dt:
            logger.debug("Frame truncated to %d ticks of %g", steps, dt)
        for _ in range(steps):
            self.tick(state, dt)
        return state

    def tick(self, state: SimulationState, dt: float) -> SimulationState:
        """Exactly one tick: forces -> integrate -> collisions -> finiteness -> cleanup -> traces."""
        if not state.valid:
            raise NumericalInstabilityError("simulation state was invalidated by an earlier tick")
        if state.paused:
            return state

        dt = self.integrator.effective_dt(dt)
        if dt == 0.0:
            return state

        bodies = state.registry.bodies()
        forces = self.forces.compute_forces(bodies)
        self.integrator.step(bodies, forces, dt, self.forces)

        events = self.collisions.resolve(state.registry)
        if events:
            state.last_events = events
            state.last_collision_msg = events[-1].describe()

        # Before culling, so a body thrown to infinity is reported rather than removed
        self._check_finite(state)

        if self.config.bounds_radius is not None:
            for escaped in state.registry.cull_outside(self.config.bounds_radius):
                logger.debug("Removed escaped body %d", escaped.id)

        state.traces.record(state.registry.bodies())
        state.tick_count += 1
        state.sim_time += dt
        return state

    @staticmethod
    def _check_finite(state: SimulationState) -> None:
        for b in state.registry.bodies():
            if not b.is_finite():
                state.valid = False
                raise NumericalInstabilityError(
                    f"body {b.id} has non-finite state after tick {state.tick_count + 1}: "
                    f"position={b.position!r} velocity={b.velocity!r}")


class Simulation:
    """
    One simulation run: a SimulationState plus the driver configured for it.

    This is the surface the rendering/input layer talks to.
    """

    def __init__(self, config: Optional[SimulationConfig] = None, bodies: Optional[Iterable[dict]] = None):
        """
        Args:
            config: Startup configuration; defaults to SimulationConfig().
            bodies: Explicit initial bodies as dicts with mass, position, velocity and
                optionally name and color. When omitted a random galaxy of
                config.body_count suns is generated.
        """
        self.config = (config or SimulationConfig()).validate()
        self.driver = SimulationDriver(self.config)
        self.state = SimulationState.from_config(self.config)
        if bodies is None:
            random_galaxy(self.state.registry, self.config)
        else:
            populate(self.state.registry, bodies)
        logger.info(
            "Simulation created with %d bodies (collisions=%s, forces=%s, integrator=%s)",
            len(self.state.registry),
            self.config.collision.mode if self.config.collision.enable else "off",
            self.config.force_method,
            self.config.integrator,
        )

    # Tick entry point

    def advance(self, time_delta: float, speed_multiplier: Optional[float] = None) -> None:
        self.driver.advance(self.state, time_delta, speed_multiplier)

    def step_once(self) -> None:
        """Run one tick of base_dt, even while paused."""
        paused = self.state.paused
        self.state.paused = False
        try:
            self.driver.tick(self.state, self.config.base_dt)
        finally:
            self.state.paused = paused

    # Control surface

    @property
    def paused(self) -> bool:
        return self.state.paused

    @property
    def time_scale(self) -> float:
        return self.state.time_scale

    def set_paused(self, paused: bool) -> None:
        self.state.paused = bool(paused)

    def toggle_pause(self) -> bool:
        self.state.paused = not self.state.paused
        return self.state.paused

    def set_speed(self, scale: float) -> None:
        if not (isinstance(scale, (int, float)) and math.isfinite(scale) and scale > 0):
            raise ConfigurationError(f"speed must be a positive finite number, got {scale!r}")
        self.state.time_scale = float(scale)

    def speed_up(self) -> float:
        self.state.time_scale = clamp(self.state.time_scale * SPEED_FACTOR, MIN_TIME_SCALE, MAX_TIME_SCALE)
        return self.state.time_scale

    def slow_down(self) -> float:
        self.state.time_scale = clamp(self.state.time_scale / SPEED_FACTOR, MIN_TIME_SCALE, MAX_TIME_SCALE)
        return self.state.time_scale

    # Query surface

    def bodies(self) -> List[Body]:
        return self.state.registry.bodies()

    def body(self, body_id: int) -> Optional[Body]:
        return self.state.registry.get(body_id)

    def trace(self, body_id: int) -> List[Vec2]:
        return self.state.traces.trace(body_id)

    def traces(self) -> Dict[int, List[Vec2]]:
        return self.state.traces.traces()

    @property
    def last_collision_msg(self) -> Optional[str]:
        return self.state.last_collision_msg

    def total_momentum(self) -> Vec2:
        return self.state.registry.total_momentum()

    def kinetic_energy(self) -> float:
        return kinetic_energy(self.bodies())

    def total_energy(self) -> float:
        return self.driver.forces.total_energy(self.bodies())
