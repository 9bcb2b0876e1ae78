#!/usr/bin/env python3
"""
Body Registry: the mutable set of simulated bodies.

Bodies are stored in an id -> Body mapping (O(1) lookup for trace correlation). Ids are
handed out from a monotonically increasing counter, so iterating the mapping yields bodies
in ascending id order; physics code relies on that only to enumerate pairs the same way
every tick, never for meaning.

Only the Integrator (position/velocity) and the CollisionResolver (velocity, merge,
removal) mutate bodies; everything else reads.
"""
import copy
import itertools
import logging
from typing import Dict, Iterator, List, Optional, Tuple

from .constants import DEFAULT_BODY_COLOR, SUN_DENSITY
from .data_models import Body, radius_from_mass
from .errors import ConfigurationError
from .vector_utils import ZERO, Vec2

logger = logging.getLogger(__name__)


class BodyRegistry:
    """Owns every Body of one simulation run."""

    def __init__(self, density: float = SUN_DENSITY):
        if density <= 0:
            raise ConfigurationError(f"density must be positive, got {density!r}")
        self.density = density
        self._bodies: Dict[int, Body] = {}
        self._ids = itertools.count()

    def __len__(self) -> int:
        return len(self._bodies)

    def __iter__(self) -> Iterator[Body]:
        return iter(list(self._bodies.values()))

    def __contains__(self, body_id: int) -> bool:
        return body_id in self._bodies

    def radius_for(self, mass: float) -> float:
        return radius_from_mass(mass, self.density)

    def create(self, mass: float, position: Vec2, velocity: Vec2 = ZERO, name: str = "",
               color: Tuple[int, int, int] = DEFAULT_BODY_COLOR) -> Body:
        """Create a body with a fresh id and a radius derived from its mass, and register it."""
        body = Body(
            id=next(self._ids),
            mass=float(mass),
            radius=self.radius_for(float(mass)),
            position=position,
            velocity=velocity,
            name=name,
            color=color,
        )
        self._bodies[body.id] = body
        return body

    def remove(self, body_id: int) -> Body:
        try:
            return self._bodies.pop(body_id)
        except KeyError:
            raise KeyError(f"no body with id {body_id}") from None

    def get(self, body_id: int) -> Optional[Body]:
        return self._bodies.get(body_id)

    def bodies(self) -> List[Body]:
        """All bodies in ascending id order."""
        return list(self._bodies.values())

    def ids(self) -> List[int]:
        return list(self._bodies.keys())

    def clear(self) -> None:
        self._bodies.clear()

    def snapshot(self) -> List[Body]:
        """Independent copies of every body, for rendering between ticks or for comparisons."""
        return [copy.copy(b) for b in self._bodies.values()]

    def total_mass(self) -> float:
        return sum(b.mass for b in self._bodies.values())

    def total_momentum(self) -> Vec2:
        px = sum(b.mass * b.velocity[0] for b in self._bodies.values())
        py = sum(b.mass * b.velocity[1] for b in self._bodies.values())
        return (px, py)

    def center_of_mass(self) -> Vec2:
        m = self.total_mass()
        if m <= 0:
            return ZERO
        cx = sum(b.mass * b.position[0] for b in self._bodies.values()) / m
        cy = sum(b.mass * b.position[1] for b in self._bodies.values()) / m
        return (cx, cy)

    def cull_outside(self, bounds_radius: float) -> List[Body]:
        """Destroy bodies farther than bounds_radius from the origin; return the removed bodies."""
        limit_sq = bounds_radius * bounds_radius
        escaped = [b for b in self._bodies.values()
                   if b.position[0] * b.position[0] + b.position[1] * b.position[1] > limit_sq]
        for b in escaped:
            del self._bodies[b.id]
            logger.debug("Body %d escaped the bounded region at %r", b.id, b.position)
        return escaped
