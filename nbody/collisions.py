#!/usr/bin/env python3
"""
Collision handling for the galaxy simulator.

Supports three modes:
- elastic: Impulse exchange along the line of centers; conserves momentum and, with
  restitution 1, kinetic energy. Overlap is removed by pushing the pair apart.
- merge: Perfectly inelastic merge conserving momentum; the pair is replaced by one new body
  at the center of mass whose radius follows the registry's mass-to-radius mapping.
- accretion: Merge if the relative speed is below the pair's mutual escape velocity; else
  elastic.

Resolution order
Detection and resolution run in passes. Each pass collects every overlapping pair, sorts the
pairs by (smaller id, larger id) and resolves them in that order against the current state,
skipping pairs whose body was already merged away in the same pass. Passes repeat until one
finds no overlap or max_passes is reached, so the outcome depends only on the state and never
on incidental iteration order.

Candidate pairs come from a pair enumerator: DirectPairEnumerator checks every pair,
GridPairEnumerator buckets bodies into a uniform grid first. Both yield the same pairs.
"""
import logging
import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Set, Tuple

from .config import CollisionSettings
from .constants import G
from .data_models import Body
from .errors import ConfigurationError
from .physics import escape_velocity
from .registry import BodyRegistry
from .vector_utils import vec_len, vec_sub

logger = logging.getLogger(__name__)

# Fraction of the contact distance added when separating, so rounding cannot leave the pair
# a hair inside each other.
SEPARATION_SLOP = 1e-9

Pair = Tuple[Body, Body]


# ============================================================
# Pair enumeration
# ============================================================

class PairEnumerator:
    """Yields candidate pairs (a, b) with a.id < b.id; may include pairs that do not touch."""

    def candidate_pairs(self, bodies: List[Body]) -> Iterable[Pair]:
        raise NotImplementedError


class DirectPairEnumerator(PairEnumerator):
    """Every unordered pair, O(N^2)."""

    def candidate_pairs(self, bodies: List[Body]) -> Iterable[Pair]:
        ordered = sorted(bodies, key=lambda b: b.id)
        n = len(ordered)
        for i in range(n):
            for j in range(i + 1, n):
                yield ordered[i], ordered[j]


class GridPairEnumerator(PairEnumerator):
    """
    Uniform spatial hash with cells as wide as the largest body's diameter.

    Two bodies can only touch when their cells are neighbors, so only the 3x3 block around
    each cell is searched.
    """

    def candidate_pairs(self, bodies: List[Body]) -> Iterable[Pair]:
        if len(bodies) < 2:
            return []
        cell_size = 2.0 * max(b.radius for b in bodies)
        grid: Dict[Tuple[int, int], List[Body]] = {}
        for b in bodies:
            key = (math.floor(b.position[0] / cell_size), math.floor(b.position[1] / cell_size))
            grid.setdefault(key, []).append(b)

        pairs: Dict[Tuple[int, int], Pair] = {}
        for (cx, cy), members in grid.items():
            for dx in (-1, 0, 1):
                for dy in (-1, 0, 1):
                    neighbors = grid.get((cx + dx, cy + dy))
                    if not neighbors:
                        continue
                    for a in members:
                        for b in neighbors:
                            if a.id < b.id:
                                pairs[(a.id, b.id)] = (a, b)
        return [pairs[k] for k in sorted(pairs)]


def make_pair_enumerator(name: str) -> PairEnumerator:
    if name == "direct":
        return DirectPairEnumerator()
    elif name == "grid":
        return GridPairEnumerator()
    raise ConfigurationError(f"unknown pair enumerator {name!r}")


# ============================================================
# Resolution
# ============================================================

@dataclass(frozen=True)
class CollisionEvent:
    """One resolved collision; result_id is the new body's id for merges."""
    kind: str  # "bounce" | "merge"
    first_id: int
    second_id: int
    result_id: Optional[int] = None

    def describe(self) -> str:
        if self.kind == "merge":
            return f"Merged {self.first_id} + {self.second_id} -> {self.result_id}"
        return f"Elastic collision: {self.first_id} <-> {self.second_id}"

    __str__ = describe


def overlapping(a: Body, b: Body) -> bool:
    dx = b.position[0] - a.position[0]
    dy = b.position[1] - a.position[1]
    r_sum = a.radius + b.radius
    return dx * dx + dy * dy < r_sum * r_sum


def find_overlaps(bodies: List[Body], enumerator: Optional[PairEnumerator] = None) -> List[Pair]:
    """Every overlapping pair, sorted by canonical (id, id) key."""
    enumerator = enumerator or DirectPairEnumerator()
    found = [(a, b) for a, b in enumerator.candidate_pairs(bodies) if overlapping(a, b)]
    found.sort(key=lambda p: (p[0].id, p[1].id))
    return found


class CollisionResolver:
    def __init__(self, settings: Optional[CollisionSettings] = None, gravitational_constant: float = G):
        self.settings = settings or CollisionSettings()
        self.settings.validate()
        self.G = gravitational_constant
        self.enumerator = make_pair_enumerator(self.settings.pair_enumerator)

    def resolve(self, registry: BodyRegistry) -> List[CollisionEvent]:
        """
        Detect and resolve collisions in the registry.

        Returns the resolved collisions in resolution order.
        """
        events: List[CollisionEvent] = []
        if not self.settings.enable or len(registry) < 2:
            return events

        for pass_index in range(self.settings.max_passes):
            pairs = find_overlaps(registry.bodies(), self.enumerator)
            if not pairs:
                break
            consumed: Set[int] = set()
            for a, b in pairs:
                if a.id in consumed or b.id in consumed:
                    continue
                # An earlier pair in this pass may already have pushed these two apart
                if not overlapping(a, b):
                    continue
                event = self._resolve_pair(registry, a, b)
                if event.kind == "merge":
                    consumed.update((a.id, b.id))
                logger.debug("Pass %d: %s", pass_index, event)
                events.append(event)
        else:
            remaining = len(find_overlaps(registry.bodies(), self.enumerator))
            if remaining:
                logger.debug("%d overlaps persist after %d collision passes", remaining, self.settings.max_passes)

        return events

    def _resolve_pair(self, registry: BodyRegistry, a: Body, b: Body) -> CollisionEvent:
        mode = self.settings.mode
        if mode == "merge":
            return merge_pair(registry, a, b)
        if mode == "accretion":
            vrx = b.velocity[0] - a.velocity[0]
            vry = b.velocity[1] - a.velocity[1]
            v_esc = escape_velocity(a.mass + b.mass, a.radius + b.radius, self.G)
            if math.hypot(vrx, vry) < v_esc:
                return merge_pair(registry, a, b)
        bounce_pair(a, b, self.settings.restitution)
        return CollisionEvent("bounce", a.id, b.id)


def collision_normal(a: Body, b: Body) -> Tuple[float, float, float]:
    """Unit normal pointing from a to b and the center distance; (1, 0) for coincident centers."""
    dx, dy = vec_sub(b.position, a.position)
    dist = vec_len((dx, dy))
    if dist == 0.0:
        return 1.0, 0.0, 0.0
    return dx / dist, dy / dist, dist


def bounce_pair(a: Body, b: Body, restitution: float = 1.0) -> None:
    """
    Exchange the normal velocity components of an overlapping pair and push it apart.

    With restitution e the normal components become
        v1' = (m1*v1 + m2*v2 + m2*e*(v2 - v1)) / (m1 + m2)
        v2' = (m1*v1 + m2*v2 + m1*e*(v1 - v2)) / (m1 + m2)
    which for e = 1 is the 1-D elastic formula v1' = ((m1 - m2)*v1 + 2*m2*v2) / (m1 + m2).
    Tangential components are untouched. Separating pairs keep their velocities.
    """
    nx, ny, dist = collision_normal(a, b)
    m1, m2 = a.mass, b.mass
    m_total = m1 + m2

    v1n = a.velocity[0] * nx + a.velocity[1] * ny
    v2n = b.velocity[0] * nx + b.velocity[1] * ny
    if v2n - v1n < 0:
        p_n = m1 * v1n + m2 * v2n
        v1n_new = (p_n + m2 * restitution * (v2n - v1n)) / m_total
        v2n_new = (p_n + m1 * restitution * (v1n - v2n)) / m_total
        a.velocity = (a.velocity[0] + (v1n_new - v1n) * nx, a.velocity[1] + (v1n_new - v1n) * ny)
        b.velocity = (b.velocity[0] + (v2n_new - v2n) * nx, b.velocity[1] + (v2n_new - v2n) * ny)

    # Resolve overlap inversely proportional to mass; keeps the center of mass in place
    r_sum = a.radius + b.radius
    overlap = r_sum - dist
    if overlap > 0:
        overlap += r_sum * SEPARATION_SLOP
        inv_a = 1.0 / m1
        inv_b = 1.0 / m2
        inv_sum = inv_a + inv_b
        corr_a = -overlap * (inv_a / inv_sum)
        corr_b = overlap * (inv_b / inv_sum)
        a.position = (a.position[0] + nx * corr_a, a.position[1] + ny * corr_a)
        b.position = (b.position[0] + nx * corr_b, b.position[1] + ny * corr_b)


def merge_pair(registry: BodyRegistry, a: Body, b: Body) -> CollisionEvent:
    """Replace a and b by one new body carrying their combined mass and momentum."""
    m_total = a.mass + b.mass
    heavier = a if a.mass >= b.mass else b

    new_pos = ((a.position[0] * a.mass + b.position[0] * b.mass) / m_total,
               (a.position[1] * a.mass + b.position[1] * b.mass) / m_total)
    new_vel = ((a.velocity[0] * a.mass + b.velocity[0] * b.mass) / m_total,
               (a.velocity[1] * a.mass + b.velocity[1] * b.mass) / m_total)

    registry.remove(a.id)
    registry.remove(b.id)
    merged = registry.create(
        mass=m_total,
        position=new_pos,
        velocity=new_vel,
        name=f"{a.name}+{b.name}",
        color=heavier.color,
    )
    return CollisionEvent("merge", a.id, b.id, merged.id)
