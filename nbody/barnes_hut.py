#!/usr/bin/env python3
"""
Barnes-Hut quadtree approximation of softened gravity.

Every node stores the total mass and center of mass of the bodies below it. When a node
is small compared to its distance from a body (width / distance < theta) the whole node
acts as one point mass; otherwise its children are visited. theta = 0 degenerates to the
exact direct sum; theta around 0.5 keeps the relative force error to roughly a percent for
typical galaxies at O(N log N) cost.

Momentum is not exactly conserved by the approximation (node forces are not pairwise
symmetric), which is why the direct method remains the default.
"""
import math
from typing import Dict, List

from .data_models import Body
from .vector_utils import Vec2

MAX_DEPTH = 32  # coincident bodies share a leaf instead of subdividing forever


class QuadTreeNode:
    __slots__ = ("x_min", "x_max", "y_min", "y_max", "bodies", "children", "mass", "com_x", "com_y")

    def __init__(self, x_min: float, x_max: float, y_min: float, y_max: float):
        self.x_min = x_min
        self.x_max = x_max
        self.y_min = y_min
        self.y_max = y_max
        self.bodies: List[Body] = []
        self.children: List["QuadTreeNode"] = []
        self.mass = 0.0
        self.com_x = 0.0
        self.com_y = 0.0

    @property
    def width(self) -> float:
        return self.x_max - self.x_min

    def contains(self, point: Vec2) -> bool:
        return self.x_min <= point[0] <= self.x_max and self.y_min <= point[1] <= self.y_max

    def insert(self, body: Body, depth: int = 0) -> None:
        if not self.children:
            # Empty leaf, or a leaf that cannot be split any further
            if not self.bodies or depth >= MAX_DEPTH:
                self.bodies.append(body)
                self._add_mass(body)
                return
            self.subdivide()
            resident = self.bodies
            self.bodies = []
            for b in resident:
                self._child_for(b).insert(b, depth + 1)
        self._child_for(body).insert(body, depth + 1)
        self._add_mass(body)

    def _add_mass(self, body: Body) -> None:
        total = self.mass + body.mass
        self.com_x = (self.com_x * self.mass + body.position[0] * body.mass) / total
        self.com_y = (self.com_y * self.mass + body.position[1] * body.mass) / total
        self.mass = total

    def _child_for(self, body: Body) -> "QuadTreeNode":
        mx = (self.x_min + self.x_max) / 2
        my = (self.y_min + self.y_max) / 2
        idx = 0
        if body.position[0] > mx:
            idx += 1
        if body.position[1] > my:
            idx += 2
        return self.children[idx]

    def subdivide(self) -> None:
        mx = (self.x_min + self.x_max) / 2
        my = (self.y_min + self.y_max) / 2
        self.children = [
            QuadTreeNode(self.x_min, mx, self.y_min, my),
            QuadTreeNode(mx, self.x_max, self.y_min, my),
            QuadTreeNode(self.x_min, mx, my, self.y_max),
            QuadTreeNode(mx, self.x_max, my, self.y_max),
        ]


def build_tree(bodies: List[Body]) -> QuadTreeNode:
    """Build a square quadtree enclosing every body."""
    min_x = min(b.position[0] for b in bodies)
    max_x = max(b.position[0] for b in bodies)
    min_y = min(b.position[1] for b in bodies)
    max_y = max(b.position[1] for b in bodies)
    cx = (min_x + max_x) / 2
    cy = (min_y + max_y) / 2
    half = max(max_x - min_x, max_y - min_y) / 2 + 1e-5

    root = QuadTreeNode(cx - half, cx + half, cy - half, cy + half)
    for body in bodies:
        root.insert(body)
    return root


def compute_forces(bodies: List[Body], G: float, softening: float, theta: float) -> Dict[int, Vec2]:
    """Approximate net gravitational force on every body, keyed by body id."""
    if not bodies:
        return {}
    root = build_tree(bodies)
    eps_squared = softening * softening
    return {b.id: _force_on_body(b, root, G, eps_squared, theta) for b in bodies}


def _force_on_body(body: Body, node: QuadTreeNode, G: float, eps_squared: float, theta: float) -> Vec2:
    if node.mass == 0:
        return (0.0, 0.0)

    if not node.children:
        # Leaf: exact contribution of every resident except the body itself
        fx, fy = 0.0, 0.0
        for other in node.bodies:
            if other is body:
                continue
            f = _pair_force(body, other.position, other.mass, G, eps_squared)
            fx += f[0]
            fy += f[1]
        return (fx, fy)

    dx = node.com_x - body.position[0]
    dy = node.com_y - body.position[1]
    dist = math.sqrt(dx * dx + dy * dy)
    if dist > 0 and node.width / dist < theta and not node.contains(body.position):
        # Approximation: the node's whole mass sits at its center of mass
        return _pair_force(body, (node.com_x, node.com_y), node.mass, G, eps_squared)

    fx, fy = 0.0, 0.0
    for child in node.children:
        cfx, cfy = _force_on_body(body, child, G, eps_squared, theta)
        fx += cfx
        fy += cfy
    return (fx, fy)


def _pair_force(body: Body, source: Vec2, source_mass: float, G: float, eps_squared: float) -> Vec2:
    dx = source[0] - body.position[0]
    dy = source[1] - body.position[1]
    r_squared_soft = dx * dx + dy * dy + eps_squared
    if r_squared_soft == 0.0:
        return (0.0, 0.0)
    magnitude = G * body.mass * source_mass / (r_squared_soft * math.sqrt(r_squared_soft))
    return (dx * magnitude, dy * magnitude)
