#!/usr/bin/env python3
"""
Trace Buffer: bounded position history per body, for drawing motion trails.

Purely observational. Physics code never reads it; the renderer reads it between ticks.
"""
from collections import deque
from typing import Deque, Dict, Iterable, List

from .constants import DEFAULT_TRACE_LENGTH, DEFAULT_TRACE_STRIDE
from .data_models import Body
from .vector_utils import Vec2


class TraceBuffer:
    def __init__(self, max_length: int = DEFAULT_TRACE_LENGTH, stride: int = DEFAULT_TRACE_STRIDE):
        self.max_length = int(max_length)
        self.stride = max(1, int(stride))
        self._traces: Dict[int, Deque[Vec2]] = {}
        self._tick_counter = 0

    def record(self, bodies: Iterable[Body]) -> None:
        """
        Called once per tick. Every stride-th call appends each body's position, evicting the
        oldest point once max_length is reached; traces of bodies that no longer exist are
        dropped.
        """
        bodies = list(bodies)
        live = {b.id for b in bodies}
        for body_id in [i for i in self._traces if i not in live]:
            del self._traces[body_id]

        # Throttle sampling to reduce draw cost
        self._tick_counter = (self._tick_counter + 1) % self.stride
        if self._tick_counter != 0 or self.max_length == 0:
            return
        for b in bodies:
            trace = self._traces.get(b.id)
            if trace is None:
                trace = self._traces[b.id] = deque(maxlen=self.max_length)
            trace.append(b.position)

    def trace(self, body_id: int) -> List[Vec2]:
        """Oldest-first copy of a body's history; empty for unknown ids."""
        return list(self._traces.get(body_id, ()))

    def traces(self) -> Dict[int, List[Vec2]]:
        return {body_id: list(points) for body_id, points in self._traces.items()}

    def set_max_length(self, n: int) -> None:
        self.max_length = max(0, int(n))
        for body_id, trace in self._traces.items():
            self._traces[body_id] = deque(trace, maxlen=self.max_length)

    def clear(self) -> None:
        self._traces.clear()
        self._tick_counter = 0
