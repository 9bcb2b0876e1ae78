#!/usr/bin/env python3
"""
Camera utilities for 2D world-to-screen transforms.

World y points up, screen y points down. Zoom is in pixels per world unit. Zoom and center
move toward their targets a fraction per frame, which gives smooth keyboard navigation.
"""
from typing import Iterable, List, Tuple

from .constants import (
    DEFAULT_ZOOM,
    MAX_ZOOM,
    MIN_ZOOM,
    MOVE_SMOOTH,
    VIEW_HEIGHT,
    VIEW_WIDTH,
    ZOOM_FACTOR,
    ZOOM_SMOOTH,
)
from .data_models import Body
from .vector_utils import Vec2, clamp


class Camera2D:
    """
    Simple 2D camera that maps world coordinates to screen pixels.
    """

    def __init__(self, center: Vec2 = (0.0, 0.0), zoom: float = DEFAULT_ZOOM):
        self.center: List[float] = [center[0], center[1]]
        self.center_target: List[float] = [center[0], center[1]]
        self.zoom = zoom
        self.zoom_target = zoom
        self.viewport_size = (VIEW_WIDTH, VIEW_HEIGHT)

    def set_viewport_size(self, w: int, h: int) -> None:
        self.viewport_size = (w, h)

    def world_to_screen(self, pos: Vec2) -> Tuple[int, int]:
        cx, cy = self.center
        px = (pos[0] - cx) * self.zoom + self.viewport_size[0] / 2
        py = -(pos[1] - cy) * self.zoom + self.viewport_size[1] / 2
        return (int(px), int(py))

    def screen_to_world(self, screen: Tuple[int, int]) -> Vec2:
        cx, cy = self.center
        wx = (screen[0] - self.viewport_size[0] / 2) / self.zoom + cx
        wy = -(screen[1] - self.viewport_size[1] / 2) / self.zoom + cy
        return (wx, wy)

    def zoom_in(self, factor: float = ZOOM_FACTOR) -> None:
        self.zoom_target = clamp(self.zoom_target * factor, MIN_ZOOM, MAX_ZOOM)

    def zoom_out(self, factor: float = ZOOM_FACTOR) -> None:
        self.zoom_target = clamp(self.zoom_target / factor, MIN_ZOOM, MAX_ZOOM)

    def pan_pixels(self, dx_pixels: float, dy_pixels: float) -> None:
        """Move the target center by a screen-space offset (screen y down)."""
        self.center_target[0] += dx_pixels / self.zoom_target
        self.center_target[1] -= dy_pixels / self.zoom_target

    def update(self) -> None:
        """Move zoom and center one smoothing step toward their targets."""
        self.zoom += (self.zoom_target - self.zoom) * ZOOM_SMOOTH
        self.center[0] += (self.center_target[0] - self.center[0]) * MOVE_SMOOTH
        self.center[1] += (self.center_target[1] - self.center[1]) * MOVE_SMOOTH

    def frame(self, bodies: Iterable[Body], margin: float = 1.3, immediate: bool = False) -> None:
        """
        Target a view that fits all bodies with margin; immediate skips smoothing.
        """
        bodies = list(bodies)
        if not bodies:
            target_center: Vec2 = (0.0, 0.0)
            target_zoom = DEFAULT_ZOOM
        else:
            xs = [b.position[0] for b in bodies]
            ys = [b.position[1] for b in bodies]
            minx, maxx = min(xs), max(xs)
            miny, maxy = min(ys), max(ys)
            target_center = ((minx + maxx) / 2, (miny + maxy) / 2)
            width = (maxx - minx) * margin + 1.0
            height = (maxy - miny) * margin + 1.0
            target_zoom = clamp(min(self.viewport_size[0] / width, self.viewport_size[1] / height),
                                MIN_ZOOM, MAX_ZOOM)

        self.center_target = [target_center[0], target_center[1]]
        self.zoom_target = target_zoom
        if immediate:
            self.center = list(self.center_target)
            self.zoom = self.zoom_target
