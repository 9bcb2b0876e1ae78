#!/usr/bin/env python3
"""
Galaxy Simulator application entry point: pygame viewport, keyboard control and drawing.

What this module does
- Builds a Simulation from command-line options, a built-in preset or a JSON template.
- Runs one pygame loop on the main thread: handle input, advance the simulation by the
  frame's real elapsed time, then draw bodies, traces and a small HUD.

Threading model
- Everything runs on the main thread. The simulation is advanced and then read for drawing
  in strict alternation, so the renderer never sees a half-finished tick.

Keys
- Space: pause/resume        +/-: speed up/slow down      N: single step while paused
- I/O or mouse wheel: zoom   WASD/arrows: pan             F: frame all bodies
- T: toggle traces           R: restart the scene         Esc/Q: quit

Running
1) Install: `pip install -e .`
2) Run: `python galaxy_sim.py --bodies 20 --collisions merge`
"""

import argparse
import logging
import sys
import time
from typing import List, Optional

import pygame

from nbody.camera import Camera2D
from nbody.config import COLLISION_MODES, FORCE_METHODS, INTEGRATORS, SimulationConfig
from nbody.constants import (
    APP_TRACE_STRIDE,
    BACKGROUND_COLOR,
    SAFE_COORD_LIMIT,
    TARGET_FPS,
    TEXT_COLOR,
    VIEW_HEIGHT,
    VIEW_WIDTH,
)
from nbody.driver import Simulation
from nbody.errors import SimulationError
from nbody.presets_loader import list_templates, load_template
from nbody.scenes import PRESETS, BodySpec, preset_specs

logger = logging.getLogger("galaxy_sim")

MOVE_DELTA = VIEW_WIDTH / 10.0  # pixels per pan key press
TRACE_FADE = 0.45


# ============================================================
# Scene setup
# ============================================================

class SceneFactory:
    """Remembers how the current scene was built so R can rebuild it."""

    def __init__(self, config: SimulationConfig, preset: Optional[str] = None, template: Optional[str] = None):
        self.config = config
        self.bodies: Optional[List[BodySpec]] = None
        if template:
            scene = load_template(template)
            self.config = scene.apply(config)
            self.bodies = scene.bodies
        elif preset:
            self.bodies = preset_specs(preset, config)

    def build(self) -> Simulation:
        return Simulation(self.config, self.bodies)


# ============================================================
# Pygame Renderer
# ============================================================

class GalaxyViewer:
    """
    Pygame loop: advances the simulation and draws bodies, traces and the HUD.
    """

    def __init__(self, scenes: SceneFactory):
        self.scenes = scenes
        self.sim = scenes.build()
        self.camera = Camera2D()
        self.surface = None
        self.clock = None
        self.font = None
        self.show_traces = True
        self.running = True

    def run(self) -> None:
        pygame.init()
        pygame.display.set_caption("Galaxy Simulator")
        self.surface = pygame.display.set_mode((VIEW_WIDTH, VIEW_HEIGHT), pygame.RESIZABLE)
        self.camera.set_viewport_size(VIEW_WIDTH, VIEW_HEIGHT)
        self.clock = pygame.time.Clock()
        self.font = pygame.font.SysFont("monospace", 14)
        self.camera.frame(self.sim.bodies(), immediate=True)

        last_time = time.perf_counter()
        try:
            while self.running:
                now = time.perf_counter()
                real_dt = now - last_time
                last_time = now

                self.handle_events()
                self.sim.advance(real_dt)
                self.camera.update()
                self.draw()

                self.clock.tick(TARGET_FPS)
        finally:
            pygame.quit()

    def restart(self) -> None:
        self.sim = self.scenes.build()
        self.camera.frame(self.sim.bodies(), immediate=True)
        logger.info("Scene restarted")

    def handle_events(self) -> None:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.VIDEORESIZE:
                self.surface = pygame.display.set_mode((event.w, event.h), pygame.RESIZABLE)
                self.camera.set_viewport_size(event.w, event.h)
            elif event.type == pygame.MOUSEWHEEL:
                if event.y > 0:
                    self.camera.zoom_in()
                elif event.y < 0:
                    self.camera.zoom_out()
            elif event.type == pygame.KEYDOWN:
                self.handle_key(event.key)

    def handle_key(self, key: int) -> None:
        if key in (pygame.K_ESCAPE, pygame.K_q):
            self.running = False
        elif key == pygame.K_SPACE:
            paused = self.sim.toggle_pause()
            logger.debug("Paused" if paused else "Resumed")
        elif key in (pygame.K_PLUS, pygame.K_EQUALS, pygame.K_KP_PLUS):
            self.sim.speed_up()
        elif key in (pygame.K_MINUS, pygame.K_KP_MINUS):
            self.sim.slow_down()
        elif key == pygame.K_n and self.sim.paused:
            self.sim.step_once()
        elif key == pygame.K_i:
            self.camera.zoom_in()
        elif key == pygame.K_o:
            self.camera.zoom_out()
        elif key in (pygame.K_a, pygame.K_LEFT):
            self.camera.pan_pixels(-MOVE_DELTA, 0)
        elif key in (pygame.K_d, pygame.K_RIGHT):
            self.camera.pan_pixels(MOVE_DELTA, 0)
        elif key in (pygame.K_w, pygame.K_UP):
            self.camera.pan_pixels(0, -MOVE_DELTA)
        elif key in (pygame.K_s, pygame.K_DOWN):
            self.camera.pan_pixels(0, MOVE_DELTA)
        elif key == pygame.K_f:
            self.camera.frame(self.sim.bodies())
        elif key == pygame.K_t:
            self.show_traces = not self.show_traces
        elif key == pygame.K_r:
            self.restart()

    def draw(self) -> None:
        surf = self.surface
        surf.fill(BACKGROUND_COLOR)

        if self.show_traces:
            for body in self.sim.bodies():
                points = [_safe_point(self.camera.world_to_screen(p)) for p in self.sim.trace(body.id)]
                if len(points) >= 2:
                    color = tuple(int(c * TRACE_FADE) for c in body.color)
                    pygame.draw.lines(surf, color, False, points, 1)

        for body in self.sim.bodies():
            center = _safe_point(self.camera.world_to_screen(body.position))
            # Radius + 1 so bodies stay visible at far-out zooms
            radius = int(body.radius * self.camera.zoom) + 1
            pygame.draw.circle(surf, body.color, center, min(radius, SAFE_COORD_LIMIT))

        self.draw_hud(surf)
        pygame.display.flip()

    def draw_hud(self, surf) -> None:
        lines = [
            f"{'PAUSED' if self.sim.paused else 'running'}  speed x{self.sim.time_scale:g}",
            f"bodies {len(self.sim.bodies())}  t={self.sim.state.sim_time:.1f}",
        ]
        if self.sim.last_collision_msg:
            lines.append(self.sim.last_collision_msg)
        y = 8
        for text in lines:
            surf.blit(self.font.render(text, True, TEXT_COLOR), (8, y))
            y += 18


def _safe_point(pt):
    x, y = pt
    return (max(-SAFE_COORD_LIMIT, min(SAFE_COORD_LIMIT, x)),
            max(-SAFE_COORD_LIMIT, min(SAFE_COORD_LIMIT, y)))


# ============================================================
# Application Entry
# ============================================================

def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Interactive n-body galaxy simulator")
    p.add_argument("--bodies", type=int, default=None, help="number of random suns")
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--radius", type=float, default=None, help="galaxy radius of the random scene")
    p.add_argument("--collisions", choices=COLLISION_MODES + ("off",), default=None)
    p.add_argument("--forces", choices=FORCE_METHODS, default=None)
    p.add_argument("--integrator", choices=INTEGRATORS, default=None)
    p.add_argument("--softening", type=float, default=None)
    p.add_argument("--central-pull", type=float, default=None,
                   help="weak pull toward the origin that keeps a random galaxy together")
    p.add_argument("--speed", type=float, default=None)
    p.add_argument("--trace-length", type=int, default=None)
    p.add_argument("--bounds", type=float, default=None, help="remove bodies beyond this distance")
    p.add_argument("--preset", choices=sorted(PRESETS), default=None)
    p.add_argument("--template", default=None, help="JSON scene template (file name or path)")
    p.add_argument("--list-templates", action="store_true")
    p.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return p.parse_args(argv)


def build_config(args) -> SimulationConfig:
    config = SimulationConfig().with_overrides(
        body_count=args.bodies,
        seed=args.seed,
        galaxy_radius=args.radius,
        force_method=args.forces,
        integrator=args.integrator,
        softening=args.softening,
        central_pull=args.central_pull,
        time_scale=args.speed,
        trace_length=args.trace_length,
        trace_stride=APP_TRACE_STRIDE,
        bounds_radius=args.bounds,
    )
    if args.collisions == "off":
        config.collision.enable = False
    elif args.collisions:
        config.collision.mode = args.collisions
    return config.validate()


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if args.list_templates:
        for file_name, display in list_templates():
            print(f"{file_name:24s} {display}")
        return 0

    try:
        scenes = SceneFactory(build_config(args), preset=args.preset, template=args.template)
        viewer = GalaxyViewer(scenes)
    except SimulationError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 2

    try:
        viewer.run()
    except SimulationError:
        logger.exception("Simulation stopped")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
