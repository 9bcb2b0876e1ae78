#!/usr/bin/env python3
"""
Scene template loading utilities.

Templates are JSON files in nbody/templates/ describing a set of bodies to spawn, an
optional time scale and optional overrides of SimulationConfig fields.

Schema
======
{
  "name": "Human-friendly preset name",
  "description": "Optional description",
  "time_scale": 2.0,                 # optional
  "config": {"softening": 2.0},      # optional SimulationConfig overrides
  "bodies": [
    {
      "name": "Primary",
      "mass": 40.0,
      "position": [0.0, 0.0],
      "velocity": [0.0, 0.0],
      "color": [255, 204, 0]         # optional
    }
  ]
}

Radii are not part of the schema: every body's radius follows from its mass. Users can add
their own JSON files into the folder and they'll be picked up by the loader.
"""
import json
import logging
import os
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional, Tuple

from .config import CollisionSettings, SimulationConfig
from .errors import ConfigurationError
from .scenes import BodySpec

logger = logging.getLogger(__name__)

TEMPLATES_DIR = os.path.join(os.path.dirname(__file__), "templates")


@dataclass
class SceneTemplate:
    name: str
    bodies: List[BodySpec]
    description: str = ""
    time_scale: Optional[float] = None
    config: Dict[str, Any] = field(default_factory=dict)

    def apply(self, base: SimulationConfig) -> SimulationConfig:
        """base with this template's overrides and time scale applied, validated."""
        overrides = dict(self.config)
        collision = overrides.pop("collision", None)
        known = {f.name for f in fields(SimulationConfig)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise ConfigurationError(f"template {self.name!r}: unknown config fields {', '.join(unknown)}")
        if self.time_scale is not None:
            overrides["time_scale"] = float(self.time_scale)
        if collision is not None:
            try:
                overrides["collision"] = CollisionSettings(**{**vars(base.collision), **collision})
            except TypeError as exc:
                raise ConfigurationError(f"template {self.name!r}: bad collision settings {collision!r}") from exc
        return base.with_overrides(**overrides).validate()


def _read_json(path: str) -> dict:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as exc:
        raise ConfigurationError(f"cannot read scene template {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"scene template {path} must contain a JSON object")
    return data


def _coerce_color(c: List[int]) -> Tuple[int, int, int]:
    try:
        r, g, b = int(c[0]), int(c[1]), int(c[2])
    except (TypeError, ValueError, IndexError):
        return (200, 200, 255)
    r = max(0, min(255, r)); g = max(0, min(255, g)); b = max(0, min(255, b))
    return (r, g, b)


def _coerce_body(entry: Any) -> Optional[BodySpec]:
    try:
        spec = {
            "name": str(entry.get("name", "")),
            "mass": float(entry["mass"]),
            "position": (float(entry["position"][0]), float(entry["position"][1])),
            "velocity": (float(entry["velocity"][0]), float(entry["velocity"][1])),
            "color": _coerce_color(entry.get("color", [200, 200, 255])),
        }
    except (AttributeError, KeyError, IndexError, TypeError, ValueError):
        return None
    if spec["mass"] <= 0:
        return None
    return spec


def list_templates(directory: str = TEMPLATES_DIR) -> List[Tuple[str, str]]:
    """Return list of (file_name, display_name) for available templates."""
    items: List[Tuple[str, str]] = []
    if not os.path.isdir(directory):
        return items
    for fn in sorted(os.listdir(directory)):
        if not fn.lower().endswith(".json"):
            continue
        try:
            data = _read_json(os.path.join(directory, fn))
        except ConfigurationError:
            logger.warning("Ignoring unreadable template %s", fn)
            continue
        items.append((fn, data.get("name") or os.path.splitext(fn)[0]))
    return items


def load_template(file_name: str, directory: str = TEMPLATES_DIR) -> SceneTemplate:
    """
    Load a template JSON by file name (or absolute path).

    Malformed body entries are skipped with a warning; an unreadable file raises
    ConfigurationError.
    """
    path = file_name if os.path.isabs(file_name) else os.path.join(directory, file_name)
    data = _read_json(path)
    display_name = data.get("name") or os.path.splitext(os.path.basename(file_name))[0]

    bodies: List[BodySpec] = []
    for index, entry in enumerate(data.get("bodies", [])):
        spec = _coerce_body(entry)
        if spec is None:
            logger.warning("Template %s: skipping malformed body #%d", display_name, index)
            continue
        bodies.append(spec)

    config = data.get("config") or {}
    if not isinstance(config, dict):
        raise ConfigurationError(f"template {display_name!r}: 'config' must be an object")

    time_scale = data.get("time_scale")
    if time_scale is not None:
        try:
            time_scale = float(time_scale)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(
                f"template {display_name!r}: time_scale must be a number, got {time_scale!r}") from exc
    logger.info("Loaded template %s with %d bodies", display_name, len(bodies))
    return SceneTemplate(
        name=display_name,
        bodies=bodies,
        description=data.get("description", ""),
        time_scale=time_scale,
        config=config,
    )
