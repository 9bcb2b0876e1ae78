import json
import logging

import pytest

from nbody.config import SimulationConfig
from nbody.driver import Simulation
from nbody.errors import ConfigurationError
from nbody.presets_loader import list_templates, load_template


def write_template(directory, name, data):
    path = directory / name
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_bundled_templates_load_and_run():
    names = [fn for fn, _ in list_templates()]
    assert "binary_star.json" in names
    assert "head_on.json" in names
    for fn in names:
        scene = load_template(fn)
        config = scene.apply(SimulationConfig())
        sim = Simulation(config, scene.bodies)
        sim.advance(1 / 60)
        assert len(sim.bodies()) == len(scene.bodies)


def test_template_overrides_config(tmp_path):
    write_template(tmp_path, "merge.json", {
        "name": "Merge test",
        "time_scale": 4,
        "config": {"softening": 2.5, "collision": {"mode": "merge"}},
        "bodies": [{"name": "A", "mass": 3, "position": [0, 0], "velocity": [0, 0], "color": [300, -1, 7]}],
    })
    scene = load_template("merge.json", directory=str(tmp_path))
    config = scene.apply(SimulationConfig())
    assert scene.name == "Merge test"
    assert config.time_scale == 4.0
    assert config.softening == 2.5
    assert config.collision.mode == "merge"
    assert scene.bodies[0]["color"] == (255, 0, 7)


def test_malformed_bodies_are_skipped_with_warning(tmp_path, caplog):
    path = write_template(tmp_path, "partial.json", {
        "bodies": [
            {"mass": 1, "position": [0, 0], "velocity": [0, 0]},
            {"mass": "heavy", "position": [0, 0], "velocity": [0, 0]},
            {"mass": -1, "position": [0, 0], "velocity": [0, 0]},
            {"mass": 1, "position": [0]},
        ],
    })
    with caplog.at_level(logging.WARNING, logger="nbody.presets_loader"):
        scene = load_template(str(path))
    assert len(scene.bodies) == 1
    assert scene.name == "partial"
    assert len([r for r in caplog.records if r.levelno == logging.WARNING]) == 3


def test_unreadable_template_raises(tmp_path):
    (tmp_path / "broken.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_template("broken.json", directory=str(tmp_path))
    with pytest.raises(ConfigurationError):
        load_template("missing.json", directory=str(tmp_path))


def test_non_numeric_time_scale_is_a_configuration_error(tmp_path):
    write_template(tmp_path, "fast.json", {"time_scale": "very fast", "bodies": []})
    with pytest.raises(ConfigurationError, match="time_scale"):
        load_template("fast.json", directory=str(tmp_path))


def test_unknown_config_field_is_rejected(tmp_path):
    write_template(tmp_path, "bad.json", {"config": {"warp_drive": True}, "bodies": []})
    scene = load_template("bad.json", directory=str(tmp_path))
    with pytest.raises(ConfigurationError, match="warp_drive"):
        scene.apply(SimulationConfig())


def test_invalid_override_value_is_rejected(tmp_path):
    write_template(tmp_path, "neg.json", {"config": {"base_dt": -1}, "bodies": []})
    scene = load_template("neg.json", directory=str(tmp_path))
    with pytest.raises(ConfigurationError):
        scene.apply(SimulationConfig())


def test_list_templates_skips_broken_files(tmp_path):
    write_template(tmp_path, "good.json", {"name": "Good one", "bodies": []})
    (tmp_path / "bad.json").write_text("[", encoding="utf-8")
    (tmp_path / "notes.txt").write_text("ignore me", encoding="utf-8")
    assert list_templates(str(tmp_path)) == [("good.json", "Good one")]
