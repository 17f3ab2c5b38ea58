from __future__ import annotations

import pytest
from pytest import approx

from flocksim.sim.core.agent import OrbKind
from flocksim.sim.core.config import FlockParameters, SimulationConfig, coerce_parameter, load_config


def test_defaults_match_control_panel():
    config = SimulationConfig()
    assert config.flock.num_boids == 500
    assert config.flock.perception_radius == approx(50.0)
    assert (config.flock.separation_weight, config.flock.alignment_weight, config.flock.cohesion_weight) == (
        1.5,
        1.0,
        1.0,
    )
    assert config.desired_separation == approx(12.0)
    assert config.orbs.kind_for_button(0) is OrbKind.REPULSOR
    assert config.orbs.kind_for_button(2) is OrbKind.ATTRACTOR


def test_from_yaml(tmp_path):
    path = tmp_path / "flock.yaml"
    path.write_text(
        "\n".join(
            [
                "seed: 7",
                "width: 320",
                "flock:",
                "  num_boids: 40",
                "  wrap_boundary: false",
                "orbs:",
                "  radius: 4",
                "  primary_button: Attractor",
                "  secondary_button: repulsor",
            ]
        )
    )

    config = SimulationConfig.from_yaml(path)

    assert config.seed == 7
    assert config.width == approx(320.0)
    assert config.flock.num_boids == 40
    assert config.flock.wrap_boundary is False
    assert config.orbs.radius == approx(4.0)
    assert config.orbs.primary_button is OrbKind.ATTRACTOR
    assert config.orbs.secondary_button is OrbKind.REPULSOR


def test_empty_yaml_gives_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert SimulationConfig.from_yaml(path) == SimulationConfig()


def test_load_config_rejects_bad_values():
    with pytest.raises(TypeError):
        load_config({"flock": {"boids": 10}})
    with pytest.raises(ValueError):
        load_config({"flock": {"max_speed": 0}})
    with pytest.raises(ValueError):
        load_config({"orbs": {"primary_button": "wormhole"}})
    with pytest.raises(ValueError):
        load_config({"width": -100, "height": 50, "flock": {"num_boids": 5}})
    with pytest.raises(ValueError):
        load_config({"height": 0})
    with pytest.raises(ValueError):
        load_config({"flock": {"max_force": float("nan")}})


def test_coerce_parameter_types():
    assert coerce_parameter("num_boids", "120") == 120
    assert coerce_parameter("perception_radius", 30) == approx(30.0)
    assert coerce_parameter("wrap_boundary", "false") is False
    assert coerce_parameter("wrap_boundary", 1) is True
    with pytest.raises(ValueError):
        coerce_parameter("num_boids", None)
    with pytest.raises(ValueError):
        coerce_parameter("speed", 1)


def test_validate_rejects_negative_population():
    with pytest.raises(ValueError):
        FlockParameters(num_boids=-1).validate()
