from pathlib import Path

import pytest
from omegaconf import OmegaConf

from amr_pursuit.config import PurePursuitParams, default_config
from amr_pursuit.errors import ConfigError
from amr_pursuit.utils import controller_section, load_config_dict


def base_cfg():
    return {
        "desired_linear_vel": 0.5,
        "max_accel": 1.0,
        "max_decel": 1.0,
        "lookahead_dist": 0.4,
        "min_lookahead_dist": 0.3,
        "max_lookahead_dist": 0.6,
        "lookahead_gain": 1.5,
        "max_angular_vel": 1.0,
        "transform_tolerance": 0.1,
        "use_velocity_scaled_lookahead_dist": False,
    }


def test_angular_limits_default_to_shared_pair() -> None:
    p = PurePursuitParams.from_dict(base_cfg())
    assert p.max_angular_accel == p.max_accel
    assert p.max_angular_decel == p.max_decel
    assert p.use_collision_detection is True


def test_independent_angular_limits() -> None:
    cfg = base_cfg()
    cfg.update(max_angular_accel=3.0, max_angular_decel=4.0)
    p = PurePursuitParams.from_dict(cfg)
    assert (p.max_angular_accel, p.max_angular_decel) == (3.0, 4.0)


def test_missing_keys_are_listed() -> None:
    cfg = base_cfg()
    del cfg["max_accel"]
    del cfg["lookahead_gain"]
    with pytest.raises(ConfigError) as exc:
        PurePursuitParams.from_dict(cfg)
    assert exc.value.details["missing"] == ["max_accel", "lookahead_gain"]
    assert "max_accel" in str(exc.value)


def test_min_lookahead_above_max_rejected() -> None:
    cfg = base_cfg()
    cfg["min_lookahead_dist"] = 0.9
    with pytest.raises(ConfigError):
        PurePursuitParams.from_dict(cfg)


@pytest.mark.parametrize(
    "key,value",
    [
        ("desired_linear_vel", 0.0),
        ("max_decel", -1.0),
        ("lookahead_gain", -0.1),
        ("transform_tolerance", float("nan")),
        ("max_angular_vel", "fast"),
        ("use_velocity_scaled_lookahead_dist", 3),
    ],
)
def test_out_of_domain_values_rejected(key, value) -> None:
    cfg = base_cfg()
    cfg[key] = value
    with pytest.raises(ConfigError):
        PurePursuitParams.from_dict(cfg)


def test_config_error_is_value_error() -> None:
    with pytest.raises(ValueError):
        PurePursuitParams.from_dict({})


def test_accepts_omegaconf_section() -> None:
    p = PurePursuitParams.from_dict(OmegaConf.create(base_cfg()))
    assert p.lookahead_dist == 0.4


def test_shipped_yaml_loads() -> None:
    cfg = load_config_dict(str(Path(__file__).resolve().parents[1] / "configs" / "pure_pursuit.yaml"))
    p = PurePursuitParams.from_dict(controller_section(cfg))
    assert p.desired_linear_vel == 0.5
    assert p.use_velocity_scaled_lookahead_dist is False


def test_reference_defaults_match_shipped_yaml() -> None:
    cfg = load_config_dict(str(Path(__file__).resolve().parents[1] / "configs" / "pure_pursuit.yaml"))
    shipped = controller_section(cfg)
    for key, value in default_config().items():
        assert shipped[key] == value
    assert PurePursuitParams.from_dict(default_config()).lookahead_dist == 0.4


@pytest.mark.parametrize("lethal_cost", [0, 255, 300])
def test_lethal_cost_outside_vetoing_range_rejected(lethal_cost) -> None:
    cfg = base_cfg()
    cfg["lethal_cost"] = lethal_cost
    with pytest.raises(ConfigError) as exc:
        PurePursuitParams.from_dict(cfg)
    assert exc.value.details["lethal_cost"] == lethal_cost


def test_lethal_cost_at_lethal_obstacle_accepted() -> None:
    cfg = base_cfg()
    cfg["lethal_cost"] = 254
    assert PurePursuitParams.from_dict(cfg).lethal_cost == 254
