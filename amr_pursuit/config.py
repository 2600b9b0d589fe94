"""Controller parameters, validated at configure time."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

from omegaconf import DictConfig, OmegaConf

from . import constants as C
from .constants import INSCRIBED_INFLATED_OBSTACLE, LETHAL_OBSTACLE
from .errors import ConfigError

logger = logging.getLogger(__name__)

REQUIRED_KEYS = (
    "desired_linear_vel",
    "max_accel",
    "max_decel",
    "lookahead_dist",
    "min_lookahead_dist",
    "max_lookahead_dist",
    "lookahead_gain",
    "max_angular_vel",
    "transform_tolerance",
    "use_velocity_scaled_lookahead_dist",
)

_BOOL_KEYS = ("use_velocity_scaled_lookahead_dist", "use_collision_detection")


@dataclass
class PurePursuitParams:
    desired_linear_vel: float
    max_accel: float
    max_decel: float
    lookahead_dist: float
    min_lookahead_dist: float
    max_lookahead_dist: float
    lookahead_gain: float
    max_angular_vel: float
    transform_tolerance: float
    use_velocity_scaled_lookahead_dist: bool
    # Angular limits fall back to the shared linear pair when unset.
    max_angular_accel: Optional[float] = None
    max_angular_decel: Optional[float] = None
    use_collision_detection: bool = True
    lethal_cost: int = INSCRIBED_INFLATED_OBSTACLE

    def __post_init__(self) -> None:
        if self.max_angular_accel is None:
            self.max_angular_accel = self.max_accel
        if self.max_angular_decel is None:
            self.max_angular_decel = self.max_decel
        for name in (
            "desired_linear_vel",
            "max_accel",
            "max_decel",
            "max_angular_accel",
            "max_angular_decel",
            "lookahead_dist",
            "min_lookahead_dist",
            "max_lookahead_dist",
            "max_angular_vel",
        ):
            _require(name, getattr(self, name), positive=True)
        for name in ("lookahead_gain", "transform_tolerance"):
            _require(name, getattr(self, name), positive=False)
        if self.min_lookahead_dist > self.max_lookahead_dist:
            raise ConfigError(
                "config",
                "min_lookahead_dist must be <= max_lookahead_dist",
                min_lookahead_dist=self.min_lookahead_dist,
                max_lookahead_dist=self.max_lookahead_dist,
            )
        # Costs above LETHAL_OBSTACLE never veto
        if not 0 < int(self.lethal_cost) <= LETHAL_OBSTACLE:
            raise ConfigError(
                "config",
                f"lethal_cost must be in (0, {LETHAL_OBSTACLE}]",
                lethal_cost=self.lethal_cost,
                max_lethal_cost=LETHAL_OBSTACLE,
            )

    @classmethod
    def from_dict(cls, cfg: Dict[str, Any] | DictConfig | None) -> "PurePursuitParams":
        d = _to_dict(cfg)
        missing = [k for k in REQUIRED_KEYS if k not in d or d[k] is None]
        if missing:
            raise ConfigError("config", "missing required parameters", missing=missing)
        known = {f.name for f in fields(cls)}
        unknown = sorted(k for k in d if k not in known)
        if unknown:
            logger.warning("Ignoring unknown controller parameters: %s", ", ".join(unknown))
        kwargs: Dict[str, Any] = {}
        for f in fields(cls):
            if f.name not in d or d[f.name] is None:
                continue
            value = d[f.name]
            if f.name in _BOOL_KEYS:
                kwargs[f.name] = _as_bool(f.name, value)
            elif f.name == "lethal_cost":
                kwargs[f.name] = int(_as_float(f.name, value))
            else:
                kwargs[f.name] = _as_float(f.name, value)
        return cls(**kwargs)


def _to_dict(cfg_section: Any) -> dict[str, Any]:
    if isinstance(cfg_section, DictConfig):
        data = OmegaConf.to_container(cfg_section, resolve=True)
    else:
        data = cfg_section
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("config", "expected a mapping of parameters", got=type(data).__name__)
    return dict(data)


def _as_float(name: str, value: Any) -> float:
    if isinstance(value, bool):
        raise ConfigError("config", "expected a number", key=name, value=value)
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ConfigError("config", "expected a number", key=name, value=value) from None


def _as_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    raise ConfigError("config", "expected a boolean", key=name, value=value)


def _require(name: str, value: float, positive: bool) -> None:
    if not math.isfinite(value):
        raise ConfigError("config", f"{name} must be finite", key=name, value=value)
    if positive and value <= 0.0:
        raise ConfigError("config", f"{name} must be > 0", key=name, value=value)
    if not positive and value < 0.0:
        raise ConfigError("config", f"{name} must be >= 0", key=name, value=value)


def default_config() -> Dict[str, Any]:
    """Reference parameter set for a small differential-drive base."""
    return {
        "desired_linear_vel": C.DESIRED_LINEAR_VEL_MPS,
        "max_accel": C.MAX_ACCEL,
        "max_decel": C.MAX_DECEL,
        "lookahead_dist": C.LOOKAHEAD_DIST_M,
        "min_lookahead_dist": C.MIN_LOOKAHEAD_DIST_M,
        "max_lookahead_dist": C.MAX_LOOKAHEAD_DIST_M,
        "lookahead_gain": C.LOOKAHEAD_GAIN,
        "max_angular_vel": C.MAX_ANGULAR_VEL_RPS,
        "transform_tolerance": C.TRANSFORM_TOLERANCE_S,
        "use_velocity_scaled_lookahead_dist": False,
    }
