"""Kinematic limits on the raw pursuit command.

Order of operations:
1. End-of-path slowdown: when the carrot sits closer than the requested
   lookahead by more than two grid cells, linear speed is scaled by
   lookahead_error / lookahead.
2. Per-axis acceleration/deceleration limits against the last emitted command.
3. Final clamp: angular to [-max_angular_vel, max_angular_vel], linear to
   [0, desired_linear_vel].
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

from amr_pursuit.errors import DegenerateTimeStepError
from amr_pursuit.geometry import clamp


@dataclass
class AxisLimits:
    max_accel: float
    max_decel: float


def rate_limit(raw: float, last: float, dt: float, limits: AxisLimits) -> float:
    """Limit the signed change from `last` to `raw` over `dt`."""
    measured = (raw - last) / dt
    if measured > limits.max_accel:
        return last + limits.max_accel * dt
    if measured < -limits.max_decel:
        return last - limits.max_decel * dt
    return raw


class KinematicLimiter:
    def __init__(
        self,
        desired_linear_vel: float,
        max_angular_vel: float,
        linear: AxisLimits,
        angular: AxisLimits,
        resolution: float,
    ) -> None:
        self.desired_linear_vel = float(desired_linear_vel)
        self.max_angular_vel = float(max_angular_vel)
        self.linear = linear
        self.angular = angular
        self.resolution = float(resolution)

    @classmethod
    def from_params(cls, params, resolution: float) -> "KinematicLimiter":
        return cls(
            params.desired_linear_vel,
            params.max_angular_vel,
            AxisLimits(params.max_accel, params.max_decel),
            AxisLimits(params.max_angular_accel, params.max_angular_decel),
            resolution,
        )

    def end_of_path_scale(self, linear: float, lookahead_error: float, lookahead: float) -> float:
        if lookahead > 0.0 and lookahead_error > 2.0 * self.resolution:
            return linear * (lookahead_error / lookahead)
        return linear

    def apply(
        self,
        linear: float,
        angular: float,
        lookahead_error: float,
        lookahead: float,
        dt: float,
        last: Tuple[float, float],
    ) -> Tuple[float, float]:
        """Return the bounded (v, w); raises DegenerateTimeStepError for dt <= 0."""
        if not dt > 0.0:
            raise DegenerateTimeStepError(
                "kinematic_limiter",
                "non-positive time step since last command",
                dt=dt,
            )
        last_v, last_w = last
        v = self.end_of_path_scale(linear, lookahead_error, lookahead)
        v = rate_limit(v, last_v, dt, self.linear)
        w = rate_limit(angular, last_w, dt, self.angular)

        w = clamp(w, -self.max_angular_vel, self.max_angular_vel)
        v = clamp(v, 0.0, self.desired_linear_vel)
        if math.isnan(w):
            w = 0.0
        if math.isnan(v):
            v = 0.0
        return float(v), float(w)
