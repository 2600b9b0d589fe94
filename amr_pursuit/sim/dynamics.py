"""Unicycle plant for closed-loop tracking runs."""

from __future__ import annotations

import math
from dataclasses import dataclass

from amr_pursuit.geometry import Pose, Twist, clamp, wrap_pi


@dataclass
class UnicycleState:
    x: float
    y: float
    theta: float
    v: float = 0.0  # applied linear speed, m/s
    omega: float = 0.0  # applied angular speed, rad/s


class UnicycleModel:
    """Forward-only unicycle; commands are clipped to [0, v_max] x [-w_max, w_max]."""

    def __init__(self, v_max: float, w_max: float) -> None:
        self.v_max = float(v_max)
        self.w_max = float(w_max)
        self.state = UnicycleState(0.0, 0.0, 0.0)

    def reset(self, x: float = 0.0, y: float = 0.0, theta: float = 0.0) -> UnicycleState:
        self.state = UnicycleState(float(x), float(y), wrap_pi(theta))
        return self.state

    def step(self, v: float, w: float, dt: float) -> UnicycleState:
        """Euler step with heading taken at the start of the interval."""
        v = clamp(v, 0.0, self.v_max)
        w = clamp(w, -self.w_max, self.w_max)
        s = self.state
        self.state = UnicycleState(
            s.x + v * math.cos(s.theta) * dt,
            s.y + v * math.sin(s.theta) * dt,
            wrap_pi(s.theta + w * dt),
            v,
            w,
        )
        return self.state

    def as_pose(self, frame_id: str, stamp: float) -> Pose:
        return Pose(self.state.x, self.state.y, self.state.theta, frame_id, stamp)

    def twist(self) -> Twist:
        return Twist(self.state.v, self.state.omega)
