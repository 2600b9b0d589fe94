"""Lookahead radius and carrot selection."""

from __future__ import annotations

import math
from typing import Sequence

from amr_pursuit.errors import ConfigError, EmptyWindowError
from amr_pursuit.geometry import Pose, clamp, norm


class LookaheadSelector:
    """Picks the pursuit target at or beyond the lookahead radius.

    When velocity scaling is enabled the radius is speed * gain clamped to
    [min_dist, max_dist]; otherwise it is the fixed `lookahead_dist`.
    """

    def __init__(
        self,
        lookahead_dist: float,
        min_dist: float,
        max_dist: float,
        gain: float,
        use_velocity_scaled: bool = False,
    ) -> None:
        if min_dist > max_dist:
            raise ConfigError("lookahead", "min lookahead exceeds max lookahead", min_dist=min_dist, max_dist=max_dist)
        if min_dist < 0.0 or lookahead_dist < 0.0:
            raise ConfigError("lookahead", "lookahead distances must be >= 0", lookahead_dist=lookahead_dist, min_dist=min_dist)
        self.lookahead_dist = float(lookahead_dist)
        self.min_dist = float(min_dist)
        self.max_dist = float(max_dist)
        self.gain = float(gain)
        self.use_velocity_scaled = bool(use_velocity_scaled)

    @classmethod
    def from_params(cls, params) -> "LookaheadSelector":
        return cls(
            params.lookahead_dist,
            params.min_lookahead_dist,
            params.max_lookahead_dist,
            params.lookahead_gain,
            params.use_velocity_scaled_lookahead_dist,
        )

    def effective_lookahead(self, current_speed: float) -> float:
        if not self.use_velocity_scaled:
            return self.lookahead_dist
        scaled = float(current_speed) * self.gain
        if math.isnan(scaled):
            return self.min_dist
        return clamp(scaled, self.min_dist, self.max_dist)

    @staticmethod
    def select_carrot(window: Sequence[Pose], lookahead: float) -> Pose:
        """First pose at least `lookahead` from the robot origin, else the last pose."""
        if len(window) == 0:
            raise EmptyWindowError("lookahead", "cannot select a carrot from an empty window", lookahead=lookahead)
        for p in window:
            if norm(p.x, p.y) >= lookahead:
                return p
        return window[-1]
