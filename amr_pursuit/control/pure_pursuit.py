"""Pure Pursuit velocity law.

API: compute_u_track(carrot, v_desired) -> (v, w)
The carrot is expressed in the robot frame (x forward, y left).
"""

from __future__ import annotations

from typing import Tuple

from amr_pursuit.geometry import Pose, curvature, norm


def carrot_distance(carrot: Pose) -> float:
    return norm(carrot.x, carrot.y)


def compute_u_track(carrot: Pose, v_desired: float) -> Tuple[float, float]:
    """Raw tracker command (v, w).

    Linear speed is not reduced for curvature here; sharp turns only raise
    the angular rate, which the kinematic limiter clamps afterwards.
    """
    # Curvature kappa = 2*yr / L^2
    kappa = curvature(carrot.y, carrot_distance(carrot))
    v = float(v_desired)
    w = float(v * kappa)
    return v, w
