"""Collision utilities: grid inflation and the carrot-segment interlock."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

import numpy as np
from scipy.ndimage import binary_dilation

from amr_pursuit.constants import INSCRIBED_INFLATED_OBSTACLE, NO_INFORMATION
from amr_pursuit.geometry import Pose, compose

logger = logging.getLogger(__name__)


def _disk_kernel(radius_cells: int) -> np.ndarray:
    r = int(radius_cells)
    yy, xx = np.ogrid[-r : r + 1, -r : r + 1]
    mask = (xx * xx + yy * yy) <= (r * r)
    return mask.astype(bool)


def inflate_grid(grid: np.ndarray, radius_m: float, resolution_m: float) -> np.ndarray:
    """Inflate boolean occupancy by a circular kernel of robot radius.

    Args:
        grid: 2D bool array (True=occupied).
        radius_m: robot radius in meters.
        resolution_m: meters per cell.

    Returns:
        2D bool array of same shape; True where inflated occupancy.
    """
    assert grid.ndim == 2 and grid.dtype == bool
    r_cells = int(np.ceil(max(0.0, float(radius_m)) / float(resolution_m)))
    if r_cells <= 0:
        return grid.copy()
    kernel = _disk_kernel(r_cells)
    return binary_dilation(grid, structure=kernel)


@dataclass(frozen=True)
class CollisionSample:
    x: float
    y: float
    cost: int


class CollisionChecker:
    """Samples the straight segment from the robot to the carrot against a cost grid.

    The robot pose is expressed in the grid's frame; the carrot is expressed
    in the robot frame. Samples are spaced one grid cell apart, both
    endpoints included. Off-grid and unknown cells never count as collisions.
    """

    def __init__(self, grid, lethal_cost: int = INSCRIBED_INFLATED_OBSTACLE) -> None:
        self.grid = grid
        self.lethal_cost = int(lethal_cost)

    def sample_segment(self, robot_pose: Pose, carrot_local: Pose) -> np.ndarray:
        goal = compose(robot_pose, carrot_local)
        length = math.hypot(goal.x - robot_pose.x, goal.y - robot_pose.y)
        n = max(1, int(math.ceil(length / self.grid.resolution)))
        t = np.linspace(0.0, 1.0, n + 1)
        xs = robot_pose.x + t * (goal.x - robot_pose.x)
        ys = robot_pose.y + t * (goal.y - robot_pose.y)
        return np.stack([xs, ys], axis=1)

    def find_collision(self, robot_pose: Pose, carrot_local: Pose) -> Optional[CollisionSample]:
        for x, y in self.sample_segment(robot_pose, carrot_local):
            cost = self.grid.cost_at(float(x), float(y))
            if cost is None or cost == NO_INFORMATION:
                continue
            if cost >= self.lethal_cost:
                return CollisionSample(float(x), float(y), int(cost))
        return None

    def check(self, robot_pose: Pose, carrot_local: Pose) -> bool:
        """True when a collision is imminent along the robot-to-carrot segment."""
        hit = self.find_collision(robot_pose, carrot_local)
        if hit is not None:
            logger.debug("Lethal sample at (%.3f, %.3f) cost=%d", hit.x, hit.y, hit.cost)
        return hit is not None
