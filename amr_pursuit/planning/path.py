"""Held global path: windowing into the robot frame and prefix pruning.

The window is the run of poses starting at the pose closest to the robot
and ending before the first pose farther than the cost grid's window radius.
Pruning erases everything before the closest pose and never re-inserts it,
so progress along the path is monotonic.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List

from amr_pursuit.errors import EmptyPathError, EmptyWindowError, InvalidPathError, TransformError
from amr_pursuit.geometry import Path, Pose, distance
from amr_pursuit.sim.costmap import CostGrid
from amr_pursuit.sim.transforms import FrameTransformer
from amr_pursuit.viz.sink import publish_quietly

logger = logging.getLogger(__name__)


def closest_index(poses: List[Pose], p: Pose) -> int:
    """Index of the pose nearest to `p`; ties keep the earliest index."""
    best = 0
    best_d = distance(poses[0], p)
    for i in range(1, len(poses)):
        d = distance(poses[i], p)
        if d < best_d:
            best_d = d
            best = i
    return best


def window_end_index(poses: List[Pose], p: Pose, start: int, radius: float) -> int:
    """First index at/after `start` farther than `radius` from `p`, else len(poses)."""
    for i in range(start, len(poses)):
        if distance(poses[i], p) > radius:
            return i
    return len(poses)


@dataclass
class PathWindow:
    path: Path  # poses in the robot base frame
    robot_pose: Pose  # robot pose in the plan frame
    closest: int
    end: int
    generation: int


class PathWindowManager:
    """Owns the global plan between set_plan calls.

    Args:
        transformer: frame transform collaborator (see sim.transforms).
        grid: cost grid collaborator; provides base_frame and the window radius.
        transform_tolerance: max staleness accepted for transforms, seconds.
        sink: optional observability sink for the transformed window.
    """

    def __init__(self, transformer: FrameTransformer, grid: CostGrid, transform_tolerance: float, sink=None) -> None:
        self.transformer = transformer
        self.grid = grid
        self.transform_tolerance = float(transform_tolerance)
        self.sink = sink
        self._frame_id = ""
        self._stamp = 0.0
        self._poses: List[Pose] = []
        self._generation = 0

    @property
    def plan(self) -> Path:
        return Path(self._frame_id, self._stamp, list(self._poses))

    def __len__(self) -> int:
        return len(self._poses)

    def set_plan(self, path: Path) -> None:
        if len(path.poses) == 0:
            raise EmptyPathError("path_window", "received plan with zero poses", held_poses=len(self._poses))
        if not path.frame_id:
            raise InvalidPathError("path_window", "plan has no frame", poses=len(path.poses))
        for i, p in enumerate(path.poses):
            if p.frame_id and p.frame_id != path.frame_id:
                raise InvalidPathError(
                    "path_window",
                    "pose frame does not match plan frame",
                    index=i,
                    pose_frame=p.frame_id,
                    plan_frame=path.frame_id,
                )
        self._frame_id = path.frame_id
        self._stamp = path.stamp
        self._poses = [p.with_frame(path.frame_id) for p in path.poses]
        self._generation += 1

    def clear(self) -> None:
        self._frame_id = ""
        self._stamp = 0.0
        self._poses = []
        self._generation += 1

    def _transform(self, pose: Pose, frame: str) -> Pose:
        if pose.frame_id == frame:
            return pose
        return self.transformer.transform(pose, frame, self.transform_tolerance)

    def window(self, robot_pose: Pose) -> PathWindow:
        """Transform the near part of the plan into the robot frame without pruning."""
        if not self._poses:
            raise InvalidPathError(
                "path_window",
                "held plan is empty",
                held_poses=0,
                plan_frame=self._frame_id,
                robot_frame=robot_pose.frame_id,
            )

        try:
            robot = self._transform(robot_pose, self._frame_id)
        except TransformError as exc:
            logger.error("Unable to transform robot pose into plan frame: %s", exc)
            raise TransformError(
                "path_window",
                "unable to transform robot pose into plan frame",
                source=robot_pose.frame_id,
                target=self._frame_id,
                tolerance=self.transform_tolerance,
            ) from exc

        radius = self.grid.window_radius()
        begin = closest_index(self._poses, robot)
        end = window_end_index(self._poses, robot, begin, radius)

        base_frame = self.grid.base_frame
        local: List[Pose] = []
        for p in self._poses[begin:end]:
            try:
                local.append(self._transform(p.with_frame(self._frame_id, robot.stamp), base_frame))
            except TransformError as exc:
                logger.debug("Dropping plan pose from window: %s", exc)
        window = Path(base_frame, robot.stamp, local)
        publish_quietly(self.sink, window, logger)

        if not local:
            raise EmptyWindowError(
                "path_window",
                "resulting plan window has 0 poses",
                closest=begin,
                window_end=end,
                window_radius=radius,
            )
        return PathWindow(window, robot, begin, end, self._generation)

    def prune(self, window: PathWindow) -> int:
        """Erase poses before the window start; returns how many were removed."""
        if window.generation != self._generation:
            return 0
        n = min(window.closest, len(self._poses))
        if n > 0:
            del self._poses[:n]
            self._generation += 1
        return n

    def window_and_prune(self, robot_pose: Pose) -> Path:
        w = self.window(robot_pose)
        self.prune(w)
        return w.path
