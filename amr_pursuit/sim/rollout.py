"""Closed-loop rollouts of the controller against the unicycle plant."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path as FsPath
from typing import Any

import numpy as np

from amr_pursuit.constants import BASE_FRAME, DT, GLOBAL_FRAME, GOAL_TOLERANCE_M, ODOM_FRAME
from amr_pursuit.config import PurePursuitParams
from amr_pursuit.control.base import Controller
from amr_pursuit.control.controller import PurePursuitController
from amr_pursuit.errors import CollisionImminentError, TickError
from amr_pursuit.geometry import Path, distance
from amr_pursuit.sim.costmap import OccupancyCostGrid
from amr_pursuit.sim.dynamics import UnicycleModel
from amr_pursuit.sim.transforms import TransformBuffer
from amr_pursuit.viz.sink import RecordingPathSink

logger = logging.getLogger(__name__)


class SimClock:
    """Manually advanced clock, callable like time.monotonic."""

    def __init__(self, t0: float = 0.0) -> None:
        self.now = float(t0)

    def __call__(self) -> float:
        return self.now

    def advance(self, dt: float) -> float:
        self.now += float(dt)
        return self.now


@dataclass
class RolloutResult:
    trajectory: np.ndarray  # columns: t, x, y, theta, v_cmd, w_cmd, goal_dist
    carrots: list[tuple[float, float]] = field(default_factory=list)
    reached_goal: bool = False
    collided: bool = False
    tick_errors: int = 0
    steps: int = 0


def _ensure_parent(path: str | FsPath) -> FsPath:
    out_path = FsPath(path)
    parent = out_path.parent if out_path.parent != FsPath("") else FsPath(".")
    parent.mkdir(parents=True, exist_ok=True)
    return out_path


def save_trajectory_csv(path: str, data: np.ndarray) -> None:
    out = _ensure_parent(path)
    header = "t_sec,x_m,y_m,theta_rad,v_cmd_mps,w_cmd_rps,goal_dist_m"
    np.savetxt(out, data, delimiter=",", header=header, comments="")


def save_metrics_json(path: str, metrics: dict) -> None:
    out = _ensure_parent(path)
    with open(out, "w", encoding="utf-8") as fh:
        json.dump(metrics, fh, indent=2, sort_keys=True)


def compute_rollout_metrics(result: RolloutResult, path: Path) -> dict[str, Any]:
    traj = result.trajectory
    metrics: dict[str, Any] = {
        "reached_goal": bool(result.reached_goal),
        "collided": bool(result.collided),
        "tick_errors": int(result.tick_errors),
        "steps": int(result.steps),
    }
    if traj.size == 0:
        return metrics
    xy = traj[:, 1:3]
    ref = path.as_array()
    # Cross-track error against the reference vertices
    d = np.linalg.norm(xy[:, None, :] - ref[None, :, :], axis=2).min(axis=1)
    driven = float(np.sum(np.linalg.norm(np.diff(xy, axis=0), axis=1))) if len(xy) > 1 else 0.0
    total_time = float(traj[-1, 0] - traj[0, 0])
    metrics.update(
        {
            "time_s": total_time,
            "path_length_m": driven,
            "avg_speed_mps": driven / total_time if total_time > 1e-6 else 0.0,
            "max_cross_track_m": float(d.max()),
            "mean_cross_track_m": float(d.mean()),
            "final_goal_dist_m": float(traj[-1, 6]),
            "max_abs_w_cmd": float(np.abs(traj[:, 5]).max()),
        }
    )
    return metrics


def build_costmap(size_m: tuple[float, float], resolution: float, obstacles=(), inflation_radius: float = 0.0) -> OccupancyCostGrid:
    """Grid in the odom frame; obstacles are (x0, y0, x1, y1) rectangles in meters."""
    W = int(round(size_m[0] / resolution))
    H = int(round(size_m[1] / resolution))
    occ = np.zeros((H, W), dtype=bool)
    for x0, y0, x1, y1 in obstacles:
        j0, j1 = int(np.floor(x0 / resolution)), int(np.ceil(x1 / resolution))
        i0, i1 = int(np.floor(y0 / resolution)), int(np.ceil(y1 / resolution))
        occ[max(0, i0) : min(H, i1), max(0, j0) : min(W, j1)] = True
    return OccupancyCostGrid.from_occupancy(
        occ,
        resolution,
        inflation_radius,
        global_frame=ODOM_FRAME,
        base_frame=BASE_FRAME,
    )


def run_tracking(
    controller_cfg: dict[str, Any],
    waypoints: np.ndarray,
    costmap: OccupancyCostGrid,
    *,
    start: tuple[float, float, float] | None = None,
    dt: float = DT,
    max_steps: int = 600,
    goal_tolerance: float = GOAL_TOLERANCE_M,
    w_max: float | None = None,
    controller: Controller | None = None,
) -> RolloutResult:
    """Drive a unicycle along `waypoints` (map frame) with a path-tracking controller.

    map -> odom is a static identity; odom -> base_link follows the plant.
    Recoverable tick errors are counted and the robot is stopped for that
    tick; a collision veto ends the run. `controller` must be unconfigured;
    when omitted a PurePursuitController on the simulated clock is used.
    """
    clock = SimClock(0.0)
    tf = TransformBuffer()
    tf.set_static_transform(GLOBAL_FRAME, ODOM_FRAME)

    params = PurePursuitParams.from_dict(controller_cfg)
    ctrl: Controller = controller if controller is not None else PurePursuitController(clock=clock)
    sink = RecordingPathSink()
    ctrl.configure(controller_cfg, tf, costmap, sink)
    ctrl.activate()

    path = Path.from_waypoints(waypoints, GLOBAL_FRAME, clock.now)
    if start is None:
        p0 = path.poses[0]
        start = (p0.x, p0.y, p0.yaw)
    model = UnicycleModel(
        v_max=params.desired_linear_vel,
        w_max=params.max_angular_vel if w_max is None else w_max,
    )
    model.reset(*start)
    goal = path.poses[-1]

    rows: list[list[float]] = []
    result = RolloutResult(trajectory=np.zeros((0, 7)))
    try:
        ctrl.set_plan(path)
        for step in range(int(max_steps)):
            t = clock.advance(dt)
            s = model.state
            tf.set_transform(ODOM_FRAME, BASE_FRAME, s.x, s.y, s.theta, t)
            pose = model.as_pose(ODOM_FRAME, t)
            goal_dist = distance(pose, goal)
            if goal_dist <= goal_tolerance:
                result.reached_goal = True
                break
            try:
                cmd = ctrl.compute_velocity_command(pose, model.twist())
                u = (cmd.linear, cmd.angular)
                if ctrl.last_carrot is not None:
                    c = tf.transform(ctrl.last_carrot.with_frame(BASE_FRAME, t), ODOM_FRAME, 0.0)
                    result.carrots.append((c.x, c.y))
            except CollisionImminentError as exc:
                logger.error("Stopping rollout: %s", exc)
                result.collided = True
                rows.append([t, s.x, s.y, s.theta, 0.0, 0.0, goal_dist])
                break
            except TickError as exc:
                logger.warning("Tick %d skipped: %s", step, exc)
                result.tick_errors += 1
                u = (0.0, 0.0)
            rows.append([t, s.x, s.y, s.theta, u[0], u[1], goal_dist])
            model.step(u[0], u[1], dt)
            result.steps = step + 1
    finally:
        ctrl.deactivate()
        ctrl.cleanup()

    if rows:
        result.trajectory = np.asarray(rows, dtype=float)
    return result
