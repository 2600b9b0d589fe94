"""Pure pursuit path-tracking controller with an explicit lifecycle.

States: UNCONFIGURED -> configure -> INACTIVE -> activate -> ACTIVE
        ACTIVE -> deactivate -> INACTIVE -> cleanup -> UNCONFIGURED

Per tick (compute_velocity_command):
1. window the held plan around the robot (no pruning yet)
2. pick the carrot at/after the lookahead radius
3. pure pursuit law -> raw (v, w)
4. kinematic limits against the last emitted command
5. collision interlock on the robot-to-carrot segment
6. commit: prune the passed prefix, store and return the command

Stamps (pose stamps, command stamps) share the clock passed to the
constructor; the first tick after activation is rate-limited against a zero
command stamped at activation.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Mapping, Optional

from amr_pursuit.config import PurePursuitParams
from amr_pursuit.control.base import Controller, LifecycleState
from amr_pursuit.control.limiter import KinematicLimiter
from amr_pursuit.control.lookahead import LookaheadSelector
from amr_pursuit.control.pure_pursuit import carrot_distance, compute_u_track
from amr_pursuit.errors import CollisionImminentError, LifecycleError, TransformError
from amr_pursuit.geometry import Path, Pose, Twist, VelocityCommand
from amr_pursuit.planning.path import PathWindowManager
from amr_pursuit.sim.collision import CollisionChecker
from amr_pursuit.viz.sink import NullPathSink, publish_quietly

logger = logging.getLogger(__name__)


class PurePursuitController(Controller):
    def __init__(self, name: str = "pure_pursuit", clock: Callable[[], float] = time.monotonic) -> None:
        self.name = name
        self.clock = clock
        self.state = LifecycleState.UNCONFIGURED
        self.params: Optional[PurePursuitParams] = None
        self.transformer = None
        self.costmap = None
        self.sink = None
        self.path_manager: Optional[PathWindowManager] = None
        self.lookahead: Optional[LookaheadSelector] = None
        self.limiter: Optional[KinematicLimiter] = None
        self.collision: Optional[CollisionChecker] = None
        self.last_cmd: Optional[VelocityCommand] = None
        self.last_carrot: Optional[Pose] = None

    def _require(self, op: str, *allowed: LifecycleState) -> None:
        if self.state not in allowed:
            raise LifecycleError(
                "lifecycle",
                f"{op} is not allowed in state {self.state.value}",
                controller=self.name,
                state=self.state.value,
                required="/".join(s.value for s in allowed),
            )

    # Lifecycle

    def configure(self, config: Mapping[str, Any], transformer, costmap, sink=None) -> None:
        self._require("configure", LifecycleState.UNCONFIGURED)
        logger.info("Configuring controller: %s of type PurePursuitController", self.name)
        params = PurePursuitParams.from_dict(config)

        self.params = params
        self.transformer = transformer
        self.costmap = costmap
        self.sink = sink if sink is not None else NullPathSink()
        self.path_manager = PathWindowManager(transformer, costmap, params.transform_tolerance, self.sink)
        self.lookahead = LookaheadSelector.from_params(params)
        self.limiter = KinematicLimiter.from_params(params, costmap.resolution)
        self.collision = CollisionChecker(costmap, params.lethal_cost)
        self.state = LifecycleState.INACTIVE

    def activate(self) -> None:
        self._require("activate", LifecycleState.INACTIVE)
        logger.info("Activating controller: %s of type PurePursuitController", self.name)
        self.sink.open()
        try:
            self.last_cmd = VelocityCommand(0.0, 0.0, float(self.clock()), "")
            self.last_carrot = None
        except Exception:
            self.sink.close()
            raise
        self.state = LifecycleState.ACTIVE

    def deactivate(self) -> None:
        self._require("deactivate", LifecycleState.ACTIVE)
        logger.info("Deactivating controller: %s of type PurePursuitController", self.name)
        try:
            self.sink.close()
        finally:
            self.state = LifecycleState.INACTIVE

    def cleanup(self) -> None:
        self._require("cleanup", LifecycleState.INACTIVE)
        logger.info("Cleaning up controller: %s of type PurePursuitController", self.name)
        self.path_manager = None
        self.lookahead = None
        self.limiter = None
        self.collision = None
        self.sink = None
        self.transformer = None
        self.costmap = None
        self.params = None
        self.last_cmd = None
        self.last_carrot = None
        self.state = LifecycleState.UNCONFIGURED

    # Control

    def set_plan(self, path: Path) -> None:
        self._require("set_plan", LifecycleState.ACTIVE)
        self.path_manager.set_plan(path)
        publish_quietly(self.sink, self.path_manager.plan, logger)

    def compute_velocity_command(self, current_pose: Pose, current_twist: Twist) -> VelocityCommand:
        self._require("compute_velocity_command", LifecycleState.ACTIVE)
        params = self.params

        window = self.path_manager.window(current_pose)
        lookahead = self.lookahead.effective_lookahead(current_twist.linear)
        carrot = self.lookahead.select_carrot(window.path.poses, lookahead)
        carrot_dist = carrot_distance(carrot)

        v_raw, w_raw = compute_u_track(carrot, params.desired_linear_vel)
        dt = current_pose.stamp - self.last_cmd.stamp
        v, w = self.limiter.apply(
            v_raw,
            w_raw,
            abs(lookahead - carrot_dist),
            lookahead,
            dt,
            (self.last_cmd.linear, self.last_cmd.angular),
        )

        if params.use_collision_detection:
            self._check_collision(current_pose, carrot)

        self.path_manager.prune(window)
        stamp = max(float(self.clock()), self.last_cmd.stamp)
        cmd = VelocityCommand(v, w, stamp, current_pose.frame_id)
        self.last_cmd = cmd
        self.last_carrot = carrot
        return cmd

    def _check_collision(self, current_pose: Pose, carrot: Pose) -> None:
        grid_frame = self.costmap.global_frame
        robot = current_pose
        if robot.frame_id != grid_frame:
            try:
                robot = self.transformer.transform(current_pose, grid_frame, self.params.transform_tolerance)
            except TransformError as exc:
                logger.error("Unable to transform robot pose into cost grid frame: %s", exc)
                raise
        hit = self.collision.find_collision(robot, carrot)
        if hit is not None:
            logger.error("Collision imminent!")
            raise CollisionImminentError(
                "collision_interlock",
                "detected collision ahead",
                x=hit.x,
                y=hit.y,
                cost=hit.cost,
                lethal_cost=self.collision.lethal_cost,
                carrot_x=carrot.x,
                carrot_y=carrot.y,
            )
