import numpy as np
import pytest

from amr_pursuit.control.base import Controller, LifecycleState
from amr_pursuit.control.controller import PurePursuitController
from amr_pursuit.errors import ConfigError, EmptyPathError, LifecycleError
from amr_pursuit.geometry import Path, Pose, Twist
from amr_pursuit.sim.costmap import OccupancyCostGrid
from amr_pursuit.sim.rollout import SimClock
from amr_pursuit.sim.transforms import TransformBuffer
from amr_pursuit.viz.sink import RecordingPathSink


def make_cfg():
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


def make_deps():
    tf = TransformBuffer()
    tf.set_static_transform("map", "odom")
    tf.set_transform("odom", "base_link", 0.0, 0.0, 0.0, 0.0)
    grid = OccupancyCostGrid(0.05, np.zeros((80, 80), dtype=np.uint8))
    return tf, grid


def test_full_lifecycle_cycle() -> None:
    tf, grid = make_deps()
    sink = RecordingPathSink()
    ctrl = PurePursuitController(clock=SimClock())
    assert ctrl.state is LifecycleState.UNCONFIGURED
    ctrl.configure(make_cfg(), tf, grid, sink)
    assert ctrl.state is LifecycleState.INACTIVE
    assert not sink.is_open
    ctrl.activate()
    assert ctrl.state is LifecycleState.ACTIVE
    assert sink.is_open
    assert (ctrl.last_cmd.linear, ctrl.last_cmd.angular) == (0.0, 0.0)
    ctrl.deactivate()
    assert ctrl.state is LifecycleState.INACTIVE
    assert not sink.is_open
    ctrl.cleanup()
    assert ctrl.state is LifecycleState.UNCONFIGURED
    assert ctrl.params is None
    # Reconfigure after cleanup
    ctrl.configure(make_cfg(), tf, grid, sink)
    assert ctrl.state is LifecycleState.INACTIVE


def test_bad_config_leaves_controller_unconfigured() -> None:
    tf, grid = make_deps()
    cfg = make_cfg()
    cfg["min_lookahead_dist"] = 1.0
    ctrl = PurePursuitController(clock=SimClock())
    with pytest.raises(ConfigError):
        ctrl.configure(cfg, tf, grid)
    assert ctrl.state is LifecycleState.UNCONFIGURED
    assert ctrl.params is None


def test_operations_outside_active_are_lifecycle_errors() -> None:
    tf, grid = make_deps()
    ctrl = PurePursuitController(clock=SimClock())
    path = Path.from_waypoints(np.array([[0.0, 0.0], [1.0, 0.0]]), "map")
    with pytest.raises(LifecycleError):
        ctrl.set_plan(path)
    with pytest.raises(LifecycleError):
        ctrl.activate()
    ctrl.configure(make_cfg(), tf, grid)
    with pytest.raises(LifecycleError) as exc:
        ctrl.compute_velocity_command(Pose(0.0, 0.0, 0.0, "odom", 0.1), Twist())
    assert exc.value.details["state"] == "inactive"
    with pytest.raises(LifecycleError):
        ctrl.configure(make_cfg(), tf, grid)
    with pytest.raises(LifecycleError):
        ctrl.deactivate()
    assert ctrl.state is LifecycleState.INACTIVE


def test_sink_closed_when_activation_fails() -> None:
    tf, grid = make_deps()
    sink = RecordingPathSink()

    def broken_clock():
        raise RuntimeError("clock unavailable")

    ctrl = PurePursuitController(clock=broken_clock)
    ctrl.configure(make_cfg(), tf, grid, sink)
    with pytest.raises(RuntimeError):
        ctrl.activate()
    assert sink.open_count == 1
    assert not sink.is_open
    assert ctrl.state is LifecycleState.INACTIVE


def test_set_plan_empty_keeps_previous_plan() -> None:
    tf, grid = make_deps()
    sink = RecordingPathSink()
    ctrl = PurePursuitController(clock=SimClock())
    ctrl.configure(make_cfg(), tf, grid, sink)
    ctrl.activate()
    path = Path.from_waypoints(np.array([[0.0, 0.0], [1.0, 0.0]]), "map")
    ctrl.set_plan(path)
    assert sink.last.frame_id == "map"
    with pytest.raises(EmptyPathError):
        ctrl.set_plan(Path("map", 0.0, []))
    assert len(ctrl.path_manager) == 2


def test_pure_pursuit_satisfies_controller_capabilities() -> None:
    ctrl = PurePursuitController(clock=SimClock())
    assert isinstance(ctrl, Controller)
    assert not isinstance(object(), Controller)
