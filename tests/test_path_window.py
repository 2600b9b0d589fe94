import numpy as np
import pytest

from amr_pursuit.errors import EmptyPathError, EmptyWindowError, InvalidPathError, TransformError
from amr_pursuit.geometry import Path, Pose
from amr_pursuit.planning.path import PathWindowManager, closest_index
from amr_pursuit.sim.costmap import OccupancyCostGrid
from amr_pursuit.sim.transforms import TransformBuffer
from amr_pursuit.viz.sink import RecordingPathSink


def make_manager(robot=(0.0, 0.0, 0.0), stamp=1.0, grid_cells=40, sink=None):
    tf = TransformBuffer()
    tf.set_static_transform("map", "odom")
    tf.set_transform("odom", "base_link", robot[0], robot[1], robot[2], stamp)
    grid = OccupancyCostGrid(0.05, np.zeros((grid_cells, grid_cells), dtype=np.uint8))
    return PathWindowManager(tf, grid, 0.1, sink), tf


def line(n=11, step=0.2):
    wp = np.stack([np.arange(n) * step, np.zeros(n)], axis=1)
    return Path.from_waypoints(wp, "map", 0.0)


def test_set_plan_rejects_empty_and_keeps_previous() -> None:
    mgr, _ = make_manager()
    with pytest.raises(EmptyPathError):
        mgr.set_plan(Path("map", 0.0, []))
    assert len(mgr) == 0
    mgr.set_plan(line())
    with pytest.raises(EmptyPathError):
        mgr.set_plan(Path("map", 0.0, []))
    assert len(mgr) == 11


def test_set_plan_rejects_mixed_frames() -> None:
    mgr, _ = make_manager()
    poses = [Pose(0.0, 0.0, 0.0, "map"), Pose(1.0, 0.0, 0.0, "odom")]
    with pytest.raises(InvalidPathError) as exc:
        mgr.set_plan(Path("map", 0.0, poses))
    assert exc.value.details["index"] == 1


def test_window_on_empty_plan_is_invalid() -> None:
    mgr, _ = make_manager()
    with pytest.raises(InvalidPathError) as exc:
        mgr.window(Pose(0.0, 0.0, 0.0, "odom", 1.0))
    assert exc.value.details["held_poses"] == 0
    assert exc.value.details["robot_frame"] == "odom"
    assert "held_poses=0" in str(exc.value)


def test_window_starts_at_closest_and_prunes_prefix() -> None:
    mgr, _ = make_manager(robot=(0.61, 0.05, 0.0))
    mgr.set_plan(line())
    local = mgr.window_and_prune(Pose(0.61, 0.05, 0.0, "odom", 1.0))
    assert local.frame_id == "base_link"
    assert local.poses[0].x == pytest.approx(0.6 - 0.61)
    assert local.poses[0].y == pytest.approx(-0.05)
    assert all(p.frame_id == "base_link" for p in local.poses)
    # Poses at 0.0 .. 0.4 were passed and erased
    assert len(mgr) == 8
    assert mgr.plan.poses[0].x == pytest.approx(0.6)


def test_pruning_idempotent_for_stationary_robot() -> None:
    mgr, _ = make_manager(robot=(0.61, 0.0, 0.0))
    mgr.set_plan(line())
    robot = Pose(0.61, 0.0, 0.0, "odom", 1.0)
    first = mgr.window_and_prune(robot)
    kept = mgr.plan.poses
    second = mgr.window_and_prune(robot)
    assert mgr.plan.poses == kept
    assert [p.x for p in second.poses] == pytest.approx([p.x for p in first.poses])


def test_pruning_never_restores_after_backtracking() -> None:
    mgr, tf = make_manager(robot=(1.0, 0.0, 0.0))
    mgr.set_plan(line())
    mgr.window_and_prune(Pose(1.0, 0.0, 0.0, "odom", 1.0))
    assert mgr.plan.poses[0].x == pytest.approx(1.0)
    tf.set_transform("odom", "base_link", 0.1, 0.0, 0.0, 2.0)
    local = mgr.window_and_prune(Pose(0.1, 0.0, 0.0, "odom", 2.0))
    assert mgr.plan.poses[0].x == pytest.approx(1.0)
    assert local.poses[0].x == pytest.approx(0.9)


def test_ties_keep_first_pose() -> None:
    poses = [Pose(1.0, 0.0), Pose(-1.0, 0.0), Pose(0.0, 1.0)]
    assert closest_index(poses, Pose(0.0, 0.0)) == 0


def test_window_stops_outside_grid_radius() -> None:
    # 20 cells * 5cm / 2 = 0.5m radius
    mgr, _ = make_manager(grid_cells=20)
    mgr.set_plan(line())
    w = mgr.window(Pose(0.0, 0.0, 0.0, "odom", 1.0))
    assert [round(p.x, 6) for p in w.path.poses] == [0.0, 0.2, 0.4]
    assert w.end == 3


def test_window_empty_when_closest_pose_beyond_radius() -> None:
    mgr, _ = make_manager(grid_cells=20)
    mgr.set_plan(Path.from_waypoints(np.array([[2.0, 0.0], [3.0, 0.0]]), "map"))
    with pytest.raises(EmptyWindowError):
        mgr.window(Pose(0.0, 0.0, 0.0, "odom", 1.0))
    assert len(mgr) == 2


def test_stale_robot_transform_raises_transform_error() -> None:
    mgr, _ = make_manager(stamp=1.0)
    mgr.set_plan(line())
    with pytest.raises(TransformError) as exc:
        mgr.window(Pose(0.0, 0.0, 0.0, "base_link", 5.0))
    assert exc.value.component == "path_window"
    assert len(mgr) == 11


def test_window_is_published_and_sink_failure_is_ignored() -> None:
    sink = RecordingPathSink()
    sink.open()
    mgr, _ = make_manager(sink=sink)
    mgr.set_plan(line())
    mgr.window(Pose(0.0, 0.0, 0.0, "odom", 1.0))
    assert sink.last.frame_id == "base_link"

    class Broken:
        def publish(self, path):
            raise OSError("sink down")

    mgr.sink = Broken()
    w = mgr.window(Pose(0.0, 0.0, 0.0, "odom", 1.0))
    assert len(w.path) > 0


def test_new_plan_discards_pending_prune() -> None:
    mgr, _ = make_manager(robot=(1.0, 0.0, 0.0))
    mgr.set_plan(line())
    w = mgr.window(Pose(1.0, 0.0, 0.0, "odom", 1.0))
    mgr.set_plan(line())
    assert mgr.prune(w) == 0
    assert len(mgr) == 11
