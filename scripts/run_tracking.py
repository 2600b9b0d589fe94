from __future__ import annotations

import argparse
import logging
import os

from amr_pursuit.planning.paths import PATHS
from amr_pursuit.sim.rollout import (
    build_costmap,
    compute_rollout_metrics,
    run_tracking,
    save_metrics_json,
    save_trajectory_csv,
)
from amr_pursuit.geometry import Path
from amr_pursuit.utils import controller_section, load_config_dict


def main():
    parser = argparse.ArgumentParser(description="Run the pure pursuit controller on a reference path")
    parser.add_argument("--config", type=str, default="configs/pure_pursuit.yaml", help="Path to YAML config")
    parser.add_argument("--path", type=str, default="s", choices=sorted(PATHS), help="Reference path shape")
    parser.add_argument("--steps", type=int, default=None, help="Override run.max_steps")
    parser.add_argument("--dt", type=float, default=None, help="Override run.dt")
    parser.add_argument(
        "--obstacle",
        type=float,
        nargs=4,
        action="append",
        default=[],
        metavar=("X0", "Y0", "X1", "Y1"),
        help="Add a rectangular obstacle (meters, odom frame); repeatable",
    )
    parser.add_argument("--outdir", type=str, default=None, help="Write trajectory.csv and metrics.json here")
    parser.add_argument("--plot", type=str, default=None, help="Save a PNG of the run")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    cfg = load_config_dict(args.config)
    ctrl_cfg = controller_section(cfg)
    grid_cfg = cfg.get("costmap", {})
    run_cfg = cfg.get("run", {})

    dt = float(args.dt if args.dt is not None else run_cfg.get("dt", 0.1))
    max_steps = int(args.steps if args.steps is not None else run_cfg.get("max_steps", 600))

    # Offset the path so it sits inside the grid
    size_m = tuple(grid_cfg.get("size_m", [8.0, 6.0]))
    waypoints = PATHS[args.path](start=(1.0, size_m[1] / 2.0))
    costmap = build_costmap(
        size_m,
        float(grid_cfg.get("resolution_m", 0.05)),
        obstacles=[tuple(o) for o in args.obstacle],
        inflation_radius=float(grid_cfg.get("inflation_radius_m", 0.0)),
    )

    result = run_tracking(
        ctrl_cfg,
        waypoints,
        costmap,
        dt=dt,
        max_steps=max_steps,
        goal_tolerance=float(run_cfg.get("goal_tolerance_m", 0.15)),
    )
    ref = Path.from_waypoints(waypoints, "map")
    metrics = compute_rollout_metrics(result, ref)

    status = "goal reached" if result.reached_goal else ("collision veto" if result.collided else "timeout")
    print(f"[INFO] {args.path}: {status} after {result.steps} steps")
    for k in sorted(metrics):
        v = metrics[k]
        print(f"  {k}: {v:.3f}" if isinstance(v, float) else f"  {k}: {v}")

    if args.outdir:
        os.makedirs(args.outdir, exist_ok=True)
        save_trajectory_csv(os.path.join(args.outdir, "trajectory.csv"), result.trajectory)
        save_metrics_json(os.path.join(args.outdir, "metrics.json"), metrics)
        print(f"[INFO] Saved trajectory and metrics to {args.outdir}")

    if args.plot:
        import matplotlib

        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
        from amr_pursuit.viz.plotting import plot_run

        fig, ax = plt.subplots(figsize=(8, 6))
        plot_run(ref, result.trajectory[:, 1:3], ax=ax, costmap=costmap, carrots=result.carrots, status={"status": status})
        fig.savefig(args.plot, dpi=120, bbox_inches="tight")
        plt.close(fig)
        print(f"[INFO] Saved plot: {args.plot}")


if __name__ == "__main__":
    main()
