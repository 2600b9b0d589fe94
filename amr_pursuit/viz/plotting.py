from __future__ import annotations

from typing import Optional, Sequence

import numpy as np
import matplotlib.pyplot as plt

from amr_pursuit.geometry import Path


def plot_run(
    path: Path,
    trajectory: np.ndarray,
    ax=None,
    costmap=None,
    carrots: Optional[Sequence[tuple[float, float]]] = None,
    status: dict | None = None,
):
    """Draw the reference path, the driven trajectory and optional cost grid."""
    if ax is None:
        _, ax = plt.subplots(figsize=(7, 5))
    ax.clear()
    if costmap is not None:
        extent = [
            costmap.origin_x,
            costmap.origin_x + costmap.size_in_cells_x * costmap.resolution,
            costmap.origin_y,
            costmap.origin_y + costmap.size_in_cells_y * costmap.resolution,
        ]
        ax.imshow(costmap.costs, origin="lower", cmap="Greys", extent=extent, vmin=0, vmax=255)

    wp = path.as_array()
    if wp.shape[0] > 0:
        ax.plot(wp[:, 0], wp[:, 1], "c-", linewidth=1.5, alpha=0.9, label="path")
        ax.plot(wp[-1, 0], wp[-1, 1], "gx", markersize=8, markeredgewidth=2, label="goal")

    traj = np.asarray(trajectory, dtype=float)
    if traj.ndim == 2 and traj.shape[0] > 0:
        ax.plot(traj[:, 0], traj[:, 1], "b-", linewidth=1.2, label="robot")
        ax.plot(traj[0, 0], traj[0, 1], "bo", markersize=4)

    if carrots:
        c = np.asarray(carrots, dtype=float)
        ax.plot(c[:, 0], c[:, 1], "r.", markersize=2, alpha=0.5, label="carrot")

    ax.set_aspect("equal")
    ax.set_title("Pure pursuit: path (cyan), robot (blue), carrot (red)")
    ax.legend(loc="lower right", fontsize=8)

    if status:
        lines = []
        for k, v in status.items():
            if isinstance(v, float):
                v = f"{v:.2f}"
            lines.append(f"{k}: {v}")
        ax.text(
            0.02,
            0.98,
            "\n".join(lines),
            transform=ax.transAxes,
            fontsize=8,
            va="top",
            ha="left",
            color="k",
            bbox=dict(facecolor="white", alpha=0.75, edgecolor="none", boxstyle="round,pad=0.3"),
        )
    return ax
