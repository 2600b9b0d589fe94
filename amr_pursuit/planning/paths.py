"""Reference polylines for closed-loop runs."""

from __future__ import annotations

import numpy as np


def straight_path(length: float = 4.0, step: float = 0.05, start: tuple[float, float] = (0.0, 0.0)) -> np.ndarray:
    n = max(2, int(round(length / step)) + 1)
    x = np.linspace(start[0], start[0] + length, n)
    y = np.full(n, float(start[1]))
    return np.stack([x, y], axis=1)


def s_path(
    length: float = 6.0,
    amp: float = 0.6,
    periods: float = 1.0,
    step: float = 0.05,
    start: tuple[float, float] = (0.0, 0.0),
) -> np.ndarray:
    """Sine-shaped path along +x starting at `start`."""
    n = max(2, int(round(length / step)) + 1)
    s = np.linspace(0.0, length, n)
    x = start[0] + s
    y = start[1] + amp * np.sin(2.0 * np.pi * periods * s / length)
    return np.stack([x, y], axis=1)


def arc_path(
    radius: float = 1.5,
    sweep_rad: float = np.pi / 2.0,
    step: float = 0.05,
    start: tuple[float, float] = (0.0, 0.0),
) -> np.ndarray:
    """Left-turning arc tangent to +x at `start`."""
    n = max(2, int(np.ceil(abs(radius * sweep_rad) / step)) + 1)
    phi = np.linspace(0.0, sweep_rad, n)
    x = start[0] + radius * np.sin(phi)
    y = start[1] + radius * (1.0 - np.cos(phi))
    return np.stack([x, y], axis=1)


PATHS = {
    "straight": straight_path,
    "s": s_path,
    "arc": arc_path,
}
