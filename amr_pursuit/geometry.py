"""Planar geometry primitives and the pose/path/velocity data model.

Poses are (x, y, yaw) in meters/radians tagged with a reference frame and a
stamp in seconds. Paths are ordered pose lists sharing one frame.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import List

import numpy as np

# Chord lengths below this (1 mm) produce zero curvature.
CURVATURE_EPS_M: float = 1e-3


def wrap_pi(a: float) -> float:
    """Normalize angle to [-pi, pi)."""
    wrapped = (a + math.pi) % (2.0 * math.pi) - math.pi
    if wrapped >= math.pi:
        wrapped -= 2.0 * math.pi
    return wrapped


@dataclass(frozen=True)
class Pose:
    x: float
    y: float
    yaw: float = 0.0
    frame_id: str = ""
    stamp: float = 0.0

    def with_frame(self, frame_id: str, stamp: float | None = None) -> "Pose":
        return replace(self, frame_id=frame_id, stamp=self.stamp if stamp is None else stamp)


@dataclass
class Path:
    frame_id: str
    stamp: float = 0.0
    poses: List[Pose] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.poses)

    @classmethod
    def from_waypoints(cls, waypoints: np.ndarray, frame_id: str, stamp: float = 0.0) -> "Path":
        """Build a path from an (N, 2) polyline; yaw follows segment headings."""
        pts = np.asarray(waypoints, dtype=float)
        if pts.ndim != 2 or pts.shape[1] != 2:
            raise ValueError("waypoints must be (N,2)")
        poses = []
        n = pts.shape[0]
        for i in range(n):
            if n == 1:
                yaw = 0.0
            else:
                j = min(i, n - 2)
                d = pts[j + 1] - pts[j]
                yaw = float(math.atan2(d[1], d[0]))
            poses.append(Pose(float(pts[i, 0]), float(pts[i, 1]), yaw, frame_id, stamp))
        return cls(frame_id=frame_id, stamp=stamp, poses=poses)

    def as_array(self) -> np.ndarray:
        if not self.poses:
            return np.zeros((0, 2), dtype=float)
        return np.array([[p.x, p.y] for p in self.poses], dtype=float)


@dataclass(frozen=True)
class Twist:
    linear: float = 0.0
    angular: float = 0.0


@dataclass(frozen=True)
class VelocityCommand:
    linear: float
    angular: float
    stamp: float
    frame_id: str = ""


def distance(a, b) -> float:
    """Planar Euclidean distance between two positions (anything with .x/.y)."""
    return math.hypot(a.x - b.x, a.y - b.y)


def norm(x: float, y: float) -> float:
    return math.hypot(x, y)


def curvature(lateral_offset: float, chord_length: float) -> float:
    """Pure-pursuit arc curvature kappa = 2*y / L^2.

    Returns 0.0 when the chord is shorter than CURVATURE_EPS_M. That value is
    a smoothing choice to avoid blowing up near the carrot, not a real
    curvature.
    """
    if chord_length < CURVATURE_EPS_M:
        return 0.0
    return 2.0 * lateral_offset / (chord_length * chord_length)


def clamp(v: float, lo: float, hi: float) -> float:
    return min(max(v, lo), hi)


def compose(base: Pose, local: Pose) -> Pose:
    """Express `local` (relative to `base`) in base's frame."""
    c = math.cos(base.yaw)
    s = math.sin(base.yaw)
    x = base.x + c * local.x - s * local.y
    y = base.y + s * local.x + c * local.y
    return Pose(x, y, wrap_pi(base.yaw + local.yaw), base.frame_id, base.stamp)
