"""2-D frame transform buffer.

Design decisions:
- Frames form a tree; each child stores its latest pose in its parent frame.
- A lookup walks both frames up to their common ancestor and composes edges.
- Static edges never go stale. A dynamic edge is stale when it is older than
  ``pose.stamp - tolerance``; stale or disconnected lookups raise
  TransformError instead of blocking.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol, Tuple

from amr_pursuit.errors import TransformError
from amr_pursuit.geometry import Pose, compose, wrap_pi


class FrameTransformer(Protocol):
    def transform(self, pose: Pose, target_frame: str, tolerance: float) -> Pose:
        ...


@dataclass(frozen=True)
class _Edge:
    parent: str
    x: float
    y: float
    yaw: float
    stamp: Optional[float]  # None = static


def _inverse(x: float, y: float, yaw: float) -> Tuple[float, float, float]:
    c = math.cos(yaw)
    s = math.sin(yaw)
    return -(c * x + s * y), -(-s * x + c * y), wrap_pi(-yaw)


def _chain(a: Tuple[float, float, float], b: Tuple[float, float, float]) -> Tuple[float, float, float]:
    p = compose(Pose(*a), Pose(*b))
    return p.x, p.y, p.yaw


class TransformBuffer:
    """In-memory frame tree answering planar pose transforms."""

    def __init__(self) -> None:
        self._edges: Dict[str, _Edge] = {}

    def set_transform(self, parent: str, child: str, x: float, y: float, yaw: float, stamp: float) -> None:
        """Set the pose of `child` expressed in `parent` at time `stamp`."""
        self._set(parent, child, _Edge(parent, float(x), float(y), wrap_pi(float(yaw)), float(stamp)))

    def set_static_transform(self, parent: str, child: str, x: float = 0.0, y: float = 0.0, yaw: float = 0.0) -> None:
        self._set(parent, child, _Edge(parent, float(x), float(y), wrap_pi(float(yaw)), None))

    def _set(self, parent: str, child: str, edge: _Edge) -> None:
        if parent == child:
            raise ValueError("parent and child frames must differ")
        if child in self._ancestors(parent):
            raise ValueError(f"transform {parent}->{child} would create a cycle")
        existing = self._edges.get(child)
        if existing is not None and existing.parent != parent:
            raise ValueError(f"frame {child} already has parent {existing.parent}")
        self._edges[child] = edge

    def _ancestors(self, frame: str) -> List[str]:
        chain = [frame]
        while chain[-1] in self._edges:
            chain.append(self._edges[chain[-1]].parent)
        return chain

    def _to_ancestor(self, frame: str, ancestor: str, stamp: float, tolerance: float) -> Tuple[float, float, float]:
        """Pose of `frame` expressed in `ancestor`."""
        acc = (0.0, 0.0, 0.0)
        f = frame
        while f != ancestor:
            e = self._edges[f]
            if e.stamp is not None and e.stamp < stamp - tolerance:
                raise TransformError(
                    "transforms",
                    "transform is stale",
                    edge=f"{e.parent}->{f}",
                    edge_stamp=e.stamp,
                    requested=stamp,
                    tolerance=tolerance,
                )
            acc = _chain((e.x, e.y, e.yaw), acc)
            f = e.parent
        return acc

    def lookup(self, target_frame: str, source_frame: str, stamp: float, tolerance: float) -> Tuple[float, float, float]:
        """Pose of `source_frame` expressed in `target_frame`."""
        if target_frame == source_frame:
            return (0.0, 0.0, 0.0)
        up_src = self._ancestors(source_frame)
        up_tgt = self._ancestors(target_frame)
        common = next((f for f in up_src if f in up_tgt), None)
        if common is None:
            raise TransformError(
                "transforms",
                "frames are not connected",
                source=source_frame,
                target=target_frame,
            )
        src_in_common = self._to_ancestor(source_frame, common, stamp, tolerance)
        tgt_in_common = self._to_ancestor(target_frame, common, stamp, tolerance)
        return _chain(_inverse(*tgt_in_common), src_in_common)

    def transform(self, pose: Pose, target_frame: str, tolerance: float) -> Pose:
        if not pose.frame_id:
            raise TransformError("transforms", "pose has no frame", target=target_frame)
        x, y, yaw = self.lookup(target_frame, pose.frame_id, pose.stamp, tolerance)
        out = compose(Pose(x, y, yaw), Pose(pose.x, pose.y, pose.yaw))
        return Pose(out.x, out.y, out.yaw, target_frame, pose.stamp)
