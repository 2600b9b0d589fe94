from __future__ import annotations

from enum import Enum
from typing import Any, Mapping, Optional, Protocol, runtime_checkable

from amr_pursuit.geometry import Path, Pose, Twist, VelocityCommand


class LifecycleState(str, Enum):
    UNCONFIGURED = "unconfigured"
    INACTIVE = "inactive"
    ACTIVE = "active"


@runtime_checkable
class Controller(Protocol):
    """Capability set a host uses to drive any motion controller."""

    state: LifecycleState
    # Most recent pursuit target in the robot frame, None before the first tick
    last_carrot: Optional[Pose]

    def configure(self, config: Mapping[str, Any], transformer, costmap, sink=None) -> None:
        ...

    def activate(self) -> None:
        ...

    def deactivate(self) -> None:
        ...

    def cleanup(self) -> None:
        ...

    def set_plan(self, path: Path) -> None:
        ...

    def compute_velocity_command(self, current_pose: Pose, current_twist: Twist) -> VelocityCommand:
        ...
