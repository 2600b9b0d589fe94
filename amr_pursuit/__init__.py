"""Pure pursuit path tracking for wheeled mobile robots."""

from .control.controller import PurePursuitController
from .control.base import Controller, LifecycleState
from .config import PurePursuitParams
from .geometry import Path, Pose, Twist, VelocityCommand
from .errors import (
    PursuitError,
    ConfigError,
    LifecycleError,
    TickError,
    EmptyPathError,
    InvalidPathError,
    EmptyWindowError,
    TransformError,
    GridUnavailableError,
    DegenerateTimeStepError,
    CollisionImminentError,
)

__all__ = [
    "PurePursuitController",
    "Controller",
    "LifecycleState",
    "PurePursuitParams",
    "Path",
    "Pose",
    "Twist",
    "VelocityCommand",
    "PursuitError",
    "ConfigError",
    "LifecycleError",
    "TickError",
    "EmptyPathError",
    "InvalidPathError",
    "EmptyWindowError",
    "TransformError",
    "GridUnavailableError",
    "DegenerateTimeStepError",
    "CollisionImminentError",
]
