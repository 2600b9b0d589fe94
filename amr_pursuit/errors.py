"""Error taxonomy for the path-tracking controller.

Every error names the component that raised it and carries the values that
triggered it, so an operator can tell which threshold was crossed.
"""

from __future__ import annotations

from typing import Any


class PursuitError(RuntimeError):
    """Base class for all controller errors."""

    def __init__(self, component: str, message: str, **details: Any) -> None:
        self.component = component
        self.message = message
        self.details = details
        super().__init__(self._format())

    def _format(self) -> str:
        text = f"[{self.component}] {self.message}"
        if self.details:
            kv = ", ".join(f"{k}={_fmt(v)}" for k, v in self.details.items())
            text = f"{text} ({kv})"
        return text


def _fmt(v: Any) -> str:
    if isinstance(v, float):
        return f"{v:.4g}"
    return repr(v) if isinstance(v, str) else str(v)


class ConfigError(PursuitError, ValueError):
    """Missing or out-of-domain parameters at configure time."""


class LifecycleError(PursuitError):
    """Operation called from a lifecycle state that does not allow it."""


class TickError(PursuitError):
    """Recoverable per-tick failure: the host should hold or stop this tick."""


class EmptyPathError(TickError):
    pass


class InvalidPathError(TickError):
    pass


class EmptyWindowError(TickError):
    pass


class TransformError(TickError):
    pass


class GridUnavailableError(TickError):
    pass


class DegenerateTimeStepError(TickError):
    pass


class CollisionImminentError(PursuitError):
    """Fatal to the tick: the command must not be issued."""
