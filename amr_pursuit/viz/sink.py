"""Observability sinks for published paths.

A sink is opened on controller activation and closed on deactivation.
Publishing is best-effort: the controller logs sink failures and moves on.
"""

from __future__ import annotations

from collections import deque
from typing import Deque, List, Protocol

from amr_pursuit.geometry import Path


class PathSink(Protocol):
    def open(self) -> None:
        ...

    def close(self) -> None:
        ...

    def publish(self, path: Path) -> None:
        ...


class NullPathSink:
    """Discards everything."""

    def open(self) -> None:
        pass

    def close(self) -> None:
        pass

    def publish(self, path: Path) -> None:
        pass


class RecordingPathSink:
    """Keeps the most recent published paths in memory."""

    def __init__(self, maxlen: int = 256) -> None:
        self._paths: Deque[Path] = deque(maxlen=maxlen)
        self.is_open = False
        self.open_count = 0

    def open(self) -> None:
        self.is_open = True
        self.open_count += 1

    def close(self) -> None:
        self.is_open = False

    def publish(self, path: Path) -> None:
        if not self.is_open:
            return
        self._paths.append(Path(path.frame_id, path.stamp, list(path.poses)))

    @property
    def paths(self) -> List[Path]:
        return list(self._paths)

    @property
    def last(self) -> Path | None:
        return self._paths[-1] if self._paths else None


def publish_quietly(sink: PathSink | None, path: Path, logger) -> bool:
    """Publish without letting a sink failure escape into the control tick."""
    if sink is None:
        return False
    try:
        sink.publish(path)
    except Exception as exc:
        logger.warning("Failed to publish path (%d poses): %s", len(path), exc)
        return False
    return True
