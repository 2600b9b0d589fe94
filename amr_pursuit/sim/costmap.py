"""2-D cost grid collaborator.

Grid convention: costs[i, j] covers [ox + j*res, ox + (j+1)*res) x
[oy + i*res, oy + (i+1)*res) in `global_frame`. Values follow the usual
costmap scale: 0 free, 253 inscribed, 254 lethal, 255 no information.
"""

from __future__ import annotations

from typing import Optional, Protocol

import numpy as np

from amr_pursuit.constants import (
    BASE_FRAME,
    FREE_SPACE,
    INSCRIBED_INFLATED_OBSTACLE,
    LETHAL_OBSTACLE,
    ODOM_FRAME,
)
from amr_pursuit.errors import GridUnavailableError
from amr_pursuit.sim.collision import inflate_grid


class CostGrid(Protocol):
    resolution: float
    global_frame: str
    base_frame: str

    @property
    def size_in_cells_x(self) -> int:
        ...

    @property
    def size_in_cells_y(self) -> int:
        ...

    def window_radius(self) -> float:
        ...

    def cost_at(self, x: float, y: float) -> Optional[int]:
        ...


class OccupancyCostGrid:
    """Static cost grid backed by a numpy uint8 array.

    Args:
        resolution: meters per cell.
        costs: (H, W) uint8 array, or None until the first update.
        origin: world (x, y) of cell (0, 0)'s lower-left corner.
        global_frame: frame the grid is expressed in.
        base_frame: robot body frame used for the path window.
    """

    def __init__(
        self,
        resolution: float,
        costs: Optional[np.ndarray] = None,
        origin: tuple[float, float] = (0.0, 0.0),
        *,
        global_frame: str = ODOM_FRAME,
        base_frame: str = BASE_FRAME,
    ) -> None:
        assert resolution > 0.0, "resolution must be > 0"
        self.resolution = float(resolution)
        self.origin_x = float(origin[0])
        self.origin_y = float(origin[1])
        self.global_frame = global_frame
        self.base_frame = base_frame
        self._costs: Optional[np.ndarray] = None
        if costs is not None:
            self.update(costs)

    @classmethod
    def from_occupancy(
        cls,
        occupied: np.ndarray,
        resolution: float,
        inflation_radius: float = 0.0,
        origin: tuple[float, float] = (0.0, 0.0),
        **kwargs,
    ) -> "OccupancyCostGrid":
        """Occupied cells become lethal; cells within `inflation_radius` become inscribed."""
        occ = np.asarray(occupied, dtype=bool)
        inflated = inflate_grid(occ, inflation_radius, resolution)
        costs = np.full(occ.shape, FREE_SPACE, dtype=np.uint8)
        costs[inflated] = INSCRIBED_INFLATED_OBSTACLE
        costs[occ] = LETHAL_OBSTACLE
        return cls(resolution, costs, origin, **kwargs)

    def update(self, costs: np.ndarray) -> None:
        arr = np.asarray(costs)
        assert arr.ndim == 2, "costs must be a 2D array"
        self._costs = arr.astype(np.uint8, copy=True)

    @property
    def costs(self) -> np.ndarray:
        if self._costs is None:
            raise GridUnavailableError("costmap", "no cost data received yet")
        return self._costs

    @property
    def size_in_cells_x(self) -> int:
        return int(self.costs.shape[1])

    @property
    def size_in_cells_y(self) -> int:
        return int(self.costs.shape[0])

    def window_radius(self) -> float:
        """Half of the larger grid side in meters."""
        return max(self.size_in_cells_x, self.size_in_cells_y) * self.resolution / 2.0

    def world_to_map(self, x: float, y: float) -> Optional[tuple[int, int]]:
        j = int(np.floor((x - self.origin_x) / self.resolution))
        i = int(np.floor((y - self.origin_y) / self.resolution))
        if 0 <= i < self.size_in_cells_y and 0 <= j < self.size_in_cells_x:
            return i, j
        return None

    def cost_at(self, x: float, y: float) -> Optional[int]:
        """Cost at a world point, or None when the point is off the grid."""
        cell = self.world_to_map(x, y)
        if cell is None:
            return None
        return int(self.costs[cell])
