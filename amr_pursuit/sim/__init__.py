from .collision import CollisionChecker, inflate_grid
from .costmap import OccupancyCostGrid
from .dynamics import UnicycleModel, UnicycleState
from .transforms import TransformBuffer

__all__ = [
    "CollisionChecker",
    "inflate_grid",
    "OccupancyCostGrid",
    "UnicycleModel",
    "UnicycleState",
    "TransformBuffer",
]
