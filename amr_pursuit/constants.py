from __future__ import annotations

# Reference controller defaults
DESIRED_LINEAR_VEL_MPS: float = 0.5
MAX_ACCEL: float = 1.0
MAX_DECEL: float = 1.0
LOOKAHEAD_DIST_M: float = 0.4
MIN_LOOKAHEAD_DIST_M: float = 0.3
MAX_LOOKAHEAD_DIST_M: float = 0.6
LOOKAHEAD_GAIN: float = 1.5
MAX_ANGULAR_VEL_RPS: float = 1.0
TRANSFORM_TOLERANCE_S: float = 0.1

# Cost grid values
FREE_SPACE: int = 0
INSCRIBED_INFLATED_OBSTACLE: int = 253
LETHAL_OBSTACLE: int = 254
NO_INFORMATION: int = 255

# Frames
GLOBAL_FRAME: str = "map"
ODOM_FRAME: str = "odom"
BASE_FRAME: str = "base_link"

# Closed-loop runs
DT: float = 0.1
GRID_RESOLUTION_M: float = 0.05
GOAL_TOLERANCE_M: float = 0.15
