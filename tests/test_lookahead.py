import math

import pytest

from amr_pursuit.errors import ConfigError, EmptyWindowError
from amr_pursuit.control.lookahead import LookaheadSelector
from amr_pursuit.geometry import Pose


def scaled() -> LookaheadSelector:
    return LookaheadSelector(0.4, 0.3, 0.6, 1.5, use_velocity_scaled=True)


def test_fixed_lookahead_ignores_speed() -> None:
    sel = LookaheadSelector(0.4, 0.3, 0.6, 1.5, use_velocity_scaled=False)
    assert sel.effective_lookahead(0.0) == 0.4
    assert sel.effective_lookahead(10.0) == 0.4


@pytest.mark.parametrize("speed", [0.0, 0.1, 0.25, 0.35, 1.0, 100.0, math.inf])
def test_scaled_lookahead_within_bounds(speed) -> None:
    la = scaled().effective_lookahead(speed)
    assert 0.3 <= la <= 0.6


def test_scaled_lookahead_saturates_and_scales() -> None:
    sel = scaled()
    assert sel.effective_lookahead(0.0) == 0.3
    assert sel.effective_lookahead(math.inf) == 0.6
    assert sel.effective_lookahead(0.3) == pytest.approx(0.45)


def test_scaled_lookahead_never_nan() -> None:
    sel = LookaheadSelector(0.4, 0.3, 0.6, 0.0, use_velocity_scaled=True)
    assert sel.effective_lookahead(math.inf) == 0.3
    assert scaled().effective_lookahead(math.nan) == 0.3


def test_min_above_max_is_config_error() -> None:
    with pytest.raises(ConfigError):
        LookaheadSelector(0.4, 0.7, 0.6, 1.5)


def test_carrot_first_pose_beyond_lookahead() -> None:
    window = [Pose(0.0, 0.0), Pose(1.0, 0.0), Pose(2.0, 0.0)]
    carrot = LookaheadSelector.select_carrot(window, 1.5)
    assert (carrot.x, carrot.y) == (2.0, 0.0)


def test_carrot_exactly_at_lookahead_counts() -> None:
    window = [Pose(0.5, 0.0), Pose(1.0, 0.0), Pose(2.0, 0.0)]
    assert LookaheadSelector.select_carrot(window, 1.0).x == 1.0


def test_carrot_falls_back_to_last_pose() -> None:
    window = [Pose(0.1, 0.0), Pose(0.2, 0.1), Pose(0.3, 0.1)]
    carrot = LookaheadSelector.select_carrot(window, 5.0)
    assert carrot is window[-1]


def test_empty_window_raises() -> None:
    with pytest.raises(EmptyWindowError):
        LookaheadSelector.select_carrot([], 1.0)
