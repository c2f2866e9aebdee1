import math

import pytest

from socialnav.geometry import Segment, SegmentMap, Vec2, angle_diff
from socialnav.human import Human


def test_safety_cost_peaks_at_person():
    h = Human()
    assert h.safety_cost(Vec2(0.0, 0.0)) == pytest.approx(20.0)


def test_safety_cost_decreases_with_distance():
    h = Human()
    near = h.safety_cost(Vec2(0.5, 0.0))
    far = h.safety_cost(Vec2(2.0, 0.0))
    assert near > far > 0.0


def test_safety_cost_wider_when_sitting():
    standing = Human()
    sitting = Human(standing=False)
    p = Vec2(1.5, 1.0)
    assert sitting.safety_cost(p) > standing.safety_cost(p)


def test_set_safety_std_dev_squares_sigma():
    h = Human()
    h.set_safety_std_dev(3.0, 5.0)
    assert h.safety_x_variance == pytest.approx(9.0)
    assert h.safety_y_variance == pytest.approx(25.0)


def test_set_visibility_std_dev_squares_sigma():
    h = Human()
    h.set_visibility_std_dev(2.0, 0.5)
    assert h.visibility_r_variance == pytest.approx(4.0)
    assert h.visibility_t_variance == pytest.approx(0.25)


def test_is_visible_front_and_back():
    h = Human()
    assert h.is_visible(Vec2(1.0, 0.0))
    assert not h.is_visible(Vec2(-1.0, 0.0))


def test_visibility_cost_zero_in_view_positive_behind():
    h = Human()
    assert h.visibility_cost(Vec2(2.0, 0.0)) == 0.0
    assert h.visibility_cost(Vec2(-2.0, 0.0)) > 0.0


def test_hidden_cost_at_obstruction_is_one():
    h = Human()
    robot = Vec2(2.0, 0.0)
    assert h.hidden_cost(robot, robot) == pytest.approx(1.0)


def test_hidden_cost_decreases_with_obstruction_distance():
    h = Human()
    robot = Vec2(2.0, 0.0)
    assert h.hidden_cost(robot, Vec2(1.0, 0.0)) < h.hidden_cost(robot, Vec2(1.5, 0.0))


def test_hidden_cost_zero_out_of_view_or_range():
    h = Human()
    assert h.hidden_cost(Vec2(-2.0, 0.0), Vec2(-1.0, 0.0)) == 0.0
    assert h.hidden_cost(Vec2(6.0, 0.0), Vec2(5.5, 0.0)) == 0.0


def test_is_hidden_behind_wall():
    h = Human()
    walls = SegmentMap([Segment(Vec2(1.0, -1.0), Vec2(1.0, 1.0))])
    assert h.is_hidden(Vec2(2.0, 0.0), walls)
    assert not h.is_hidden(Vec2(0.5, 0.0), walls)


def test_frame_round_trip():
    h = Human(loc=Vec2(3.0, -2.0), angle=0.7)
    p = Vec2(-1.25, 4.5)
    back = h.to_map_frame(h.to_local_frame(p))
    assert back.x == pytest.approx(p.x)
    assert back.y == pytest.approx(p.y)


def test_local_frame_puts_facing_direction_on_x_axis():
    h = Human(loc=Vec2(1.0, 1.0), angle=math.pi / 2)
    local = h.to_local_frame(Vec2(1.0, 3.0))
    assert local.x == pytest.approx(2.0)
    assert local.y == pytest.approx(0.0, abs=1e-12)


def test_move_ignores_tiny_steps():
    h = Human(vel=Vec2(1.0, 0.0), angular_vel=1.0)
    h.move(0.005)
    assert h.loc == Vec2(0.0, 0.0)
    assert h.angle == 0.0


def test_move_integrates_velocity():
    h = Human(vel=Vec2(1.0, 2.0))
    h.move(0.5)
    assert h.loc.x == pytest.approx(0.5)
    assert h.loc.y == pytest.approx(1.0)


def test_move_wraps_angle():
    h = Human(angle=3.0, angular_vel=1.0)
    h.move(0.5)
    assert -math.pi <= h.angle < math.pi
    assert angle_diff(h.angle, 3.5) == pytest.approx(0.0, abs=1e-9)


def test_moving_and_standing_flags():
    h = Human(standing=False)
    assert not h.is_moving
    assert not h.is_standing
    h.vel = Vec2(0.5, 0.0)
    assert h.is_moving
    assert h.is_standing