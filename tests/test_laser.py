import math

import pytest

from socialnav.geometry import Vec2
from socialnav.laser import LASER_LOCATION, quaternion_to_yaw, scan_to_point_cloud


def test_single_forward_beam_offset_by_laser():
    cloud = scan_to_point_cloud([1.0], 0.02, 10.0, 0.0, 0.0, 0.1)
    assert len(cloud) == 1
    assert cloud[0].x == pytest.approx(LASER_LOCATION.x + 1.0)
    assert cloud[0].y == pytest.approx(0.0)


def test_points_lie_at_measured_range_from_laser():
    ranges = [1.0, 2.0, 3.0]
    cloud = scan_to_point_cloud(ranges, 0.02, 10.0, -0.5, 0.5, 0.5)
    assert len(cloud) == 3
    for point, r in zip(cloud, ranges):
        assert (point - LASER_LOCATION).norm() == pytest.approx(r)


def test_too_few_ranges_raises():
    with pytest.raises(IndexError):
        scan_to_point_cloud([1.0], 0.0, 10.0, 0.0, 1.0, 0.1)


def test_nonpositive_increment_raises():
    with pytest.raises(ValueError):
        scan_to_point_cloud([1.0], 0.0, 10.0, 0.0, 1.0, 0.0)


@pytest.mark.parametrize("yaw", [0.0, 0.4, -1.2, 3.0])
def test_quaternion_to_yaw_round_trip(yaw):
    assert quaternion_to_yaw(math.sin(yaw / 2), math.cos(yaw / 2)) == pytest.approx(yaw)


def test_cloud_points_are_vectors():
    cloud = scan_to_point_cloud([1.0], 0.0, 10.0, math.pi / 2, math.pi / 2, 0.1)
    assert cloud[0].x == pytest.approx(LASER_LOCATION.x)
    assert cloud[0].y == pytest.approx(1.0)
    assert cloud == [Vec2(cloud[0].x, cloud[0].y)]