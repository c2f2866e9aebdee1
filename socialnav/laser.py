"""Conversion of laser scans and orientations into planar quantities."""

from __future__ import annotations

import math
from typing import Sequence

from socialnav.geometry import Vec2

LASER_LOCATION = Vec2(0.2, 0.0)
"""Position of the forward-facing laser in the robot frame."""


def scan_to_point_cloud(
    ranges: Sequence[float],
    range_min: float,
    range_max: float,
    angle_min: float,
    angle_max: float,
    angle_increment: float,
) -> list[Vec2]:
    """Turn a laser scan into obstacle points in the robot frame.

    Readings at or below ``range_min`` or at or beyond 95% of ``range_max``
    are dropped so that the scanner's maximum range is not taken for an
    obstacle.
    """
    if angle_increment <= 0:
        raise ValueError("angle_increment must be positive")
    cloud: list[Vec2] = []
    index = 0
    theta = angle_min
    while theta <= angle_max:
        if index >= len(ranges):
            raise IndexError(f"scan has {len(ranges)} ranges but needs more")
        distance = ranges[index]
        if range_min < distance < 0.95 * range_max:
            cloud.append(
                LASER_LOCATION + Vec2(distance * math.cos(theta), distance * math.sin(theta))
            )
        index += 1
        theta = angle_min + index * angle_increment
    return cloud


def quaternion_to_yaw(z: float, w: float) -> float:
    """Yaw angle of a rotation about the vertical axis given as a quaternion."""
    return 2.0 * math.atan2(z, w)