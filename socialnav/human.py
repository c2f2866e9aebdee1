"""A person in the environment and the social costs of being near them."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from socialnav.geometry import SegmentMap, Vec2, angle_diff

_COST_WEIGHT = 20.0
_SEATED_SPREAD = 1.25
_MOVING_THRESHOLD = 0.005


@dataclass
class Human:
    """Pose, motion and social-cost parameters of one person.

    Variances widen by a factor of 2.25 when the person is not standing.
    """

    loc: Vec2 = field(default_factory=Vec2)
    angle: float = 0.0
    vel: Vec2 = field(default_factory=Vec2)
    angular_vel: float = 0.0
    standing: bool = True
    fov: float = 3.0 * math.pi / 4.0
    vision_range: float = 5.0
    safety_x_variance: float = 4.0
    safety_y_variance: float = 4.0
    visibility_r_variance: float = 10.0
    visibility_t_variance: float = 2.0
    hidden_decay: float = 1.0

    @property
    def is_moving(self) -> bool:
        """Whether the person translates or turns noticeably."""
        return self.vel.norm() + abs(self.angular_vel) > _MOVING_THRESHOLD

    @property
    def is_standing(self) -> bool:
        """Whether the person stands or is in motion."""
        return self.standing or self.is_moving

    def set_safety_std_dev(self, sigma_x: float, sigma_y: float) -> None:
        """Set the spread of the safety field from standard deviations."""
        self.safety_x_variance = sigma_x * sigma_x
        self.safety_y_variance = sigma_y * sigma_y

    def set_visibility_std_dev(self, sigma_r: float, sigma_t: float) -> None:
        """Set the spread of the visibility field from standard deviations."""
        self.visibility_r_variance = sigma_r * sigma_r
        self.visibility_t_variance = sigma_t * sigma_t

    def _spread(self, variance: float) -> float:
        return variance + _SEATED_SPREAD * variance * (not self.standing)

    def safety_cost(self, robot_loc: Vec2) -> float:
        """Gaussian cost of the robot being close to the person (map frame)."""
        local = self.to_local_frame(robot_loc)
        x_var = self._spread(self.safety_x_variance)
        y_var = self._spread(self.safety_y_variance)
        cost = math.exp(-(local.x ** 2) / x_var - (local.y ** 2) / y_var)
        return _COST_WEIGHT * cost

    def visibility_cost(self, robot_loc: Vec2) -> float:
        """Cost of the robot being out of the person's field of view (map frame)."""
        local = self.to_local_frame(robot_loc)
        r_sq = (self.loc - robot_loc).squared_norm()
        bearing = math.atan2(robot_loc.y - self.loc.y, robot_loc.x - self.loc.x)
        d_theta = angle_diff(bearing, self.angle)
        r_var = self._spread(self.visibility_r_variance)
        t_var = self._spread(self.visibility_t_variance)
        cost = 0.0
        if not self.is_visible(local):
            cost = math.exp(-r_sq / r_var - (math.pi - abs(d_theta)) ** 2 / t_var)
        return _COST_WEIGHT * cost

    def hidden_cost(self, robot_loc: Vec2, obs_loc: Vec2) -> float:
        """Surprise cost of appearing from behind the obstruction at ``obs_loc``.

        Whether the robot is actually hidden is not checked here.
        """
        local = self.to_local_frame(robot_loc)
        if self.is_visible(local) and (robot_loc - self.loc).norm() < self.vision_range:
            return 1.0 / (1.0 + self.hidden_decay * (obs_loc - robot_loc).norm())
        return 0.0

    def is_visible(self, local_loc: Vec2) -> bool:
        """Whether a point in the person's frame lies inside the field of view."""
        vision_angle = math.atan2(local_loc.y, local_loc.x)
        return -self.fov / 2.0 < vision_angle < self.fov / 2.0

    def is_hidden(self, robot_loc: Vec2, segment_map: SegmentMap) -> bool:
        """Whether a wall blocks the line of sight to ``robot_loc`` (map frame)."""
        return segment_map.intersects(self.loc, robot_loc)

    def move(self, dt: float) -> None:
        """Advance the person by their velocities over ``dt`` seconds."""
        if dt < 0.01:
            return
        self.loc = self.loc + self.vel * dt
        new_angle = self.angle + self.angular_vel * dt
        if new_angle >= math.pi:
            new_angle -= 2.0 * math.pi
        elif new_angle < -math.pi:
            new_angle += 2.0 * math.pi
        self.angle = new_angle

    def to_local_frame(self, p: Vec2) -> Vec2:
        """Express a map-frame point in the person's frame."""
        return (p - self.loc).rotated(-self.angle)

    def to_map_frame(self, p: Vec2) -> Vec2:
        """Express a point in the person's frame in the map frame."""
        return self.loc + p.rotated(self.angle)