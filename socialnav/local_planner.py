"""Greedy selection among constant-curvature arcs around nearby obstacles."""

from __future__ import annotations

import dataclasses
import math
from typing import Iterable, Optional

from socialnav.geometry import Vec2, angle_between, is_between, sign
from socialnav.nav_types import Obstacle, PathOption

_NUM_PATHS = 20
_MIN_CURVATURE = 0.001
_MAX_TRIMMED_LENGTH = 3.0


def _safe_acos(value: float) -> Optional[float]:
    return math.acos(value) if -1.0 <= value <= 1.0 else None


def _safe_asin(value: float) -> Optional[float]:
    return math.asin(value) if -1.0 <= value <= 1.0 else None


def _ratio(numerator: float, denominator: float) -> float:
    if denominator == 0:
        return 0.0 if numerator == 0 else math.inf
    return numerator / denominator


class LocalPlanner:
    """Scores a fan of arcs in the robot frame and picks the cheapest one."""

    def __init__(
        self,
        car_width: float = 0.27,
        car_length: float = 0.5,
        padding: float = 0.1,
        wheelbase: float = 0.324,
        curvature_max: float = 1.0,
        clearance_limit: float = 1.0,
    ) -> None:
        self.car_width = car_width
        self.car_length = car_length
        self.padding = padding
        self.wheelbase = wheelbase
        self.curvature_max = curvature_max
        self.clearance_limit = clearance_limit
        self.free_path_length_weight = 1.0
        self.clearance_weight = 100.0
        self.distance_to_goal_weight = 1.0
        self.paths: list[PathOption] = []

        half_width = car_width / 2.0 + padding
        front = (wheelbase + car_length) / 2.0 + padding
        self._half_width = half_width
        self._front = front
        self._pmin = Vec2(0.0, half_width)
        self._pdif = Vec2(front, half_width)
        self._pmax = Vec2(front, -half_width)

    def set_weights(self, w_fpl: float, w_c: float, w_dtg: float) -> None:
        """Set weights for free path length, clearance and distance to goal."""
        self.free_path_length_weight = w_fpl
        self.clearance_weight = w_c
        self.distance_to_goal_weight = w_dtg

    def _create_possible_paths(self, num: int) -> None:
        increment = 2.0 * self.curvature_max / num
        self.paths = []
        for i in range(num):
            curvature = -self.curvature_max + i * increment
            # Nearly straight arcs make the trigonometry ill-conditioned.
            if abs(curvature) < _MIN_CURVATURE:
                curvature = _MIN_CURVATURE
            self.paths.append(PathOption(curvature=curvature))

    def _trim_path_length(self, path: PathOption, goal: Vec2) -> None:
        center = Vec2(0.0, 1.0 / path.curvature)
        angle = angle_between(goal, Vec2(), center)
        if goal.x < 0:
            angle = 2.0 * math.pi - angle

        length_to_goal = abs(angle / path.curvature)
        if length_to_goal < path.free_path_length:
            path.free_path_length = min(length_to_goal, _MAX_TRIMMED_LENGTH)
            path.obstruction = center + (goal - center).normalized() * (1.0 / path.curvature)

        radius = 1.0 / path.curvature
        theta = path.free_path_length / radius
        path.fpl_end = Vec2(radius * math.sin(theta), radius * (1.0 - math.cos(theta)))

    def _predict_collisions(
        self, path: PathOption, goal_loc: Vec2, obstacles: list[Obstacle]
    ) -> None:
        radius = 1.0 / path.curvature
        turning_center = Vec2(0.0, radius)
        side = sign(radius)

        rmin = (turning_center * side - self._pmin).norm()
        rdif = (turning_center * side - self._pdif).norm()
        rmax = (turning_center * side - self._pmax).norm()

        fpl_min = abs(math.pi * radius)
        p_obstruction = Vec2(0.0, 2.0 * radius)

        for obs in obstacles:
            obs_loc = obs.loc
            obs_radius = (turning_center - obs_loc).norm()
            if obs_loc.norm() > goal_loc.x + self.car_length:
                continue
            if not rmin < obs_radius < rmax:
                continue

            if obs_radius < rdif:
                phi = _safe_acos((side * radius - self._half_width) / obs_radius)
                if phi is None:
                    continue
                p_current = Vec2(obs_radius * math.sin(phi), side * self._half_width)
            else:
                phi = _safe_asin(self._front / obs_radius)
                if phi is None:
                    continue
                p_current = Vec2(self._front, radius - side * obs_radius * math.cos(phi))

            side_length = (obs_loc - p_current).norm()
            r_sq = obs_radius * obs_radius
            theta = _safe_acos((side_length * side_length - 2.0 * r_sq) / (-2.0 * r_sq))
            if theta is None:
                continue
            fpl_current = side * theta * radius
            if fpl_current < fpl_min:
                fpl_min = fpl_current
                p_obstruction = obs_loc

        path.obstruction = p_obstruction
        path.free_path_length = fpl_min

    def _calculate_clearance(self, path: PathOption, obstacles: list[Obstacle]) -> None:
        radius = 1.0 / path.curvature
        theta = path.free_path_length / radius
        look_ahead = 5.0 * self.car_length

        center = Vec2(0.0, radius)
        start_point = Vec2()
        end_point = Vec2(
            radius * math.sin(theta) + look_ahead * math.cos(theta),
            radius * (1.0 - math.cos(theta)) + look_ahead * math.sin(theta),
        )
        point_1, point_2 = (start_point, end_point) if radius > 0 else (end_point, start_point)

        min_clearance = self.clearance_limit
        closest_point = Vec2()
        for obs in obstacles:
            if is_between(center, point_1, point_2, obs.loc):
                clearance = abs((center - obs.loc).norm() - abs(radius))
                if clearance < min_clearance:
                    min_clearance = clearance
                    closest_point = obs.loc
        path.clearance = min_clearance
        path.closest_point = closest_point

    def greedy_path(self, goal_loc: Vec2, obstacles: Iterable[Obstacle]) -> PathOption:
        """Evaluate the arc fan towards ``goal_loc`` (robot frame) and return the best.

        The evaluated arcs stay available in ``paths``.
        """
        obstacle_list = list(obstacles)
        self._create_possible_paths(_NUM_PATHS)

        max_free_path_length = 1e-5
        max_clearance_padded = 1e-5
        min_distance_to_goal = 1e5
        padded: list[float] = []

        for path in self.paths:
            self._predict_collisions(path, goal_loc, obstacle_list)
            self._trim_path_length(path, goal_loc)
            self._calculate_clearance(path, obstacle_list)
            clearance_padded = path.clearance - (self.car_width / 2.0 + self.padding * 2.0)
            if clearance_padded < 0:
                clearance_padded = 1e-5
            path.distance_to_goal = (path.fpl_end - goal_loc).norm()

            max_free_path_length = max(path.free_path_length, max_free_path_length)
            max_clearance_padded = max(clearance_padded, max_clearance_padded)
            min_distance_to_goal = min(path.distance_to_goal, min_distance_to_goal)
            padded.append(clearance_padded)

        best = PathOption()
        min_cost = 1e10
        for path, clearance_padded in zip(self.paths, padded):
            cost = (
                -(path.free_path_length / max_free_path_length) * self.free_path_length_weight
                + (max_clearance_padded / clearance_padded) * self.clearance_weight
                + _ratio(path.distance_to_goal, min_distance_to_goal)
                * self.distance_to_goal_weight
            )
            path.cost = cost
            if cost < min_cost:
                min_cost = cost
                best = path
        return dataclasses.replace(best)