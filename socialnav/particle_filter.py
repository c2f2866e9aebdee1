"""Monte Carlo localization against a map of wall segments."""

from __future__ import annotations

import dataclasses
import logging
import math
import random
from dataclasses import dataclass, field
from typing import Optional, Sequence

from socialnav.geometry import Segment, SegmentMap, Vec2, angle_diff

logger = logging.getLogger(__name__)

LIDAR_OFFSET = 0.2
"""Distance of the laser ahead of the robot's origin."""

_RAY_STRIDE = 10
_RESAMPLE_EVERY = 5
_MIN_UPDATE_DISTANCE = 0.1
_MAX_UPDATE_DISTANCE = 1.0
_MAX_ODOM_JUMP = 1.0
_INIT_LOC_STD = 0.25
_INIT_ANGLE_STD = math.pi / 6.0

# Motion model noise: translation per translation, translation per rotation,
# rotation per translation, rotation per rotation.
_K1 = 0.40
_K2 = 0.02
_K3 = 0.20
_K4 = 0.40


@dataclass
class Particle:
    """One pose hypothesis and its log weight."""

    loc: Vec2 = field(default_factory=Vec2)
    angle: float = 0.0
    log_weight: float = 0.0


def _lidar_location(loc: Vec2, angle: float) -> Vec2:
    return loc + Vec2(math.cos(angle), math.sin(angle)) * LIDAR_OFFSET


class ParticleFilter:
    """Tracks the robot pose with weighted particles."""

    def __init__(
        self,
        segment_map: Optional[SegmentMap] = None,
        num_particles: int = 50,
        rng: Optional[random.Random] = None,
        var_obs: float = 1.0,
        d_short: float = 0.5,
        d_long: float = 0.5,
    ) -> None:
        self.segment_map = segment_map if segment_map is not None else SegmentMap()
        self.num_particles = num_particles
        self.rng = rng if rng is not None else random.Random()
        self.var_obs = var_obs
        self.d_short = d_short
        self.d_long = d_long
        self.particles: list[Particle] = []
        self.prev_odom_loc = Vec2()
        self.prev_odom_angle = 0.0
        self.odom_initialized = False
        self.max_log_weight = 0.0
        self.updates_since_last_resample = 0
        self.last_update_loc = Vec2()
        self.last_resample_loc = Vec2()

    def predicted_point_cloud(
        self,
        loc: Vec2,
        angle: float,
        num_ranges: int,
        range_min: float,
        range_max: float,
        angle_min: float,
        angle_max: float,
    ) -> list[Vec2]:
        """Points a laser at the given pose would see, one for every tenth ray (map frame)."""
        lidar_loc = _lidar_location(loc, angle)
        scan: list[Vec2] = []
        for i in range(num_ranges // _RAY_STRIDE):
            ray_angle = angle + _RAY_STRIDE * i / num_ranges * (angle_max - angle_min) + angle_min
            direction = Vec2(math.cos(ray_angle), math.sin(ray_angle))
            ray = Segment(lidar_loc + direction * range_min, lidar_loc + direction * range_max)

            closest = lidar_loc + direction * range_max
            closest_distance = range_max
            for wall in self.segment_map.lines:
                point = wall.intersection(ray)
                if point is None:
                    continue
                distance = (point - loc).norm()
                if distance < closest_distance:
                    closest_distance = distance
                    closest = point
            scan.append(closest)
        return scan

    def update(
        self,
        ranges: Sequence[float],
        range_min: float,
        range_max: float,
        angle_min: float,
        angle_max: float,
        particle: Particle,
    ) -> None:
        """Adjust the log weight of ``particle`` by how well ``ranges`` fit the map."""
        if not self.odom_initialized:
            return
        predicted = self.predicted_point_cloud(
            particle.loc, particle.angle, len(ranges), range_min, range_max, angle_min, angle_max
        )
        if not predicted:
            raise ValueError(f"a scan needs at least {_RAY_STRIDE} ranges")
        ratio = len(ranges) // len(predicted)
        lidar_loc = _lidar_location(particle.loc, particle.angle)

        log_error_sum = 0.0
        for i, predicted_point in enumerate(predicted):
            # Readings at the limits of the scanner's range are unreliable.
            if ranges[i] > 0.95 * range_max or ranges[i] < 1.05 * range_min:
                continue
            predicted_range = (predicted_point - lidar_loc).norm()
            range_diff = ranges[ratio * i] - predicted_range
            range_diff = max(min(range_diff, self.d_long), -self.d_short)
            log_error_sum += -(range_diff ** 2) / self.var_obs
        particle.log_weight += log_error_sum

    def resample(self) -> None:
        """Draw a new particle set in proportion to the weights (low-variance sampling)."""
        if not self.particles or not self.odom_initialized:
            return

        normalized_sum = 0.0
        breakpoints: list[float] = []
        for particle in self.particles:
            particle.log_weight -= self.max_log_weight
            normalized_sum += math.exp(particle.log_weight)
            breakpoints.append(normalized_sum)

        division_size = normalized_sum / len(self.particles)
        if division_size == 0:
            return
        sample_point = self.rng.uniform(0.0, division_size)

        new_particles: list[Particle] = []
        for particle, breakpoint in zip(self.particles, breakpoints):
            while breakpoint > sample_point:
                new_particles.append(dataclasses.replace(particle))
                sample_point += division_size

        self.max_log_weight = 0.0
        self.particles = new_particles

    def observe_laser(
        self,
        ranges: Sequence[float],
        range_min: float,
        range_max: float,
        angle_min: float,
        angle_max: float,
    ) -> None:
        """Weigh the particles against a new scan once the robot has moved a little."""
        moved = (self.prev_odom_loc - self.last_update_loc).norm()
        if not _MIN_UPDATE_DISTANCE < moved < _MAX_UPDATE_DISTANCE:
            return
        self.last_update_loc = self.prev_odom_loc
        self.max_log_weight = -math.inf
        for particle in self.particles:
            self.update(ranges, range_min, range_max, angle_min, angle_max, particle)
            self.max_log_weight = max(self.max_log_weight, particle.log_weight)

        if self.updates_since_last_resample > _RESAMPLE_EVERY:
            self.resample()
            self.updates_since_last_resample = 0
            self.last_resample_loc = self.prev_odom_loc
        else:
            self.updates_since_last_resample += 1

    def observe_odometry(self, odom_loc: Vec2, odom_angle: float) -> None:
        """Move every particle by the odometry change, or reset on a first or large jump."""
        odom_trans_diff = odom_loc - self.prev_odom_loc
        if self.odom_initialized and odom_trans_diff.norm() < _MAX_ODOM_JUMP:
            dtheta = angle_diff(odom_angle, self.prev_odom_angle)
            for particle in self.particles:
                odom_to_map = angle_diff(particle.angle, self.prev_odom_angle)
                map_trans_diff = odom_trans_diff.rotated(odom_to_map)
                self.update_particle_location(map_trans_diff, dtheta, particle)
            self.prev_odom_loc = odom_loc
            self.prev_odom_angle = odom_angle
        else:
            self.reset_odom_variables(odom_loc, odom_angle)
            self.odom_initialized = True
            logger.info("odometry reset due to initialization or large movement")

    def update_particle_location(
        self, map_trans_diff: Vec2, dtheta_odom: float, particle: Particle
    ) -> None:
        """Apply a motion to ``particle`` with noise scaled by its size."""
        translation = map_trans_diff.norm()
        rotation = abs(dtheta_odom)
        translation_std = _K1 * translation + _K2 * rotation
        rotation_std = _K3 * translation + _K4 * rotation
        noise = Vec2(self.rng.gauss(0.0, translation_std), self.rng.gauss(0.0, translation_std))
        particle.loc = particle.loc + map_trans_diff + noise
        particle.angle += dtheta_odom + self.rng.gauss(0.0, rotation_std)

    def initialize(self, loc: Vec2, angle: float) -> None:
        """Scatter fresh particles around a given pose."""
        self.particles = []
        self.odom_initialized = False
        self.reset_odom_variables(loc, angle)
        for _ in range(self.num_particles):
            self.particles.append(
                Particle(
                    loc=Vec2(
                        self.rng.gauss(loc.x, _INIT_LOC_STD),
                        self.rng.gauss(loc.y, _INIT_LOC_STD),
                    ),
                    angle=self.rng.gauss(angle, _INIT_ANGLE_STD),
                    log_weight=0.0,
                )
            )

    def reset_odom_variables(self, loc: Vec2, angle: float) -> None:
        """Forget odometry history and take ``loc``/``angle`` as the reference."""
        self.last_update_loc = loc
        self.last_resample_loc = loc
        self.prev_odom_loc = loc
        self.prev_odom_angle = angle
        self.updates_since_last_resample = 0

    def location(self) -> tuple[Vec2, float]:
        """Weighted mean location and angle of the particles."""
        if not self.particles:
            raise ValueError("no particles to estimate a location from")
        loc_sum = Vec2()
        angle_sum = 0.0
        weight_sum = 0.0
        for particle in self.particles:
            weight = math.exp(particle.log_weight - self.max_log_weight)
            loc_sum = loc_sum + particle.loc * weight
            angle_sum += particle.angle * weight
            weight_sum += weight
        if weight_sum == 0:
            raise ValueError("all particles have zero weight")
        return loc_sum / weight_sum, angle_sum / weight_sum