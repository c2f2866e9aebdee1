import math
import random

import pytest

from socialnav.geometry import Segment, SegmentMap, Vec2
from socialnav.particle_filter import LIDAR_OFFSET, Particle, ParticleFilter


class _NoNoise(random.Random):
    def gauss(self, mu=0.0, sigma=1.0):
        return mu


def _wall_map():
    return SegmentMap([Segment(Vec2(5.0, -10.0), Vec2(5.0, 10.0))])


def _ready_filter(segment_map=None, rng=None):
    pf = ParticleFilter(segment_map, rng=rng or random.Random(1))
    pf.observe_odometry(Vec2(), 0.0)
    return pf


def test_initialize_creates_particles_near_pose():
    pf = ParticleFilter(num_particles=50, rng=random.Random(3))
    pf.initialize(Vec2(2.0, -1.0), 0.5)
    assert len(pf.particles) == 50
    assert all(p.log_weight == 0.0 for p in pf.particles)
    mean_x = sum(p.loc.x for p in pf.particles) / 50
    mean_y = sum(p.loc.y for p in pf.particles) / 50
    assert abs(mean_x - 2.0) < 0.2
    assert abs(mean_y + 1.0) < 0.2
    assert pf.odom_initialized is False
    assert pf.prev_odom_loc == Vec2(2.0, -1.0)


def test_first_odometry_only_resets():
    pf = ParticleFilter(rng=random.Random(2))
    pf.initialize(Vec2(), 0.0)
    before = [p.loc for p in pf.particles]
    pf.observe_odometry(Vec2(0.3, 0.0), 0.1)
    assert pf.odom_initialized is True
    assert pf.prev_odom_loc == Vec2(0.3, 0.0)
    assert [p.loc for p in pf.particles] == before


def test_odometry_moves_particles_in_their_frame():
    pf = _ready_filter(rng=_NoNoise())
    pf.particles = [Particle(Vec2(), 0.0), Particle(Vec2(), math.pi / 2)]
    pf.observe_odometry(Vec2(0.5, 0.0), 0.0)
    assert pf.particles[0].loc.x == pytest.approx(0.5)
    assert pf.particles[0].loc.y == pytest.approx(0.0)
    assert pf.particles[1].loc.x == pytest.approx(0.0, abs=1e-9)
    assert pf.particles[1].loc.y == pytest.approx(0.5)
    assert pf.prev_odom_loc == Vec2(0.5, 0.0)


def test_large_odometry_jump_resets_without_moving():
    pf = _ready_filter(rng=_NoNoise())
    pf.particles = [Particle(Vec2(1.0, 1.0), 0.0)]
    pf.observe_odometry(Vec2(5.0, 0.0), 0.0)
    assert pf.particles[0].loc == Vec2(1.0, 1.0)
    assert pf.prev_odom_loc == Vec2(5.0, 0.0)
    assert pf.last_update_loc == Vec2(5.0, 0.0)


def test_zero_motion_leaves_particle_unchanged():
    pf = ParticleFilter(rng=random.Random(0))
    particle = Particle(Vec2(1.0, 2.0), 0.3)
    pf.update_particle_location(Vec2(), 0.0, particle)
    assert particle.loc == Vec2(1.0, 2.0)
    assert particle.angle == 0.3


def test_predicted_cloud_without_walls_reaches_max_range():
    pf = ParticleFilter()
    cloud = pf.predicted_point_cloud(Vec2(), 0.0, 100, 0.1, 10.0, -1.0, 1.0)
    assert len(cloud) == 10
    lidar = Vec2(LIDAR_OFFSET, 0.0)
    for point in cloud:
        assert (point - lidar).norm() == pytest.approx(10.0)


def test_predicted_cloud_hits_wall():
    pf = ParticleFilter(_wall_map())
    cloud = pf.predicted_point_cloud(Vec2(), 0.0, 10, 0.0, 10.0, 0.0, 0.0)
    assert len(cloud) == 1
    assert cloud[0].x == pytest.approx(5.0)
    assert cloud[0].y == pytest.approx(0.0)


def test_update_matching_scan_keeps_weight():
    pf = _ready_filter(_wall_map())
    particle = Particle(Vec2(), 0.0)
    pf.update([5.0 - LIDAR_OFFSET] * 10, 0.0, 10.0, 0.0, 0.0, particle)
    assert particle.log_weight == pytest.approx(0.0)


def test_update_clamps_short_readings():
    pf = _ready_filter(_wall_map())
    particle = Particle(Vec2(), 0.0)
    pf.update([1.0] * 10, 0.0, 10.0, 0.0, 0.0, particle)
    assert particle.log_weight == pytest.approx(-(pf.d_short ** 2) / pf.var_obs)


def test_update_before_odometry_is_ignored():
    pf = ParticleFilter(_wall_map())
    particle = Particle(Vec2(), 0.0)
    pf.update([1.0] * 10, 0.0, 10.0, 0.0, 0.0, particle)
    assert particle.log_weight == 0.0


def test_update_with_too_few_ranges_raises():
    pf = _ready_filter(_wall_map())
    with pytest.raises(ValueError):
        pf.update([1.0] * 5, 0.0, 10.0, 0.0, 0.0, Particle())


def test_resample_concentrates_on_dominant_particle():
    pf = _ready_filter(rng=random.Random(5))
    pf.particles = [Particle(Vec2(1.0, 1.0), 0.0, 0.0)] + [
        Particle(Vec2(float(i), 0.0), 0.0, -1000.0) for i in range(2, 11)
    ]
    pf.max_log_weight = 0.0
    pf.resample()
    assert len(pf.particles) == 10
    assert all(p.loc == Vec2(1.0, 1.0) for p in pf.particles)
    pf.particles[0].angle = 2.0
    assert pf.particles[1].angle == 0.0


def test_resample_before_odometry_does_nothing():
    pf = ParticleFilter()
    particles = [Particle(Vec2(1.0, 0.0), 0.0, -5.0), Particle(Vec2(2.0, 0.0), 0.0, 0.0)]
    pf.particles = list(particles)
    pf.resample()
    assert pf.particles == particles


def test_location_is_weighted_mean():
    pf = ParticleFilter()
    pf.particles = [Particle(Vec2(0.0, 0.0), 0.0), Particle(Vec2(2.0, 4.0), 1.0)]
    loc, angle = pf.location()
    assert loc.x == pytest.approx(1.0)
    assert loc.y == pytest.approx(2.0)
    assert angle == pytest.approx(0.5)


def test_location_without_particles_raises():
    with pytest.raises(ValueError):
        ParticleFilter().location()


def test_observe_laser_waits_for_motion():
    pf = _ready_filter(_wall_map())
    pf.particles = [Particle(Vec2(), 0.0)]
    pf.observe_laser([1.0] * 10, 0.0, 10.0, 0.0, 0.0)
    assert pf.particles[0].log_weight == 0.0
    assert pf.updates_since_last_resample == 0


def test_observe_laser_updates_after_motion():
    pf = _ready_filter(_wall_map(), rng=_NoNoise())
    pf.particles = [Particle(Vec2(), 0.0)]
    pf.observe_odometry(Vec2(0.5, 0.0), 0.0)
    pf.observe_laser([1.0] * 10, 0.0, 10.0, 0.0, 0.0)
    assert pf.particles[0].log_weight < 0.0
    assert pf.max_log_weight == pf.particles[0].log_weight
    assert pf.last_update_loc == Vec2(0.5, 0.0)
    assert pf.updates_since_last_resample == 1