"""The navigation loop that ties localization, planning and driving together."""

from __future__ import annotations

import dataclasses
import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from socialnav.geometry import SegmentMap, Vec2, is_between
from socialnav.global_planner import GlobalPlanner
from socialnav.latency_compensator import LatencyCompensator
from socialnav.local_planner import LocalPlanner
from socialnav.nav_types import Obstacle, PathOption
from socialnav.scenarios import Scenario, build_scenarios

logger = logging.getLogger(__name__)

OBSERVATION_DELAY = 0.0
ACTUATION_DELAY = 0.0
VISION_ANGLE = 3.0 * math.pi / 2.0
VISION_RANGE = 10.0

MAX_VEL = 1.0
MIN_VEL = -1.0
MAX_ACCEL = 4.0
MIN_ACCEL = -4.0

_GRID_RESOLUTION = 0.25
_STALL_SPEED = 0.01
_STUCK_SECONDS = 5.0
_IMPLAUSIBLE_SPEED = 2.0


@dataclass
class DriveCommand:
    """An Ackermann drive command: path curvature and forward speed."""

    curvature: float = 0.0
    velocity: float = 0.0
    stamp: float = 0.0


class Navigation:
    """Drives the robot towards a goal while respecting nearby people."""

    def __init__(
        self,
        segment_map: Optional[SegmentMap] = None,
        scenario: Optional[Scenario] = None,
        *,
        dt: float = 1.0 / 20.0,
        obstacle_memory: float = 0.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        drive_publisher: Optional[Callable[[DriveCommand], None]] = None,
    ) -> None:
        self.dt = dt
        self.obstacle_memory = obstacle_memory
        self._clock = clock
        self._sleep = sleep
        self._drive_publisher = drive_publisher

        self.latency_compensator = LatencyCompensator(
            ACTUATION_DELAY, OBSERVATION_DELAY, dt, clock=clock
        )
        self.local_planner = LocalPlanner()
        self.global_planner = GlobalPlanner(segment_map, resolution=_GRID_RESOLUTION)
        self.set_local_planner_weights(1.0, 100.0, 1.0)

        self.robot_loc = Vec2()
        self.robot_angle = 0.0
        self.robot_vel = Vec2()
        self.robot_omega = 0.0
        self.odom_loc = Vec2()
        self.odom_angle = 0.0

        self.nav_complete = True
        self.nav_goal_loc = Vec2()
        self.nav_goal_angle = 0.0
        self.stalled = False
        self.stall_time = 0.0
        self.local_goal = Vec2()
        self.drive_command = DriveCommand()

        self._init_vel = True
        # Each entry pairs the odometry-frame obstacle with its robot-frame twin.
        self._obstacles: list[tuple[Obstacle, Obstacle]] = []

        self.current_scenario = Scenario(0, "")
        self.load_scenario(scenario if scenario is not None else build_scenarios()[1])

    # ------------------------------------------------------------ obstacles

    @property
    def obstacles(self) -> list[Obstacle]:
        """Remembered obstacles in the odometry frame."""
        return [odom for odom, _ in self._obstacles]

    @property
    def base_link_obstacles(self) -> list[Obstacle]:
        """Remembered obstacles in the robot frame at the time they were seen."""
        return [base for _, base in self._obstacles]

    def _trim_obstacles(self, now: float) -> None:
        upper_angle = self.odom_angle + 0.49 * VISION_ANGLE
        lower_angle = self.odom_angle - 0.49 * VISION_ANGLE
        lower_point = self.base_link_to_odom(Vec2(math.cos(lower_angle), math.sin(lower_angle)))
        upper_point = self.base_link_to_odom(Vec2(math.cos(upper_angle), math.sin(upper_angle)))

        kept = []
        for odom, base in self._obstacles:
            if now - odom.timestamp > self.obstacle_memory:
                continue
            # Obstacles in view are superseded by the new scan.
            if is_between(self.odom_loc, lower_point, upper_point, odom.loc):
                continue
            kept.append((odom, base))
        self._obstacles = kept

    def observe_point_cloud(self, cloud: Iterable[Vec2], time: float) -> None:
        """Remember the points of a new scan (robot frame), dropping stale ones."""
        self._trim_obstacles(time)
        for point in cloud:
            self._obstacles.append(
                (Obstacle(self.base_link_to_odom(point), time), Obstacle(point, time))
            )

    # -------------------------------------------------------------- state

    def update_location(self, loc: Vec2, angle: float) -> None:
        """Take a new localization estimate in the map frame."""
        self.robot_loc = loc
        self.robot_angle = angle

    def update_odometry(self, loc: Vec2, angle: float, vel: Vec2, ang_vel: float) -> None:
        """Take a new odometry reading, compensated for latency."""
        self.latency_compensator.record_observation(loc.x, loc.y, angle)
        state = self.latency_compensator.predicted_state()
        self.odom_loc = Vec2(state.x, state.y)
        self.odom_angle = state.theta
        self.robot_vel = Vec2(state.vx, state.vy)
        self.robot_omega = state.omega

    def set_nav_goal(self, loc: Vec2, angle: float) -> None:
        """Plan a global path from the robot to ``loc`` and start navigating."""
        self.nav_goal_loc = loc
        self.nav_goal_angle = angle
        self.global_planner.initialize_map(self.robot_loc)
        self.global_planner.plan(self.nav_goal_loc)
        self.nav_complete = False

    def set_local_planner_weights(self, w_fpl: float, w_c: float, w_dtg: float) -> None:
        """Weights for free path length, clearance and distance to goal."""
        self.local_planner.set_weights(w_fpl, w_c, w_dtg)

    # ------------------------------------------------------------- driving

    def limit_velocity(self, vel: float) -> float:
        """Clamp ``vel`` to the speed limits and what acceleration allows this step."""
        current_speed = self.robot_vel.norm()
        if self._init_vel:
            current_speed = 0.0
            self._init_vel = False
        new_vel = min(vel, current_speed + MAX_ACCEL * self.dt, MAX_VEL)
        return max(new_vel, current_speed + MIN_ACCEL * self.dt, MIN_VEL)

    def move_along_path(self, path: PathOption) -> None:
        """Drive along ``path`` at full speed, or stop if it is too short to brake."""
        current_speed = self.robot_vel.norm()
        decel_dist = 0.3 - 0.5 * current_speed * current_speed / MIN_ACCEL
        cmd_vel = MAX_VEL if path.free_path_length > decel_dist else 0.0
        self.drive_car(path.curvature, self.limit_velocity(cmd_vel))

    def drive_car(self, curvature: float, velocity: float) -> None:
        """Issue a drive command and record it for latency compensation."""
        self.drive_command = DriveCommand(curvature, velocity, self._clock())
        if self._drive_publisher is not None:
            self._drive_publisher(dataclasses.replace(self.drive_command))
        x_dot, y_dot, omega = self.ackermann_ik(curvature, velocity)
        self.latency_compensator.record_new_input(x_dot, y_dot, omega)

    def ackermann_fk(self, x_dot: float, y_dot: float, omega: float) -> DriveCommand:
        """Drive command equivalent to a Cartesian velocity."""
        theta = math.atan2(y_dot, x_dot)
        velocity = x_dot * math.cos(theta)
        if velocity == 0:
            raise ValueError("curvature is undefined at zero velocity")
        return DriveCommand(curvature=omega / velocity, velocity=velocity)

    def ackermann_ik(self, curvature: float, velocity: float) -> tuple[float, float, float]:
        """Cartesian velocity ``(x_dot, y_dot, omega)`` of a drive command."""
        theta = self.odom_angle
        return (
            velocity * math.cos(theta),
            velocity * math.sin(theta),
            velocity * curvature,
        )

    # -------------------------------------------------------------- status

    def check_reached(self) -> None:
        """Mark navigation complete once the robot is within stopping distance."""
        dist_to_goal = (self.robot_loc - self.nav_goal_loc).norm()
        if self.robot_vel.norm() > _IMPLAUSIBLE_SPEED:
            return
        stopping_dist = 0.3 - 0.5 * MAX_VEL * MAX_VEL / MIN_ACCEL
        if dist_to_goal <= stopping_dist:
            self.nav_complete = True
            logger.warning("Navigation success!")

    def check_stalled(self) -> None:
        """Track when the commanded speed dropped to nearly zero."""
        if not self.stalled and self.drive_command.velocity < _STALL_SPEED:
            self.stalled = True
            self.stall_time = self._clock()
        elif self.drive_command.velocity > _STALL_SPEED:
            self.stalled = False

    def is_robot_stuck(self) -> bool:
        """Whether the robot has been stalled for too long while navigating."""
        return (
            not self.nav_complete
            and self.stalled
            and self._clock() - self.stall_time > _STUCK_SECONDS
        )

    # -------------------------------------------------------------- frames

    def base_link_to_odom(self, p: Vec2) -> Vec2:
        """Robot-frame point in the odometry frame."""
        return self.odom_loc + p.rotated(self.odom_angle)

    def odom_to_base_link(self, p: Vec2) -> Vec2:
        """Odometry-frame point in the robot frame."""
        return (p - self.odom_loc).rotated(-self.odom_angle)

    def map_to_base_link(self, p: Vec2) -> Vec2:
        """Map-frame point in the robot frame."""
        return (p - self.robot_loc).rotated(-self.robot_angle)

    # ----------------------------------------------------------- scenarios

    def load_scenario(self, scenario: Scenario) -> None:
        """Place the scenario's people and tell the planner about those already seen."""
        logger.info("Loading scenario %d: %s", scenario.identifier, scenario.description)
        self.current_scenario = dataclasses.replace(scenario, seen=list(scenario.seen))
        for person, loc, angle, seen, standing in zip(
            scenario.population,
            scenario.human_locs,
            scenario.human_angles,
            scenario.seen,
            scenario.standing,
        ):
            person.loc = loc
            person.angle = angle
            if not standing:
                person.standing = False
            if seen:
                self.global_planner.add_human(person)

    def _animate_people(self) -> None:
        scenario = self.current_scenario
        if scenario.identifier == 5 and scenario.population:
            walker = scenario.population[0]
            x = walker.loc.x
            if x < 4 and abs(walker.angle) > math.pi / 24:
                walker.vel, walker.angular_vel = Vec2(0, 0), -1.0
            elif x < 4:
                walker.vel, walker.angular_vel = Vec2(1, 0), 0.0
            elif x > 15 and abs(walker.angle) < 23 * math.pi / 24:
                walker.vel, walker.angular_vel = Vec2(0, 0), 1.0
            elif x > 15:
                walker.vel, walker.angular_vel = Vec2(-1, 0), 0.0
            walker.move(self.dt)
        if scenario.identifier == 6 and not self.nav_complete and scenario.population:
            blocker = scenario.population[0]
            blocker.vel = Vec2(0, 0)
            blocker.move(self.dt)

    # ----------------------------------------------------------- main loop

    def run(self) -> Optional[PathOption]:
        """One control step; returns the chosen local path while navigating."""
        self._animate_people()

        if self.nav_complete:
            self._sleep(0.01)
            return None

        scenario = self.current_scenario
        for i, person in enumerate(scenario.population):
            if not scenario.seen[i] and not person.is_hidden(
                self.robot_loc, self.global_planner.segment_map
            ):
                scenario.seen[i] = True
                self.global_planner.add_human(person)
                logger.info("New human discovered!")

        target = self.global_planner.closest_path_node(self.robot_loc)
        self.local_goal = self.map_to_base_link(target.loc)

        best = self.local_planner.greedy_path(self.local_goal, self.base_link_obstacles)
        self.move_along_path(best)
        self.check_reached()

        self.check_stalled()
        if self.global_planner.need_replan or self.is_robot_stuck():
            self.global_planner.replan(self.robot_loc, target.loc)
            logger.info("Replan!")
            self.stalled = False
            self._sleep(0.5)

        if self.global_planner.need_social_replan(self.robot_loc):
            # Passing the robot's own location keeps it from being marked impassable.
            self.global_planner.replan(self.robot_loc, self.robot_loc)
        return best