"""Forward prediction of the robot state across actuation and sensing delays."""

from __future__ import annotations

import dataclasses
import time
from dataclasses import dataclass
from typing import Callable, NamedTuple


@dataclass
class State2D:
    """Planar pose and velocity."""

    x: float = 0.0
    y: float = 0.0
    theta: float = 0.0
    vx: float = 0.0
    vy: float = 0.0
    omega: float = 0.0


class _Input(NamedTuple):
    x_dot: float
    y_dot: float
    omega: float
    stamp: float


class LatencyCompensator:
    """Predicts the current state from the last observation and recent commands."""

    def __init__(
        self,
        actuation_delay: float,
        observation_delay: float,
        delta_t: float,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.actuation_delay = actuation_delay
        self.observation_delay = observation_delay
        self.delta_t = delta_t
        self._clock = clock
        self._inputs: list[_Input] = []
        self._last_observation_time = -1.0
        self._state = State2D()

    @property
    def system_delay(self) -> float:
        """Total of actuation and observation delays."""
        return self.actuation_delay + self.observation_delay

    def record_observation(self, x: float, y: float, theta: float) -> None:
        """Store an observed pose, stamped back by the observation delay."""
        self._state.x = x
        self._state.y = y
        self._state.theta = theta
        self._last_observation_time = self._clock() - self.observation_delay

    def record_new_input(self, x_dot: float, y_dot: float, omega: float) -> None:
        """Store a command sent to the robot."""
        self._inputs.append(_Input(x_dot, y_dot, omega, self._clock()))
        self._state.vx = x_dot
        self._state.vy = y_dot
        self._state.omega = omega

    def predicted_state(self) -> State2D:
        """The last observed state advanced by the commands issued since."""
        if self._last_observation_time < 0 or (
            self.actuation_delay == 0 and self.observation_delay == 0
        ):
            return dataclasses.replace(self._state)

        predicted = dataclasses.replace(self._state)
        cutoff_time = self._last_observation_time - self.actuation_delay
        input_cutoff_time = self._clock() - self.actuation_delay

        # Inputs are chronological; those older than the observation are stale.
        self._inputs = [i for i in self._inputs if i.stamp > cutoff_time]

        found_input = False
        for command in self._inputs:
            if not found_input and command.stamp >= input_cutoff_time:
                predicted.vx = command.x_dot
                predicted.vy = command.y_dot
                predicted.omega = command.omega
                found_input = True
            predicted.x += command.x_dot * self.delta_t
            predicted.y += command.y_dot * self.delta_t
            predicted.theta += command.omega * self.delta_t
        return predicted