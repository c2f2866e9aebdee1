"""Predefined groups of people for exercising the social planner."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from socialnav.geometry import Vec2
from socialnav.human import Human


@dataclass
class Scenario:
    """People to place in the map, with their poses and initial states."""

    identifier: int
    description: str
    population: list[Human] = field(default_factory=list)
    human_locs: list[Vec2] = field(default_factory=list)
    human_angles: list[float] = field(default_factory=list)
    seen: list[bool] = field(default_factory=list)
    standing: list[bool] = field(default_factory=list)

    def __post_init__(self) -> None:
        sizes = {
            len(self.population),
            len(self.human_locs),
            len(self.human_angles),
            len(self.seen),
            len(self.standing),
        }
        if len(sizes) != 1:
            raise ValueError(f"scenario {self.identifier} has lists of differing lengths")


def build_scenarios() -> dict[int, Scenario]:
    """The six standard scenarios keyed by identifier.

    People appearing in several scenarios are the same ``Human`` objects.
    """
    peter = Human()
    susan = Human()
    andrew = Human()
    joydeep = Human()
    tongrui = Human()
    pi = math.pi

    scenarios = [
        Scenario(
            1,
            "Navigating hallway with static people",
            [joydeep, tongrui],
            [Vec2(-10, 16), Vec2(-4, 21)],
            [pi / 2, -pi / 2],
            [True, True],
            [False, True],
        ),
        Scenario(
            2,
            "Approaching a group of people from behind",
            [susan, peter],
            [Vec2(-37, 9), Vec2(-39, 10)],
            [-3 * pi / 4, -pi / 2],
            [True, True],
            [True, True],
        ),
        Scenario(
            3,
            "Avoiding surprise effect with static, seen person",
            [andrew],
            [Vec2(-22, 16)],
            [pi],
            [True],
            [True],
        ),
        Scenario(
            4,
            "Avoiding surprise effect with static, unseen person",
            [andrew],
            [Vec2(-23.8, 14)],
            [pi],
            [False],
            [True],
        ),
        Scenario(
            5,
            "Passing by dynamic person in hallway",
            [andrew],
            [Vec2(16, 8)],
            [pi],
            [True],
            [True],
        ),
        Scenario(
            6,
            "Replanning after blocked entrance",
            [joydeep, tongrui],
            [Vec2(-24, 16), Vec2(-23, 9)],
            [pi, 3 * pi / 2],
            [True, True],
            [True, False],
        ),
    ]
    return {scenario.identifier: scenario for scenario in scenarios}