"""Plain records shared by the navigation components."""

from __future__ import annotations

from dataclasses import dataclass, field

from socialnav.geometry import Vec2


@dataclass
class PathOption:
    """A candidate constant-curvature arc and its evaluation."""

    curvature: float = 0.0
    clearance: float = 0.0
    free_path_length: float = 0.0
    distance_to_goal: float = 0.0
    cost: float = 0.0
    fpl_end: Vec2 = field(default_factory=Vec2)
    obstruction: Vec2 = field(default_factory=Vec2)
    closest_point: Vec2 = field(default_factory=Vec2)
    end_point: Vec2 = field(default_factory=Vec2)


@dataclass
class Obstacle:
    """An observed obstacle point and when it was seen."""

    loc: Vec2
    timestamp: float