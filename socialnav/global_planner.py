"""Grid-based A* planning that weighs distance against social costs."""

from __future__ import annotations

import copy
import logging
import math
from dataclasses import dataclass, field
from typing import Optional

from socialnav.geometry import Segment, SegmentMap, Vec2, angle_diff
from socialnav.human import Human
from socialnav.simple_queue import SimpleQueue

logger = logging.getLogger(__name__)

START_KEY = "START"
_MAX_ITERATIONS = 1_000_000
_SOCIAL_RANGE = 10.0
_CUSHION = 0.5
_LOOKAHEAD_RADIUS = 2.0
_MAX_CLOSEST_DISTANCE = 100.0
_HUMAN_MOVED = 0.5
_HUMAN_TURNED = 0.5

# Neighbor indices on a 3x3 stencil (4 is the node itself), with offsets.
_NEIGHBOR_INDICES = (0, 1, 2, 3, 5, 6, 7, 8)


def _index_offset(neighbor_index: int) -> tuple[int, int]:
    dx = int(neighbor_index % 3 == 2) - int(neighbor_index % 3 == 0)
    dy = int(neighbor_index < 3) - int(neighbor_index > 5)
    return dx, dy


def _grid_key(xi: int, yi: int) -> str:
    return f"{xi}_{yi}"


@dataclass
class Neighbor:
    """A grid cell adjacent to a node."""

    node_index: tuple[int, int]
    key: str
    path_length: float
    neighbor_index: int


@dataclass
class Node:
    """An explored grid cell of the navigation map."""

    loc: Vec2 = field(default_factory=Vec2)
    index: tuple[int, int] = (0, 0)
    cost: float = 0.0
    social_cost: float = 0.0
    social_type: str = "n"
    parent: str = ""
    neighbors: list[Neighbor] = field(default_factory=list)
    key: str = ""
    visited: bool = False


@dataclass
class _TrackedHuman:
    human: Human
    loc: Vec2
    angle: float


class GlobalPlanner:
    """A* search on an eight-connected grid laid over a wall map."""

    def __init__(self, segment_map: Optional[SegmentMap] = None, resolution: float = 0.25) -> None:
        self.segment_map = segment_map if segment_map is not None else SegmentMap()
        self.resolution = resolution
        self.nav_map: dict[str, Node] = {}
        self.nav_goal = Vec2()
        self.global_path: list[str] = []
        self.need_replan = False
        self.failed_locs: list[Vec2] = []
        self._population: list[_TrackedHuman] = []
        self._need_social_replan = False
        self._frontier: SimpleQueue[str] = SimpleQueue()

    @property
    def population(self) -> list[Human]:
        """The humans the planner currently knows about."""
        return [tracked.human for tracked in self._population]

    # ------------------------------------------------------------------ nodes

    def edge_cost(self, node_a: Node, node_b: Node) -> float:
        """Straight-line distance between two nodes."""
        return (node_a.loc - node_b.loc).norm()

    @staticmethod
    def _cushion_lines(edge: Segment, offset: float) -> list[Segment]:
        direction = (edge.p1 - edge.p0).normalized()
        extended = edge.p1 + direction * offset
        normal = edge.unit_normal()
        a1 = edge.p0 + normal * offset
        a2 = extended + normal * offset
        b1 = edge.p0 - normal * offset
        b2 = extended - normal * offset
        return [Segment(a1, a2), Segment(b1, b2), Segment(a1, b1), Segment(a2, b2)]

    def is_valid_neighbor(self, node: Node, neighbor: Neighbor) -> bool:
        """Whether travel from ``node`` to the adjacent ``neighbor`` avoids every wall."""
        x_offset = node.index[0] - neighbor.node_index[0]
        y_offset = node.index[1] - neighbor.node_index[1]
        if not (abs(x_offset) == 1 or abs(y_offset) == 1):
            return False

        offset = Vec2(self.resolution * x_offset, self.resolution * y_offset)
        edge = Segment(node.loc, node.loc + offset)
        probes = [edge, *self._cushion_lines(edge, _CUSHION)]
        return not any(
            wall.intersects(probe) for wall in self.segment_map.lines for probe in probes
        )

    def _neighbors(self, node: Node) -> list[Neighbor]:
        xi, yi = node.index
        diagonal = math.sqrt(2) * self.resolution
        straight = self.resolution
        candidates = []
        for neighbor_index in _NEIGHBOR_INDICES:
            dx, dy = _index_offset(neighbor_index)
            length = diagonal if dx and dy else straight
            candidates.append(
                Neighbor((xi + dx, yi + dy), _grid_key(xi + dx, yi + dy), length, neighbor_index)
            )
        return [n for n in candidates if self.is_valid_neighbor(node, n)]

    def new_node(self, old_node: Node, neighbor_index: int) -> Node:
        """Create and register the child of ``old_node`` in direction ``neighbor_index``."""
        dx, dy = _index_offset(neighbor_index)
        node = Node(
            loc=old_node.loc + Vec2(dx, dy) * self.resolution,
            index=(old_node.index[0] + dx, old_node.index[1] + dy),
        )
        node.cost = old_node.cost + self.edge_cost(old_node, node)
        node.social_cost = self.social_cost(node)
        node.parent = old_node.key
        node.key = _grid_key(*node.index)
        node.neighbors = self._neighbors(node)

        if any((node.loc - bad).norm() < self.resolution * 3 for bad in self.failed_locs):
            node.neighbors = []

        self.nav_map[node.key] = node
        return node

    def initialize_map(self, loc: Vec2) -> None:
        """Reset the search with a start node at ``loc``."""
        self.nav_map.clear()
        self._frontier.clear()
        start = Node(
            loc=loc,
            index=(int(loc.x / self.resolution), int(loc.y / self.resolution)),
            parent=START_KEY,
            key=START_KEY,
        )
        start.neighbors = self._neighbors(start)
        self.nav_map[START_KEY] = start
        self._frontier.push(START_KEY, 0.0)

    # ----------------------------------------------------------------- humans

    def add_human(self, human: Human) -> None:
        """Make the planner account for ``human``."""
        if self.global_path:
            self._need_social_replan = True
        self._population.append(_TrackedHuman(human, human.loc, human.angle))

    def clear_population(self) -> None:
        """Forget every known human."""
        self._population.clear()

    def need_social_replan(self, robot_loc: Vec2) -> bool:
        """Whether a visible human moved or turned enough to warrant replanning."""
        if self._need_social_replan:
            return True
        for tracked in self._population:
            person = tracked.human
            if person.is_hidden(robot_loc, self.segment_map):
                continue
            moved = (person.loc - tracked.loc).norm() > _HUMAN_MOVED
            turned = abs(angle_diff(person.angle, tracked.angle)) > _HUMAN_TURNED
            self._need_social_replan = self._need_social_replan or moved or turned
            if moved:
                tracked.loc = person.loc
            if turned:
                tracked.angle = person.angle
        return self._need_social_replan

    # --------------------------------------------------------------- planning

    def social_cost(self, node: Node) -> float:
        """Largest social cost at ``node``; also sets ``node.social_type``.

        The type is 'n' for none, 's' for safety, 'v' for visibility and
        'h' for hidden.
        """
        max_cost = 0.0
        social_type = "n"
        for tracked in self._population:
            person = tracked.human
            if (node.loc - person.loc).norm() > _SOCIAL_RANGE:
                continue
            if person.is_hidden(node.loc, self.segment_map):
                view_line = Segment(person.loc, node.loc)
                for wall in self.segment_map.lines:
                    point = wall.intersection(view_line)
                    if point is None:
                        continue
                    hidden = person.hidden_cost(node.loc, point)
                    if hidden > max_cost:
                        max_cost = hidden
                        social_type = "h"
            else:
                safety = person.safety_cost(node.loc)
                visibility = person.visibility_cost(node.loc)
                cost = max(safety, visibility)
                if cost > max_cost:
                    max_cost = cost
                    social_type = "s" if safety > visibility else "v"
        node.social_type = social_type
        return max_cost

    @staticmethod
    def heuristic(goal_loc: Vec2, node_loc: Vec2) -> float:
        """Octile distance between two points."""
        diff = (goal_loc - node_loc).cwise_abs()
        straight = abs(diff.x - diff.y)
        diagonal = math.sqrt(2) * (diff.x + diff.y - straight) * 0.5
        return straight + diagonal

    def plan(self, goal: Vec2) -> list[str]:
        """Search from the initialized start towards ``goal`` and store the path.

        On failure the path is just the start key.
        """
        self.nav_goal = goal
        success = False
        iterations = 0
        current_key = START_KEY
        while self._frontier and iterations < _MAX_ITERATIONS:
            current_key = self._frontier.pop()
            current = self.nav_map[current_key]

            if (goal - current.loc).norm() < 0.71 * self.resolution:
                success = True
                break

            for neighbor in current.neighbors:
                neighbor_cost = current.cost + neighbor.path_length
                if neighbor.key not in self.nav_map:
                    child = self.new_node(current, neighbor.neighbor_index)
                    neighbor_cost += child.social_cost
                    self._frontier.push(
                        neighbor.key, neighbor_cost + self.heuristic(goal, child.loc)
                    )
                elif neighbor_cost < self.nav_map[neighbor.key].cost:
                    known = self.nav_map[neighbor.key]
                    known.cost = neighbor_cost
                    known.parent = current.key
                    neighbor_cost += known.social_cost
                    self._frontier.push(
                        neighbor.key, neighbor_cost + self.heuristic(goal, known.loc)
                    )
            iterations += 1

        path: list[str] = []
        if success:
            logger.info("global path found after %d iterations", iterations)
            key = current_key
            travelled = 0.0
            while key != START_KEY:
                path.append(key)
                node = self.nav_map[key]
                travelled += self.edge_cost(node, self.nav_map[node.parent])
                key = node.parent
            logger.info("path length %.3f m", travelled)
            path.reverse()
        else:
            logger.info("no global path after %d iterations", iterations)
            path.append(START_KEY)
        self.global_path = path
        return list(path)

    def closest_path_node(self, robot_loc: Vec2) -> Node:
        """The path node the local planner should aim for next.

        Sets ``need_replan`` when the robot has strayed from the path or no
        reachable target is in view.
        """
        closest = Node()
        closest_index = 0
        min_distance = _MAX_CLOSEST_DISTANCE
        for i, key in enumerate(self.global_path):
            distance = (robot_loc - self.nav_map[key].loc).norm()
            if distance < min_distance:
                min_distance = distance
                closest = copy.copy(self.nav_map[key])
                closest_index = i
        closest.visited = True

        self.need_replan = min_distance > _LOOKAHEAD_RADIUS
        if self.need_replan:
            return closest

        target = Node()
        target_index = 0
        for i in range(closest_index, len(self.global_path)):
            target = copy.copy(self.nav_map[self.global_path[i]])
            if (robot_loc - target.loc).norm() > _LOOKAHEAD_RADIUS:
                target_index = i
                break

        for i in range(target_index, closest_index, -1):
            candidate = self.nav_map[self.global_path[i]]
            if not self.segment_map.intersects(robot_loc, candidate.loc):
                return copy.copy(candidate)
            if i < closest_index + 4:
                self.need_replan = True
                return target
        return target

    def replan(self, robot_loc: Vec2, failed_target_loc: Vec2) -> list[str]:
        """Plan again from ``robot_loc``, avoiding the failed target if it was not reached."""
        if (robot_loc - failed_target_loc).norm() > 1.41 * self.resolution:
            self.failed_locs.append(failed_target_loc)
        self.initialize_map(robot_loc)
        path = self.plan(self.nav_goal)
        logger.info(
            "replanning and avoiding nodes at: %s",
            ", ".join(f"({loc.x}, {loc.y})" for loc in self.failed_locs),
        )
        self.need_replan = False
        self._need_social_replan = False
        return path