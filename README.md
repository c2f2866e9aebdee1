# socialnav

A pure-Python library for socially aware robot navigation in a 2D world
made of wall segments. It uses only the standard library.

## What is in it

- **`socialnav.geometry`**: `Vec2` is an immutable vector with `norm`,
  `squared_norm`, `dot`, `normalized`, `rotated` and `cwise_abs`. `Segment`
  is a line segment with `unit_normal`, `intersects` and `intersection`, where
  `intersection` returns the crossing point or `None`. `SegmentMap` holds
  walls, and `SegmentMap.intersects(p0, p1)` tests a segment against all of
  them. The module also has the helpers `angle_diff` (a difference wrapped into
  [-pi, pi]), `sign`, `is_between` (a point inside a cone) and `angle_between`.
- **`socialnav.simple_queue`**: `SimpleQueue` is a priority queue. `pop`
  returns the value with the lowest priority. Pushing a value that is already
  queued updates its priority. `pop` on an empty queue raises `IndexError`.
- **`socialnav.nav_types`**: the `PathOption` (a candidate arc and its
  scores) and `Obstacle` (a point and a timestamp) records.
- **`socialnav.latency_compensator`**: `LatencyCompensator` records delayed
  observations and the drive inputs issued since. `predicted_state()` returns
  a forward-predicted `State2D`. The clock can be injected.
- **`socialnav.laser`**: `scan_to_point_cloud` turns laser ranges into points
  in the robot frame, with the laser mounted 0.2 m ahead of the origin. It
  drops readings at or below `range_min` and at or beyond 95 % of
  `range_max`. It raises `ValueError` for a non-positive increment and
  `IndexError` when there are fewer ranges than angles. `quaternion_to_yaw(z, w)`
  gives the heading of a planar rotation.
- **`socialnav.human`**: `Human` holds a person's pose, velocity, field of
  view and cost parameters. Its cost methods are `safety_cost`,
  `visibility_cost` and `hidden_cost`. It also has `is_visible`, `is_hidden`,
  `move` and the frame conversions `to_local_frame` and `to_map_frame`. When
  a person is not standing, their cost fields are wider.
- **`socialnav.local_planner`**: `LocalPlanner.greedy_path(goal, obstacles)`
  scores 20 constant-curvature arcs in the robot frame. The score combines
  free path length, clearance and distance to the goal, weighted by
  `set_weights`. It returns the cheapest arc. The evaluated arcs stay in
  `planner.paths`.
- **`socialnav.global_planner`**: `GlobalPlanner` runs A* on an 8-connected
  grid:
  - The grid has a configurable resolution, 0.25 m by default.
  - Edges must keep a 0.5 m cushion from the walls.
  - Each node gets the largest social cost from nearby humans.
  - `plan(goal)` follows `initialize_map(start)` and returns the path as a
    list of node keys. When no path is found, the list holds only
    `"START"`.
  - `closest_path_node(robot_loc)` picks the next target node.
  - `replan` plans again and avoids locations that failed.
  - `need_social_replan` reports when a visible human has moved or turned.
- **`socialnav.particle_filter`**: `ParticleFilter` performs Monte Carlo
  localisation against a `SegmentMap`:
  - `initialize` scatters the particles.
  - `observe_odometry` moves the particles with a noisy motion model. It
    resets on the first reading or on a jump of 1 m or more.
  - `observe_laser` re-weights the particles once the robot has moved
    between 0.1 m and 1 m. It resamples after every sixth update.
  - `location()` returns the weighted mean pose.

  Pass a `random.Random` to make runs reproducible.
- **`socialnav.scenarios`**: `build_scenarios()` returns six preset
  `Scenario` groups of people, keyed 1 to 6. People who appear in several
  scenarios are the same `Human` objects.
- **`socialnav.navigation`**: `Navigation` ties the parts together:
  - It takes localisation and odometry updates and remembers point-cloud
    obstacles.
  - It clamps commanded velocity to the speed and acceleration limits.
  - It sends each `DriveCommand` to an optional `drive_publisher`
    callback.
  - Each call to `run()` performs one control step. While navigating it
    returns the chosen `PathOption`, and once navigation is complete it
    returns `None`.

  The clock and the sleep function can be injected for testing.

## Examples

A priority queue whose entries can be re-prioritised:

```python
from socialnav.simple_queue import SimpleQueue

frontier = SimpleQueue()
frontier.push("a", 7.0)
frontier.push("b", 3.0)
frontier.push("c", 9.0)
frontier.push("c", 5.0)     # update c's priority

assert frontier.pop() == "b"
assert frontier.pop() == "c"
assert frontier.pop() == "a"
```

Wrapped angle differences:

```python
from socialnav.geometry import angle_diff

angle_diff(6.2, 0.1)   # about -0.183
angle_diff(1.7, 4.2)   # -2.5
```

Planning on a grid around a wall:

```python
from socialnav.geometry import Segment, SegmentMap, Vec2
from socialnav.global_planner import GlobalPlanner

walls = SegmentMap([Segment(Vec2(1.0, -1.0), Vec2(1.0, 1.0))])
planner = GlobalPlanner(walls, resolution=0.25)
planner.initialize_map(Vec2(0.0, 0.0))
path = planner.plan(Vec2(2.0, 0.0))   # list of node keys such as "3_2"
```

Turning a laser scan into a point cloud in the robot frame:

```python
from socialnav.laser import scan_to_point_cloud

points = scan_to_point_cloud(
    ranges=[1.0, 2.0, 3.0],
    range_min=0.1,
    range_max=10.0,
    angle_min=0.0,
    angle_max=0.2,
    angle_increment=0.1,
)
```

## What it does not do

This is a library, not a running robot stack. It has no command-line
program. It does not load map files, so you build a `SegmentMap` from
`Segment` objects yourself. It does not subscribe to or publish over any
messaging middleware. Drive commands go only to the callback you pass to
`Navigation`. It draws no visualisation.