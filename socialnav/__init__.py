"""Geometry, planning, latency compensation and particle-filter localisation for a 2D robot among people."""

__version__ = "0.1.0"

__all__ = [
    "geometry",
    "simple_queue",
    "nav_types",
    "latency_compensator",
    "laser",
    "human",
    "local_planner",
    "global_planner",
    "particle_filter",
    "scenarios",
    "navigation",
]