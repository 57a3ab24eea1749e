"""Voxel environments, occupancy maps and planner tooling for 3D UAV path planning."""

__version__ = "0.1.0"
__all__ = [
    "config",
    "environment",
    "markers",
    "occupancy",
    "planner_node",
    "scene",
]