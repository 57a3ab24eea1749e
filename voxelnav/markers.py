"""Visualization markers describing the planner's environment and path."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from itertools import product
from typing import Sequence

from voxelnav.config import PlannerParameters
from voxelnav.environment import EnvironmentVoxel3D
from voxelnav.occupancy import OccupancyMap

WORLD_FRAME = "world"


class MarkerType(IntEnum):
    """Marker shapes, numbered as in the visualization message format."""

    ARROW = 0
    CUBE = 1
    SPHERE = 2
    CYLINDER = 3
    LINE_STRIP = 4
    LINE_LIST = 5
    CUBE_LIST = 6


@dataclass(frozen=True)
class Point:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


@dataclass(frozen=True)
class Color:
    r: float = 0.0
    g: float = 0.0
    b: float = 0.0
    a: float = 0.0


@dataclass(frozen=True)
class Pose:
    """A position with an orientation quaternion (x, y, z, w)."""

    position: Point = field(default_factory=Point)
    orientation: tuple[float, float, float, float] = (0.0, 0.0, 0.0, 1.0)


@dataclass
class Marker:
    """One shape to be drawn in the world frame."""

    ns: str
    id: int
    type: MarkerType
    pose: Pose = field(default_factory=Pose)
    scale: Point = field(default_factory=Point)
    color: Color = field(default_factory=Color)
    points: list[Point] = field(default_factory=list)
    frame_id: str = WORLD_FRAME


def environment_bounds_markers(params: PlannerParameters) -> list[Marker]:
    """A translucent box covering the configured world extents."""
    center = Point(
        params.origin_x + params.env_width / 2.0,
        params.origin_y + params.env_height / 2.0,
        params.origin_z + params.env_depth / 2.0,
    )
    return [
        Marker(
            ns="environment_bounds",
            id=0,
            type=MarkerType.CUBE,
            pose=Pose(center),
            scale=Point(params.env_width, params.env_height, params.env_depth),
            color=Color(0.5, 0.5, 0.5, 0.1),
        )
    ]


def _occupied_voxels(environment: EnvironmentVoxel3D, params: PlannerParameters):
    for x, y, z in product(
        range(params.voxel_width), range(params.voxel_height), range(params.voxel_depth)
    ):
        if environment.cell_cost(x, y, z) > 0:
            yield environment.voxel_to_world(x, y, z)


def voxel_grid_markers(
    environment: EnvironmentVoxel3D | None, params: PlannerParameters
) -> list[Marker]:
    """One red cube per voxel of the grid that has a non-zero cost."""
    if environment is None:
        return []
    scale = Point(
        params.voxel_size_xy * 0.9, params.voxel_size_xy * 0.9, params.voxel_size_z * 0.9
    )
    return [
        Marker(
            ns="voxel_grid",
            id=index,
            type=MarkerType.CUBE,
            pose=Pose(Point(*world)),
            scale=scale,
            color=Color(1.0, 0.0, 0.0, 0.6),
        )
        for index, world in enumerate(_occupied_voxels(environment, params))
    ]


def start_goal_markers(current_pose: Pose, goal_pose: Pose | None = None) -> list[Marker]:
    """A green sphere at the current pose and, if there is a goal, a red one there."""
    size = Point(2.0, 2.0, 2.0)
    markers = [
        Marker(
            ns="start_goal_points",
            id=0,
            type=MarkerType.SPHERE,
            pose=current_pose,
            scale=size,
            color=Color(0.0, 1.0, 0.0, 0.8),
        )
    ]
    if goal_pose is not None:
        markers.append(
            Marker(
                ns="start_goal_points",
                id=1,
                type=MarkerType.SPHERE,
                pose=goal_pose,
                scale=size,
                color=Color(1.0, 0.0, 0.0, 0.8),
            )
        )
    return markers


def path_markers(path: Sequence[Pose]) -> list[Marker]:
    """A blue line through the path's positions; nothing for an empty path."""
    if not path:
        return []
    return [
        Marker(
            ns="paths",
            id=0,
            type=MarkerType.LINE_STRIP,
            scale=Point(1.0, 1.0, 1.0),
            color=Color(0.0, 0.0, 1.0, 0.8),
            points=[pose.position for pose in path],
        )
    ]


def occupancy_from_environment(
    environment: EnvironmentVoxel3D, params: PlannerParameters
) -> OccupancyMap:
    """A fresh occupancy map with one hit at every voxel that has a non-zero cost."""
    occupancy_map = OccupancyMap(params.voxel_size_xy)
    for world in _occupied_voxels(environment, params):
        occupancy_map.update_node(*world, True)
    return occupancy_map