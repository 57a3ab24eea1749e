"""Obstacle scenes for voxel environments: primitive shapes and random test worlds."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum
from itertools import product
from typing import Iterable, Sequence

from voxelnav.environment import MAX_COST, EnvironmentVoxel3D

logger = logging.getLogger(__name__)

Voxel = tuple[int, int, int]

TEST_GRID = (1024, 1024, 200)
TEST_RESOLUTION = 0.1
TEST_ORIGIN = (-5.0, -5.0, 0.0)


class ObstacleType(Enum):
    """Shapes an obstacle can take."""

    BOX = 0
    CYLINDER = 1
    SPHERE = 2


@dataclass(frozen=True)
class Obstacle:
    """An obstacle in world coordinates, given by its centre and extents.

    Cylinders and spheres take their radius from half of ``size_x``.
    """

    center_x: float
    center_y: float
    center_z: float
    size_x: float
    size_y: float
    size_z: float
    type: ObstacleType = ObstacleType.BOX


def _mark_cells(environment: EnvironmentVoxel3D, cells: Iterable[Voxel]) -> int:
    count = 0
    for cell in cells:
        if environment.is_cell_within_map(*cell):
            environment.update_cell_cost(*cell, MAX_COST)
            count += 1
    return count


def add_sphere(environment: EnvironmentVoxel3D, center: Sequence[int], radius: int) -> int:
    """Occupy the voxels within a sphere given in voxel units; return how many were marked."""
    cx, cy, cz = center
    limit = radius * radius
    cells = (
        (x, y, z)
        for x, y, z in product(
            range(cx - radius, cx + radius + 1),
            range(cy - radius, cy + radius + 1),
            range(cz - radius, cz + radius + 1),
        )
        if (x - cx) ** 2 + (y - cy) ** 2 + (z - cz) ** 2 <= limit
    )
    return _mark_cells(environment, cells)


def add_cylinder(
    environment: EnvironmentVoxel3D, center: Sequence[int], radius: int, height: int
) -> int:
    """Occupy an upright cylinder whose base centre is given in voxel units."""
    cx, cy, cz = center
    limit = radius * radius
    cells = (
        (x, y, z)
        for x, y, z in product(
            range(cx - radius, cx + radius + 1),
            range(cy - radius, cy + radius + 1),
            range(cz, cz + height + 1),
        )
        if (x - cx) ** 2 + (y - cy) ** 2 <= limit
    )
    return _mark_cells(environment, cells)


def add_cube(environment: EnvironmentVoxel3D, center: Sequence[int], side: int) -> int:
    """Occupy a cube centred in XY on the given voxel and rising from its z."""
    cx, cy, cz = center
    half = side // 2
    cells = product(
        range(cx - half, cx + half + 1),
        range(cy - half, cy + half + 1),
        range(cz, cz + side + 1),
    )
    return _mark_cells(environment, cells)


def point_in_obstacle(
    environment: EnvironmentVoxel3D,
    voxel: Sequence[int],
    obstacle: Obstacle,
    buffer_size: float = 0.0,
) -> bool:
    """Whether a voxel's centre lies inside the obstacle grown by the buffer."""
    wx, wy, wz = environment.voxel_to_world(*voxel)
    dx = wx - obstacle.center_x
    dy = wy - obstacle.center_y
    dz = wz - obstacle.center_z
    half_x = obstacle.size_x / 2 + buffer_size
    half_y = obstacle.size_y / 2 + buffer_size
    half_z = obstacle.size_z / 2 + buffer_size
    if obstacle.type is ObstacleType.BOX:
        return abs(dx) <= half_x and abs(dy) <= half_y and abs(dz) <= half_z
    radius_sq = half_x * half_x
    if obstacle.type is ObstacleType.CYLINDER:
        return dx * dx + dy * dy <= radius_sq and abs(dz) <= half_z
    return dx * dx + dy * dy + dz * dz <= radius_sq


def _voxel_ranges(
    environment: EnvironmentVoxel3D, obstacle: Obstacle, buffer_size: float
) -> tuple[range, range, range]:
    half_x = obstacle.size_x / 2 + buffer_size
    half_y = obstacle.size_y / 2 + buffer_size
    half_z = obstacle.size_z / 2 + buffer_size
    low = environment.world_to_voxel(
        obstacle.center_x - half_x, obstacle.center_y - half_y, obstacle.center_z - half_z
    )
    high = environment.world_to_voxel(
        obstacle.center_x + half_x, obstacle.center_y + half_y, obstacle.center_z + half_z
    )
    sizes = environment.grid_size()
    return tuple(  # type: ignore[return-value]
        range(max(lo, 0), min(hi, size - 1) + 1) for lo, hi, size in zip(low, high, sizes)
    )


def mark_obstacles(
    environment: EnvironmentVoxel3D, obstacles: Iterable[Obstacle], buffer_size: float = 0.0
) -> int:
    """Occupy every voxel inside any of the buffered obstacles; return the voxel count."""
    obstacles = list(obstacles)
    marked: set[Voxel] = set()
    for obstacle in obstacles:
        for cell in product(*_voxel_ranges(environment, obstacle, buffer_size)):
            if cell in marked:
                continue
            if point_in_obstacle(environment, cell, obstacle, buffer_size):
                environment.update_cell_cost(*cell, MAX_COST)
                marked.add(cell)
    logger.info("Batch marked %d voxels for %d obstacles", len(marked), len(obstacles))
    return len(marked)


def create_test_environment(rng: random.Random | None = None) -> EnvironmentVoxel3D:
    """A 1024x1024x200 grid with a random sphere, cylinder and cube."""
    rng = rng if rng is not None else random.Random()
    environment = EnvironmentVoxel3D()
    width, height, depth = TEST_GRID
    environment.initialize(
        width, height, depth, TEST_RESOLUTION, *TEST_ORIGIN, resolution_z=TEST_RESOLUTION
    )

    sphere_center = (200 + rng.randrange(600), 200 + rng.randrange(600), 10 + rng.randrange(30))
    sphere_radius = 10 + rng.randrange(15)
    add_sphere(environment, sphere_center, sphere_radius)

    cylinder_center = (200 + rng.randrange(600), 200 + rng.randrange(600), 5 + rng.randrange(20))
    cylinder_radius = 8 + rng.randrange(12)
    cylinder_height = 15 + rng.randrange(25)
    add_cylinder(environment, cylinder_center, cylinder_radius, cylinder_height)

    cube_center = (200 + rng.randrange(600), 200 + rng.randrange(600), 5 + rng.randrange(30))
    cube_side = 10 + rng.randrange(20)
    add_cube(environment, cube_center, cube_side)

    logger.info("Created test environment with sphere, cylinder, and cube obstacles")
    return environment