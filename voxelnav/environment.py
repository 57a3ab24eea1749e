"""Bounded voxel grid over an occupancy map, for path planners."""

from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

import yaml

from voxelnav.occupancy import OccupancyMap, logodds

MAX_COST = 255


def neighbour_directions() -> tuple[tuple[int, int, int, int], ...]:
    """The 26-connected moves as (dx, dy, dz, distance in millimetres)."""
    return tuple(
        (dx, dy, dz, int(math.sqrt(dx * dx + dy * dy + dz * dz) * 1000.0))
        for dx in (-1, 0, 1)
        for dy in (-1, 0, 1)
        for dz in (-1, 0, 1)
        if (dx, dy, dz) != (0, 0, 0)
    )


@dataclass
class EnvConfig:
    """Grid dimensions, cell sizes and world origin of an environment."""

    width: int = 0
    height: int = 0
    depth: int = 0
    resolution_xy: float = 0.1
    resolution_z: float = 0.1
    origin_x: float = 0.0
    origin_y: float = 0.0
    origin_z: float = 0.0


def _config_path(path: str | Path) -> str:
    text = str(path)
    dot = text.rfind(".")
    base = text if dot < 0 else text[:dot]
    return base + ".yaml"


class EnvironmentVoxel3D:
    """A 3D voxel environment backed by an occupancy map.

    Any stored cell counts as occupied for planning; cells without a node are free.
    """

    def __init__(self) -> None:
        self.config = EnvConfig()
        self._map = OccupancyMap(self.config.resolution_xy)
        self.directions = neighbour_directions()

    def initialize(
        self,
        width: int,
        height: int,
        depth: int,
        resolution_xy: float,
        origin_x: float = 0.0,
        origin_y: float = 0.0,
        origin_z: float = 0.0,
        resolution_z: float | None = None,
    ) -> None:
        """Set the grid and start a fresh, empty map at the XY resolution."""
        self._map = OccupancyMap(resolution_xy)
        self.config = EnvConfig(
            width=int(width),
            height=int(height),
            depth=int(depth),
            resolution_xy=resolution_xy,
            resolution_z=resolution_xy if resolution_z is None else resolution_z,
            origin_x=origin_x,
            origin_y=origin_y,
            origin_z=origin_z,
        )

    @property
    def occupancy_map(self) -> OccupancyMap:
        return self._map

    @property
    def resolution_xy(self) -> float:
        return self.config.resolution_xy

    @property
    def resolution_z(self) -> float:
        return self.config.resolution_z

    def is_cell_within_map(self, x: int, y: int, z: int) -> bool:
        cfg = self.config
        return 0 <= x < cfg.width and 0 <= y < cfg.height and 0 <= z < cfg.depth

    def is_valid_cell(self, x: int, y: int, z: int) -> bool:
        return self.is_cell_within_map(x, y, z)

    def _node(self, x: int, y: int, z: int):
        return self._map.search(*self.voxel_to_world(x, y, z))

    def is_cell_occupied(self, x: int, y: int, z: int) -> bool:
        """Out-of-map cells and cells with any stored node are occupied."""
        if not self.is_cell_within_map(x, y, z):
            return True
        return self._node(x, y, z) is not None

    def is_cell_free(self, x: int, y: int, z: int) -> bool:
        """A known cell below the occupancy threshold."""
        if not self.is_cell_within_map(x, y, z):
            return False
        node = self._node(x, y, z)
        return node is not None and not self._map.is_node_occupied(node)

    def is_cell_unknown(self, x: int, y: int, z: int) -> bool:
        if not self.is_cell_within_map(x, y, z):
            return False
        return self._node(x, y, z) is None

    def cell_cost(self, x: int, y: int, z: int) -> int:
        """Cost 0-255: maximum outside the map, 0 for cells without a node."""
        if not self.is_cell_within_map(x, y, z):
            return MAX_COST
        node = self._node(x, y, z)
        if node is None:
            return 0
        return int(node.occupancy() * MAX_COST)

    def occupancy_probability(self, x: int, y: int, z: int) -> float:
        if not self.is_cell_within_map(x, y, z):
            return 1.0
        node = self._node(x, y, z)
        if node is None:
            return 0.5
        return node.occupancy()

    def update_cell_cost(self, x: int, y: int, z: int, cost: int) -> None:
        """Store a cell with the given cost, or remove it when the cost is 0."""
        if not self.is_cell_within_map(x, y, z):
            raise IndexError(f"voxel ({x}, {y}, {z}) is outside the map")
        if not 0 <= cost <= MAX_COST:
            raise ValueError(f"cost must be within 0..{MAX_COST}, got {cost}")
        point = self.voxel_to_world(x, y, z)
        if cost > 0:
            self._map.set_node_value(*point, logodds(cost / MAX_COST))
        else:
            self._map.delete_node(*point)

    def update_from_map(self, occupancy_map: OccupancyMap | None) -> None:
        if occupancy_map is not None:
            self._map = occupancy_map

    def insert_point_cloud(
        self, points: Iterable[Sequence[float]], sensor_origin: Sequence[float]
    ) -> None:
        self._map.insert_point_cloud(points, sensor_origin)

    def world_to_voxel(self, x: float, y: float, z: float) -> tuple[int, int, int]:
        """Voxel indices of a world point, truncated toward zero and not bounds-checked."""
        cfg = self.config
        return (
            int((x - cfg.origin_x) / cfg.resolution_xy),
            int((y - cfg.origin_y) / cfg.resolution_xy),
            int((z - cfg.origin_z) / cfg.resolution_z),
        )

    def voxel_to_world(self, x: int, y: int, z: int) -> tuple[float, float, float]:
        """World coordinates of a voxel's centre."""
        cfg = self.config
        return (
            cfg.origin_x + (x + 0.5) * cfg.resolution_xy,
            cfg.origin_y + (y + 0.5) * cfg.resolution_xy,
            cfg.origin_z + (z + 0.5) * cfg.resolution_z,
        )

    def load_map(self, path: str | Path) -> None:
        self._map = OccupancyMap.read_binary(path)

    def save_map(self, path: str | Path) -> None:
        self._map.write_binary(path)

    def load_map_with_config(self, path: str | Path) -> None:
        """Load the map and the YAML config beside it with the same base name."""
        self.load_map(path)
        self.load_config_yaml(_config_path(path))

    def save_map_with_config(self, path: str | Path) -> None:
        self.save_map(path)
        self.save_config_yaml(_config_path(path))

    def save_config_yaml(self, path: str | Path) -> None:
        cfg = self.config
        document = {
            "env_width": cfg.width,
            "env_height": cfg.height,
            "env_depth": cfg.depth,
            "voxel_size": cfg.resolution_xy,
            "voxel_size_z": cfg.resolution_z,
            "origin_x": cfg.origin_x,
            "origin_y": cfg.origin_y,
            "origin_z": cfg.origin_z,
        }
        with open(path, "w", encoding="utf-8") as stream:
            yaml.safe_dump(document, stream, sort_keys=False)

    def load_config_yaml(self, path: str | Path) -> None:
        with open(path, encoding="utf-8") as stream:
            document = yaml.safe_load(stream)
        if not isinstance(document, dict):
            raise ValueError(f"{path}: config is not a mapping")
        try:
            config = EnvConfig(
                width=int(document["env_width"]),
                height=int(document["env_height"]),
                depth=int(document["env_depth"]),
                resolution_xy=float(document["voxel_size"]),
                resolution_z=float(document["voxel_size_z"]),
                origin_x=float(document["origin_x"]),
                origin_y=float(document["origin_y"]),
                origin_z=float(document["origin_z"]),
            )
        except KeyError as exc:
            raise ValueError(f"{path}: missing config key {exc.args[0]!r}") from exc
        except (TypeError, ValueError) as exc:
            raise ValueError(f"{path}: invalid config value: {exc}") from exc
        self.config = config

    def grid_size(self) -> tuple[int, int, int]:
        return self.config.width, self.config.height, self.config.depth

    def bounds(self) -> tuple[float, float, float, float, float, float]:
        """(min_x, min_y, min_z, max_x, max_y, max_z) in world coordinates."""
        cfg = self.config
        return (
            cfg.origin_x,
            cfg.origin_y,
            cfg.origin_z,
            cfg.origin_x + cfg.width * cfg.resolution_xy,
            cfg.origin_y + cfg.height * cfg.resolution_xy,
            cfg.origin_z + cfg.depth * cfg.resolution_z,
        )