"""Planner node parameters, their defaults and loading them from YAML."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from voxelnav.environment import EnvironmentVoxel3D

NODE_SECTION = "global_path_planner_node"
PARAMETERS_SECTION = "ros__parameters"


class PlannerType(Enum):
    """Path planning algorithms the planner node can be configured with."""

    ASTAR = "astar"
    THETASTAR = "thetastar"
    ARASTAR = "arastar"
    JPS = "jps"


def parse_planner_type(name: str) -> PlannerType:
    """Map a configured planner name to a type; unknown names fall back to A*."""
    for planner_type in PlannerType:
        if planner_type.value == name:
            return planner_type
    return PlannerType.ASTAR


@dataclass(frozen=True)
class PlannerParameters:
    """Settings of the global path planner node."""

    planner_type: str = "astar"
    planner_frequency: float = 1.0
    max_planning_time: float = 5.0
    goal_tolerance: float = 0.5
    robot_radius: float = 0.3
    map_resolution: float = 0.1
    origin_x: float = -5.0
    origin_y: float = -5.0
    origin_z: float = 0.0
    env_width: float = 200.0
    env_height: float = 200.0
    env_depth: float = 100.0
    voxel_width: int = 200
    voxel_height: int = 200
    voxel_depth: int = 100

    @property
    def voxel_size_xy(self) -> float:
        """Edge length of a voxel in the XY plane, in metres."""
        return self.env_width / self.voxel_width

    @property
    def voxel_size_z(self) -> float:
        """Height of a voxel, in metres."""
        return self.env_depth / self.voxel_depth

    def create_environment(self) -> EnvironmentVoxel3D:
        """Build an empty voxel environment from these parameters."""
        environment = EnvironmentVoxel3D()
        # The world extents are handed over as the grid dimensions, truncated.
        environment.initialize(
            int(self.env_width),
            int(self.env_height),
            int(self.env_depth),
            self.voxel_size_xy,
            self.origin_x,
            self.origin_y,
            self.origin_z,
            self.voxel_size_z,
        )
        return environment


def _as_str(name: str, value: Any) -> str:
    if value is None or isinstance(value, (dict, list)):
        raise ValueError(f"parameter {name!r} must be a scalar, got {value!r}")
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _as_float(name: str, value: Any) -> float:
    if isinstance(value, bool) or value is None or isinstance(value, (dict, list)):
        raise ValueError(f"parameter {name!r} must be a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"parameter {name!r} must be a number, got {value!r}") from exc


def _as_int(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"parameter {name!r} must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError as exc:
            raise ValueError(f"parameter {name!r} must be an integer, got {value!r}") from exc
    raise ValueError(f"parameter {name!r} must be an integer, got {value!r}")


def _converter(field_type: Any):
    if field_type in (int, "int"):
        return _as_int
    if field_type in (float, "float"):
        return _as_float
    return _as_str


def load_parameters_from_yaml(
    path: str | Path, base: PlannerParameters | None = None
) -> PlannerParameters:
    """Return the base parameters overridden by those found in a YAML file.

    The file holds the node's section with its ``ros__parameters`` mapping;
    keys that are absent keep the value from the base.
    """
    if base is None:
        base = PlannerParameters()
    with open(path, encoding="utf-8") as stream:
        try:
            document = yaml.safe_load(stream)
        except yaml.YAMLError as exc:
            raise ValueError(f"{path}: YAML parsing error: {exc}") from exc

    if not isinstance(document, dict) or document.get(NODE_SECTION) is None:
        raise ValueError(f"{path}: config file does not contain {NODE_SECTION!r} section")
    section = document[NODE_SECTION]
    if not isinstance(section, dict) or PARAMETERS_SECTION not in section:
        raise ValueError(f"{path}: config file does not contain {PARAMETERS_SECTION!r} section")
    params = section[PARAMETERS_SECTION]
    if params is None:
        params = {}
    if not isinstance(params, dict):
        raise ValueError(f"{path}: {PARAMETERS_SECTION!r} is not a mapping")

    updates = {
        field.name: _converter(field.type)(field.name, params[field.name])
        for field in dataclasses.fields(PlannerParameters)
        if field.name in params
    }
    return dataclasses.replace(base, **updates)