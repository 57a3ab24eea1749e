"""The global path planner node: configuration, path following and visualization."""

from __future__ import annotations

import argparse
import logging
import math
from dataclasses import dataclass
from typing import Sequence

from voxelnav.config import (
    PlannerParameters,
    PlannerType,
    load_parameters_from_yaml,
    parse_planner_type,
)
from voxelnav.environment import EnvironmentVoxel3D
from voxelnav.markers import (
    Marker,
    Pose,
    environment_bounds_markers,
    path_markers,
    start_goal_markers,
    voxel_grid_markers,
)

logger = logging.getLogger(__name__)

MAX_LINEAR_SPEED = 0.5
LINEAR_GAIN = 0.5
ANGULAR_GAIN = 1.0
VERTICAL_GAIN = 0.5


@dataclass(frozen=True)
class VelocityCommand:
    """A velocity command: forward and vertical speed plus yaw rate."""

    linear_x: float = 0.0
    linear_z: float = 0.0
    angular_z: float = 0.0


@dataclass(frozen=True)
class Transform:
    """A static transform between two coordinate frames."""

    parent_frame: str
    child_frame: str
    translation: tuple[float, float, float] = (0.0, 0.0, 0.0)
    rotation: tuple[float, float, float, float] = (0.0, 0.0, 0.0, 1.0)


def follow_command(current: Pose, waypoint: Pose, goal_tolerance: float) -> VelocityCommand:
    """Proportional command that steers from the current pose toward a waypoint.

    Within the goal tolerance the command is all zeros.
    """
    dx = waypoint.position.x - current.position.x
    dy = waypoint.position.y - current.position.y
    dz = waypoint.position.z - current.position.z
    distance = math.sqrt(dx * dx + dy * dy + dz * dz)
    if distance <= goal_tolerance:
        return VelocityCommand()
    return VelocityCommand(
        linear_x=min(MAX_LINEAR_SPEED, distance * LINEAR_GAIN),
        linear_z=dz * VERTICAL_GAIN,
        angular_z=math.atan2(dy, dx) * ANGULAR_GAIN,
    )


def map_transform(parent_frame: str = "world", child_frame: str = "map") -> Transform:
    """The identity transform from the parent frame to the child frame."""
    return Transform(parent_frame, child_frame)


class GlobalPathPlannerNode:
    """Holds the planner's environment, robot state and current path."""

    def __init__(self, params: PlannerParameters | None = None) -> None:
        self.params = params if params is not None else PlannerParameters()
        self.planner_type: PlannerType = parse_planner_type(self.params.planner_type)
        self.environment: EnvironmentVoxel3D = self.params.create_environment()
        self.current_pose = Pose()
        self.goal_pose: Pose | None = None
        self.current_path: list[Pose] = []
        self._log_summary()

    def _log_summary(self) -> None:
        p = self.params
        logger.info(
            "Global path planner configured with planner type: %s", self.planner_type.value
        )
        logger.info("  World size: %.1f x %.1f x %.1f m", p.env_width, p.env_height, p.env_depth)
        logger.info("  Voxel grid: %d x %d x %d", p.voxel_width, p.voxel_height, p.voxel_depth)
        logger.info("  XY resolution: %.1f m", p.voxel_size_xy)
        logger.info("  Z resolution: %.1f m", p.voxel_size_z)

    def set_goal(self, pose: Pose | None) -> None:
        """Set the goal pose, or clear it with None."""
        self.goal_pose = pose

    def set_current_pose(self, pose: Pose) -> None:
        self.current_pose = pose

    def set_path(self, path: Sequence[Pose]) -> None:
        self.current_path = list(path)

    def follow_path(self, path: Sequence[Pose]) -> VelocityCommand | None:
        """Command toward the path's first waypoint; None for an empty path."""
        if not path:
            return None
        return follow_command(self.current_pose, path[0], self.params.goal_tolerance)

    def visualization(self) -> dict[str, list[Marker]]:
        """Marker lists by topic, with every marker also in the combined topic."""
        topics = {
            "environment_bounds": environment_bounds_markers(self.params),
            "voxel_grid": voxel_grid_markers(self.environment, self.params),
            "start_goal_points": start_goal_markers(self.current_pose, self.goal_pose),
            "paths": path_markers(self.current_path),
        }
        combined = [marker for markers in topics.values() for marker in markers]
        topics["visualization_markers"] = combined
        for name, markers in topics.items():
            logger.info("  - %s: %d markers", name, len(markers))
        return topics


def main(argv: Sequence[str] | None = None) -> int:
    """Configure the planner node from the command line and an optional YAML file."""
    parser = argparse.ArgumentParser(description="Configure the global path planner.")
    parser.add_argument("--config-file", default="", help="YAML file with node parameters")
    parser.add_argument("--planner-type", default=None, help="astar, thetastar, arastar or jps")
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    params = PlannerParameters()
    if args.planner_type is not None:
        params = PlannerParameters(planner_type=args.planner_type)
    if args.config_file:
        try:
            params = load_parameters_from_yaml(args.config_file, params)
            logger.info("Successfully loaded parameters from YAML file: %s", args.config_file)
        except (OSError, ValueError) as exc:
            logger.warning(
                "Failed to load parameters from YAML file: %s (%s), using default values",
                args.config_file,
                exc,
            )
    else:
        logger.info("No config file specified, using default parameters")

    node = GlobalPathPlannerNode(params)
    transform = map_transform()
    logger.info("Published %s->%s transform", transform.parent_frame, transform.child_frame)
    logger.info("Planner ready: %s", node.planner_type.value)
    return 0