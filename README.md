# voxelnav

A 3D voxel environment for UAV path planning, built on a sparse occupancy
map. It provides:

- `voxelnav.occupancy`: `OccupancyMap`, a sparse occupancy map with
  log-odds cell values (`logodds`, `probability`), point-cloud insertion
  by ray casting and a binary file format (`write_binary`, `read_binary`).
- `voxelnav.environment`: `EnvironmentVoxel3D`, a bounded voxel grid with
  separate horizontal and vertical resolutions. It converts between world
  and voxel coordinates, answers occupancy, cost and probability queries,
  and saves and loads maps together with a YAML description of the grid.
  `neighbour_directions()` lists the 26 neighbour moves with their lengths
  in millimetres.
- `voxelnav.config`: `PlannerParameters` with their defaults,
  `PlannerType`, and `load_parameters_from_yaml` for a parameter file with
  a `global_path_planner_node` / `ros__parameters` section.
- `voxelnav.markers`: `Marker` lists for the environment bounds, occupied
  voxels, start and goal points, and paths, plus
  `occupancy_from_environment` to build an occupancy map from a grid.
- `voxelnav.scene`: obstacle shapes (`add_sphere`, `add_cylinder`,
  `add_cube`), buffered `Obstacle` marking with `mark_obstacles`, and
  `create_test_environment`, a random scene with one sphere, one cylinder
  and one cube.
- `voxelnav.planner_node`: `GlobalPathPlannerNode`, which holds the
  environment, robot pose, goal and path, gives proportional velocity
  commands toward the next waypoint and collects the visualisation markers
  by topic; and the `voxelnav-planner` command.

## Installation

```
pip install .
```

For the tests:

```
pip install .[test]
pytest
```

## Using the environment

```python
from voxelnav.environment import EnvironmentVoxel3D

env = EnvironmentVoxel3D()
env.initialize(
    width=200, height=200, depth=100,
    resolution_xy=0.5,
    origin_x=-5.0, origin_y=-5.0, origin_z=0.0,
    resolution_z=0.5,
)

env.update_cell_cost(10, 20, 5, 255)   # mark a voxel as occupied
env.is_cell_occupied(10, 20, 5)        # True
env.is_cell_occupied(-1, 0, 0)         # True: outside the grid counts as occupied
env.voxel_to_world(10, 20, 5)          # centre of the voxel in world coordinates

env.save_map_with_config("scene.bt")   # writes scene.bt and scene.yaml
```

A cost of zero clears a voxel; any positive cost marks it occupied. Cells
that are outside the grid report the highest cost (255) and an occupancy
probability of 1.0. `update_cell_cost` raises `IndexError` for a voxel
outside the grid and `ValueError` for a cost outside 0..255.

## Command

```
voxelnav-planner [--config-file FILE] [--planner-type NAME]
```

Reads the planner parameters (defaults, then `--planner-type`, then the
YAML file if given; a file that cannot be read is reported and the
defaults are kept), builds the planning environment and logs its
dimensions and the chosen planner type. Unknown planner names fall back
to `astar`.

## What it does not do

- There are no path-search algorithms: the planner types are only
  recognised by name, and `GlobalPathPlannerNode` works with a path that
  is handed to it with `set_path`.
- Markers, occupancy maps, transforms and velocity commands are returned
  as Python objects; nothing is sent over a network or message bus.
- There is no command to generate or serve a map. A test scene can be
  built with `voxelnav.scene.create_test_environment()` and written with
  `EnvironmentVoxel3D.save_map_with_config`.