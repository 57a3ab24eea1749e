import pytest

from voxelnav.config import (
    PlannerParameters,
    PlannerType,
    load_parameters_from_yaml,
    parse_planner_type,
)


def _write(tmp_path, text):
    path = tmp_path / "params.yaml"
    path.write_text(text, encoding="utf-8")
    return path


@pytest.mark.parametrize(
    "name, expected",
    [
        ("astar", PlannerType.ASTAR),
        ("thetastar", PlannerType.THETASTAR),
        ("arastar", PlannerType.ARASTAR),
        ("jps", PlannerType.JPS),
        ("dijkstra", PlannerType.ASTAR),
        ("", PlannerType.ASTAR),
    ],
)
def test_parse_planner_type(name, expected):
    assert parse_planner_type(name) is expected


def test_defaults_match_declared_parameters():
    params = PlannerParameters()
    assert params.planner_type == "astar"
    assert params.max_planning_time == 5.0
    assert params.goal_tolerance == 0.5
    assert (params.origin_x, params.origin_y, params.origin_z) == (-5.0, -5.0, 0.0)
    assert (params.voxel_width, params.voxel_height, params.voxel_depth) == (200, 200, 100)


def test_voxel_sizes_divide_extents():
    params = PlannerParameters(env_width=30.0, voxel_width=12, env_depth=9.0, voxel_depth=6)
    assert params.voxel_size_xy * params.voxel_width == pytest.approx(params.env_width)
    assert params.voxel_size_z * params.voxel_depth == pytest.approx(params.env_depth)


def test_load_overrides_only_given_keys(tmp_path):
    path = _write(
        tmp_path,
        "global_path_planner_node:\n"
        "  ros__parameters:\n"
        "    planner_type: jps\n"
        "    goal_tolerance: 2\n"
        "    voxel_width: 64\n",
    )
    base = PlannerParameters(robot_radius=0.7)
    params = load_parameters_from_yaml(path, base)
    assert params.planner_type == "jps"
    assert params.goal_tolerance == 2.0
    assert isinstance(params.goal_tolerance, float)
    assert params.voxel_width == 64
    assert params.robot_radius == 0.7
    assert params.env_width == base.env_width


def test_load_without_base_uses_defaults(tmp_path):
    path = _write(
        tmp_path,
        "global_path_planner_node:\n  ros__parameters:\n    origin_z: 3.5\n",
    )
    params = load_parameters_from_yaml(path)
    assert params.origin_z == 3.5
    assert params.planner_type == PlannerParameters().planner_type


def test_empty_parameter_section_keeps_base(tmp_path):
    path = _write(tmp_path, "global_path_planner_node:\n  ros__parameters:\n")
    base = PlannerParameters(env_depth=42.0)
    assert load_parameters_from_yaml(path, base) == base


def test_missing_node_section(tmp_path):
    path = _write(tmp_path, "other_node:\n  ros__parameters:\n    goal_tolerance: 1.0\n")
    with pytest.raises(ValueError, match="global_path_planner_node"):
        load_parameters_from_yaml(path)


def test_missing_parameters_section(tmp_path):
    path = _write(tmp_path, "global_path_planner_node:\n  something: 1\n")
    with pytest.raises(ValueError, match="ros__parameters"):
        load_parameters_from_yaml(path)


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_parameters_from_yaml(tmp_path / "absent.yaml")


def test_invalid_yaml(tmp_path):
    path = _write(tmp_path, "global_path_planner_node: [unclosed\n")
    with pytest.raises(ValueError):
        load_parameters_from_yaml(path)


@pytest.mark.parametrize(
    "line",
    ["voxel_width: 3.5", "voxel_width: wide", "goal_tolerance: far", "goal_tolerance: true"],
)
def test_bad_parameter_types(tmp_path, line):
    path = _write(
        tmp_path, f"global_path_planner_node:\n  ros__parameters:\n    {line}\n"
    )
    with pytest.raises(ValueError):
        load_parameters_from_yaml(path)


def test_create_environment_uses_parameters():
    params = PlannerParameters(
        env_width=8.0,
        env_height=6.0,
        env_depth=4.0,
        voxel_width=4,
        voxel_height=3,
        voxel_depth=2,
        origin_x=1.0,
        origin_y=2.0,
        origin_z=3.0,
    )
    environment = params.create_environment()
    assert environment.grid_size() == (8, 6, 4)
    assert environment.resolution_xy == pytest.approx(params.voxel_size_xy)
    assert environment.resolution_z == pytest.approx(params.voxel_size_z)
    assert environment.bounds()[:3] == (1.0, 2.0, 3.0)
    assert len(environment.occupancy_map) == 0