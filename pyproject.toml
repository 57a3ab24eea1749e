[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "voxelnav"
version = "0.1.0"
description = "3D voxel environment, occupancy map and planning-node tooling for UAV path planning"
requires-python = ">=3.10"
dependencies = [
    "pyyaml",
]
keywords = ["uav", "voxel", "occupancy", "path-planning", "robotics"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
voxelnav-planner = "voxelnav.planner_node:main"

[tool.hatch.build.targets.wheel]
packages = ["voxelnav"]

[tool.pytest.ini_options]
addopts = "-ra"
