[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "untwine"
version = "0.1.0"
description = "Building blocks for organising point clouds into octree tiles, plus a client that runs the untwine tiler and reports its progress"
requires-python = ">=3.10"
dependencies = []
keywords = ["point cloud", "lidar", "las", "octree", "voxel", "statistics", "gis"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: GIS",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
untwine-client = "untwine.client:main"

[tool.hatch.build.targets.wheel]
packages = ["untwine"]

[tool.hatch.build.targets.sdist]
include = ["untwine", "tests", "pyproject.toml", "README.md"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
