[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "linecover"
version = "0.1.0"
description = "Graph, route and edge-cost building blocks for line coverage planning"
requires-python = ">=3.10"
dependencies = [
    "pyyaml",
]
keywords = ["line coverage", "arc routing", "graph", "route", "2-opt", "travel time"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Mathematics",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["linecover"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
