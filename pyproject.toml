[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cchkit"
version = "0.1.0"
description = "Customizable contraction hierarchies, geographic nearest-node lookup and graph utilities for route planning"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "routing",
    "shortest-path",
    "contraction-hierarchy",
    "customizable-contraction-hierarchy",
    "graph",
    "road-network",
]
classifiers = [
    "Development Status :: 4 - Beta",
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
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["cchkit"]

[tool.hatch.build.targets.sdist]
include = ["cchkit", "tests"]

[tool.pytest.ini_options]
testpaths = ["tests"]
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
