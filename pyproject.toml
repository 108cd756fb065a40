[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "halfmesh"
version = "0.1.0"
description = "Build and validate doubly connected edge lists from polygon meshes, and draw them as SVG"
requires-python = ">=3.10"
dependencies = []
keywords = ["dcel", "half-edge", "mesh", "planar subdivision", "computational geometry", "svg"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Education",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Mathematics",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
halfmesh = "halfmesh.cli:main"
halfmesh-draw = "halfmesh.draw:main"

[tool.hatch.build.targets.wheel]
packages = ["halfmesh"]

[tool.pytest.ini_options]
addopts = "-ra"
