[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "velvetcloth"
version = "0.1.0"
description = "Position-based cloth simulation core: particle and constraint setup, spatial hashing, actors, timers and mouse grabbing."
requires-python = ">=3.10"
dependencies = ["numpy"]
keywords = ["cloth", "simulation", "physics", "constraints", "spatial-hash", "chebyshev"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Physics",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["velvetcloth"]

[tool.pytest.ini_options]
addopts = "-ra"
