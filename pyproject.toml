[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tethra"
version = "0.1.0"
description = "Implicit finite-difference dynamics solver for towed underwater cables, taking turns with a flow solver through a shared control file"
requires-python = ">=3.10"
dependencies = ["numpy"]
keywords = ["cable dynamics", "tether", "towed body", "finite difference", "newton iteration", "hydrodynamics"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Physics",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
tethra = "tethra.control:main"
tethra-control-create = "tethra.control:creator"
tethra-control-show = "tethra.control:indicator"

[tool.hatch.build.targets.wheel]
packages = ["tethra"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
ignore_missing_imports = true
