[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "socialnav"
version = "0.1.0"
description = "Socially aware navigation for a small Ackermann-steered robot: A* global planning around people, arc-based local planning, latency compensation and particle-filter localisation."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "robotics",
    "navigation",
    "path-planning",
    "a-star",
    "social-navigation",
    "particle-filter",
    "localization",
    "ackermann",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Education",
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
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["socialnav"]

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
