[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "bmsplayer"
version = "0.1.0"
description = "Chart model, BMSON loading, note timing, scores and dan course tracking for BMS rhythm games"
requires-python = ">=3.10"
keywords = ["bms", "bmson", "rhythm game", "chart", "timing", "dan", "score"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Games/Entertainment",
]
dependencies = [
    "platformdirs",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["bmsplayer"]

[tool.pytest.ini_options]
addopts = "-ra"
