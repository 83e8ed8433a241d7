[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "treasurehunt"
version = "0.1.0"
description = "Manage treasure hunts stored as binary record files, with a monitor, a hub shell and a score calculator"
requires-python = ">=3.10"
dependencies = []
keywords = ["treasure", "hunt", "game", "records", "monitor"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
treasure-manager = "treasurehunt.manager:main"
treasure-monitor = "treasurehunt.monitor:main"
treasure-hub = "treasurehunt.hub:main"
score-calculator = "treasurehunt.scores:main"

[tool.hatch.build.targets.wheel]
packages = ["treasurehunt"]

[tool.pytest.ini_options]
addopts = "-ra"
