[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "servio"
version = "0.1.0"
description = "Servomotor control core: PID control loops, unit conversion, persistent configuration and a text command dispatcher"
requires-python = ">=3.10"
dependencies = []
keywords = ["servo", "motor", "pid", "control", "embedded", "configuration", "simulation"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Embedded Systems",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["servio"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
