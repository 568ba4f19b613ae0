[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rudis"
version = "0.1.0"
description = "A small persistent key-value server with strings, hashes, lists, sets, key expiry, an append-only log and snapshots"
requires-python = ">=3.10"
dependencies = []
keywords = ["key-value", "database", "server", "redis", "resp", "aof", "snapshot"]
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
    "Framework :: AsyncIO",
    "Topic :: Database :: Database Engines/Servers",
]

[project.optional-dependencies]
test = ["pytest", "pytest-asyncio"]

[project.scripts]
rudis = "rudis.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["rudis"]

[tool.pytest.ini_options]
addopts = "-ra"
