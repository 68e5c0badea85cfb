[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "raftflow"
version = "0.1.0"
description = "Raft follower progress tracking, in-flight message flow control and log entry description helpers"
requires-python = ">=3.10"
dependencies = []
keywords = ["raft", "consensus", "replication", "flow-control", "distributed"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: System :: Distributed Computing",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["raftflow"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
