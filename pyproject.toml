[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "quorumkit"
version = "0.1.0"
description = "Building blocks for replicated state machines: cluster membership, a message bus, multi-group request routing and a key-value state machine."
requires-python = ">=3.10"
dependencies = []
keywords = ["raft", "consensus", "membership", "cluster", "replication", "distributed", "message-bus"]
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
    "Topic :: System :: Distributed Computing",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["quorumkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
