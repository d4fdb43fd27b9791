[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "draftxfer"
version = "0.0.1"
description = "Building blocks for parallel bulk file transfer over TCP: wait queues, task pools, file chunk I/O, socket helpers and a terminal progress display."
requires-python = ">=3.10"
dependencies = []
keywords = ["file transfer", "networking", "tcp", "queue", "thread pool", "progress"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
    "Topic :: System :: Filesystems",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["draftxfer"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
