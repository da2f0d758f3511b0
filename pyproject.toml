[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "camnode"
version = "0.1.0"
description = "Camera node runtime: typed control and frame messages, ring buffers, topic routing, request/reply and camera services"
requires-python = ">=3.10"
dependencies = []
keywords = ["camera", "embedded", "ring-buffer", "pubsub", "ipc", "request-reply", "shared-memory"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: POSIX :: Linux",
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
packages = ["camnode"]

[tool.pytest.ini_options]
addopts = "-ra"
