[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "shrine"
version = "0.1.0"
description = "Parse, validate and plan deployments of shrine Application, Resource and Team manifests"
requires-python = ">=3.10"
dependencies = [
    "pyyaml",
]
keywords = ["manifest", "deployment", "planner", "yaml", "containers"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["shrine"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
