[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kubechange"
version = "0.1.0"
description = "Change-session state machine, planning, validation, diffing, snapshots and audit logging for Kubernetes change operations"
requires-python = ">=3.10"
dependencies = []
keywords = ["kubernetes", "change-management", "state-machine", "rollback", "audit"]
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
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["kubechange"]

[tool.pytest.ini_options]
addopts = "-ra"
