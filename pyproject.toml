[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "lustremon"
version = "0.1.0"
description = "Build and decode Lustre server monitoring metric strings (OST, MDT, OSC and router reports)"
requires-python = ">=3.10"
dependencies = []
keywords = ["lustre", "monitoring", "metrics", "ost", "mdt", "osc", "lnet"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Monitoring",
    "Topic :: System :: Filesystems",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["lustremon"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
