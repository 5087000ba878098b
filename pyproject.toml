[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "bevybrp"
version = "0.1.0"
description = "Discover, launch, probe and shut down Bevy apps and examples over the Bevy Remote Protocol"
requires-python = ">=3.10"
dependencies = [
    "psutil",
]
keywords = ["bevy", "brp", "remote", "cargo", "json-rpc"]
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
    "Topic :: Software Development :: Debuggers",
    "Topic :: Games/Entertainment",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["bevybrp"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
