[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gadflow"
version = "0.1.0"
description = "A small HTTP service that runs text-processing steps as a dependency graph."
requires-python = ">=3.10"
keywords = ["workflow", "dag", "orchestration", "flask", "http"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Framework :: Flask",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]
dependencies = [
    "flask",
    "python-dotenv",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
gadflow-server = "gadflow.server:main"

[tool.hatch.build.targets.wheel]
packages = ["gadflow"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
