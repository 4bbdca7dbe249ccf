[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "nebula-sync"
version = "0.1.0"
description = "Synchronise Pi-hole configuration from a primary instance to its replicas."
requires-python = ">=3.10"
keywords = ["pi-hole", "pihole", "dns", "sync", "teleporter", "replication", "cron"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: Name Service (DNS)",
    "Topic :: System :: Systems Administration",
]
dependencies = [
    "requests>=2.28",
    "python-dotenv>=1.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
    "responses>=0.23",
]

[project.scripts]
nebula-sync = "nebula_sync.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["nebula_sync"]

[tool.hatch.build.targets.sdist]
include = ["nebula_sync", "tests", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
ignore_missing_imports = true
