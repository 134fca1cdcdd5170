[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "flowdev"
version = "0.1.0"
description = "Cadence template generation, project file tracking and terminal reports for Flow development"
requires-python = ">=3.10"
keywords = ["flow", "cadence", "code-generation", "templates", "smart-contracts"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Code Generators",
]
dependencies = [
    "jinja2>=3.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
]

[project.scripts]
flowdev = "flowdev.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["flowdev"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
