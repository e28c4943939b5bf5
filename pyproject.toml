[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "workservice"
version = "0.1.0"
description = "Service for managing students, assignments and submitted works, with file storage, plagiarism analysis reports and event publishing"
requires-python = ">=3.10"
keywords = ["plagiarism", "assignments", "students", "education", "rest", "flask"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Education",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Framework :: Flask",
    "Topic :: Education",
]
dependencies = [
    "sqlalchemy>=2.0",
    "requests>=2.28",
    "pika>=1.3",
    "flask>=2.2",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
    "responses>=0.23",
]

[tool.hatch.build.targets.wheel]
packages = ["workservice"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
ignore_missing_imports = true
