[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "fixparts"
version = "0.1.0"
description = "Inventory, purchasing and dashboard web service for an auto-parts shop, backed by SQLite"
requires-python = ">=3.10"
keywords = ["inventory", "auto parts", "purchases", "barcode", "code128", "flask", "sqlite"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Web Environment",
    "Framework :: Flask",
    "Intended Audience :: Other Audience",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business",
    "Topic :: Internet :: WWW/HTTP :: WSGI :: Application",
]
dependencies = [
    "flask>=2.2",
]

[project.optional-dependencies]
test = [
    "pytest>=7",
]

[project.scripts]
fixparts = "fixparts.app:main"

[tool.hatch.build.targets.wheel]
packages = ["fixparts"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
