[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sqlrepokit"
version = "0.1.0"
description = "Generic repositories, named data sources and query methods derived from method names, on top of SQLAlchemy"
requires-python = ">=3.10"
dependencies = [
    "sqlalchemy>=2.0",
]
keywords = ["sqlalchemy", "repository", "orm", "database", "query methods", "postgres", "mysql"]
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
    "Topic :: Database :: Front-Ends",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
sqlrepokit-example = "sqlrepokit.example:main"

[tool.hatch.build.targets.wheel]
packages = ["sqlrepokit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
