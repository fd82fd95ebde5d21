[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "fzfcore"
version = "0.62.0"
description = "Fuzzy matching algorithms, ANSI color extraction, chunked item storage and result merging for command-line finders"
requires-python = ">=3.10"
dependencies = []
keywords = ["fuzzy", "matching", "finder", "ansi", "search", "filter"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Text Processing :: Filters",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["fzfcore"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
