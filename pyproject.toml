[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "fzkit"
version = "0.1.0"
description = "Building blocks for an interactive fuzzy finder: field tokenizer, inline ANSI renderer, event box and text-width helpers"
requires-python = ">=3.10"
dependencies = [
    "wcwidth",
    "regex",
]
keywords = ["fuzzy", "finder", "terminal", "tui", "tokenizer", "ansi"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Terminals",
    "Topic :: Utilities",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["fzkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
