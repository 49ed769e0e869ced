[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "minilisp"
version = "0.1.0"
description = "A small Lisp interpreter with closures, macros, tail calls and an interactive prompt"
requires-python = ">=3.10"
dependencies = []
keywords = ["lisp", "interpreter", "repl", "macros"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Lisp",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Interpreters",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
minilisp = "minilisp.repl:main"

[tool.hatch.build.targets.wheel]
packages = ["minilisp"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
