[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "minishellpy"
version = "0.1.0"
description = "Building blocks of a small POSIX-style shell: variables, expansion, tokens, parsing, heredocs, builtins and pipelines."
requires-python = ">=3.10"
dependencies = []
keywords = ["shell", "pipeline", "heredoc", "parser", "builtins", "expansion"]
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
    "Topic :: System :: Shells",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["minishellpy"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]
