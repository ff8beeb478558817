[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rakukan"
version = "0.3.0"
description = "Input-method core for Japanese text entry: kana conversion, key bindings, configuration and candidate session state"
requires-python = ">=3.11"
dependencies = []
keywords = ["ime", "japanese", "kana", "input-method", "keymap", "romaji"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Natural Language :: Japanese",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Text Processing :: Linguistic",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["rakukan"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.mypy]
python_version = "3.11"
strict = true
