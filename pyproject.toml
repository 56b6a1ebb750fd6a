[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "zknotebook"
version = "0.1.0"
description = "Core model of a plain-text Zettelkasten notebook: configuration, note creation, link formatting and sorting options."
requires-python = ">=3.11"
dependencies = []
keywords = ["zettelkasten", "notes", "markdown", "notebook", "wiki-links"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: News/Diary",
    "Topic :: Text Processing :: Markup :: Markdown",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["zknotebook"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
