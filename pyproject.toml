[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "zipcursor"
version = "0.1.0"
description = "Read ZIP archives from seekable files, in-memory bytes or one-way streams, with CRC32 checking and ZIP64 support."
requires-python = ">=3.10"
dependencies = [
    "zstandard",
]
keywords = ["zip", "archive", "zip64", "deflate", "streaming", "extraction"]
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
    "Topic :: System :: Archiving :: Compression",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
zipcursor-extract = "zipcursor.extract:main"

[tool.hatch.build.targets.wheel]
packages = ["zipcursor"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
