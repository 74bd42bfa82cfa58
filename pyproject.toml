[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "zebra"
version = "0.1.0"
description = "Merkle-prefix maps and sets, Merkle vectors with inclusion proofs, and a write-ahead log"
requires-python = ">=3.10"
dependencies = []
keywords = ["merkle", "merkle-tree", "authenticated-data-structures", "proofs", "write-ahead-log"]
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
    "Topic :: Software Development :: Libraries",
    "Topic :: Security :: Cryptography",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["zebra"]

[tool.pytest.ini_options]
addopts = "-ra"
