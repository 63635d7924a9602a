[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "celestia_kit"
version = "0.1.0"
description = "Blob share commitments, block validation, header-exchange framing and a JSON-RPC client for Celestia nodes"
requires-python = ">=3.10"
keywords = [
    "celestia",
    "blockchain",
    "data-availability",
    "json-rpc",
    "namespaced-merkle-tree",
    "share-commitment",
]
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
    "Framework :: AsyncIO",
    "Topic :: System :: Distributed Computing",
]
dependencies = [
    "httpx",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
    "respx",
]

[tool.hatch.build.targets.wheel]
packages = ["celestia_kit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
