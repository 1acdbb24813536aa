[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "polycloud"
version = "0.1.0"
description = "An X25519 key agreement demonstration and a line-based TCP chat server"
requires-python = ">=3.10"
dependencies = [
    "cryptography",
]
keywords = ["chat", "tcp", "asyncio", "cryptography", "x25519", "diffie-hellman"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Framework :: AsyncIO",
    "Topic :: Communications :: Chat",
    "Topic :: Security :: Cryptography",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[project.scripts]
polycloud-dh = "polycloud.key_exchange:main"
polycloud-server = "polycloud.server:main"

[tool.hatch.build.targets.wheel]
packages = ["polycloud"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
