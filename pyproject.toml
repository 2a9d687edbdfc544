[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "chainchat"
version = "0.1.0"
description = "Peer-to-peer chat whose message history is a small proof-of-work chain"
requires-python = ">=3.10"
dependencies = []
keywords = ["p2p", "chat", "blockchain", "proof-of-work", "tcp"]
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
    "Topic :: Communications :: Chat",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
chainchat = "chainchat.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["chainchat"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
