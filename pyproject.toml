[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "miniweb"
version = "0.1.0"
description = "A small HTTP/1.x file server with GET, DELETE and multipart upload support, plus a message echo server"
requires-python = ">=3.10"
dependencies = []
keywords = ["http", "server", "static-files", "upload", "multipart", "echo"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Environment :: No Input/Output (Daemon)",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
miniweb = "miniweb.server:main"

[tool.hatch.build.targets.wheel]
packages = ["miniweb"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
