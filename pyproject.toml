[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "prolinkmon"
version = "0.1.0"
description = "Pro DJ Link network monitor: decode player announcements and status frames and show them live in the terminal"
requires-python = ">=3.10"
dependencies = []
keywords = ["prolink", "pro-dj-link", "cdj", "dj", "network", "monitor", "udp"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Sound/Audio",
    "Topic :: System :: Networking :: Monitoring",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
prolink-debug = "prolinkmon.debug:main"
prolink-show = "prolinkmon.show:main"

[tool.hatch.build.targets.wheel]
packages = ["prolinkmon"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
