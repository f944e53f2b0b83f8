[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "wiretap"
version = "1.0.0"
description = "A packet sniffer that decodes Ethernet, IPv4, TCP, UDP and ICMP traffic and prints it layer by layer"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "packet",
    "sniffer",
    "network",
    "ethernet",
    "ipv4",
    "tcp",
    "udp",
    "icmp",
    "hexdump",
    "capture",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking :: Monitoring",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
wiretap = "wiretap.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["wiretap"]

[tool.hatch.build.targets.sdist]
include = ["wiretap", "tests"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
