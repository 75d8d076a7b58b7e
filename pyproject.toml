[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "dfuse"
version = "0.1.0"
description = "DfuSe firmware images: memory mappings, Motorola S-record and Intel HEX files, and per-operation image filtering"
requires-python = ">=3.10"
dependencies = []
keywords = ["dfu", "dfuse", "firmware", "s-record", "srec", "intel-hex", "flash", "memory-map"]
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
    "Topic :: Software Development :: Embedded Systems",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["dfuse"]

[tool.pytest.ini_options]
addopts = "-ra"
