[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sondedecode"
version = "0.1.0"
description = "Decoders and receiver logic for radiosonde telemetry (RS41, M10, M20, DFM09) received with an SX1278 FSK radio"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "radiosonde",
    "rs41",
    "m10",
    "m20",
    "dfm09",
    "sx1278",
    "telemetry",
    "ham radio",
    "manchester",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications :: Ham Radio",
    "Topic :: Scientific/Engineering :: Atmospheric Science",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
sondedecode = "sondedecode.receiver:main"

[tool.hatch.build.targets.wheel]
packages = ["sondedecode"]

[tool.pytest.ini_options]
testpaths = ["tests"]
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
