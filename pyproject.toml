[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "freebird-converter"
version = "0.1.0"
description = "A desktop media converter that drives ffmpeg for video, audio and subtitle streams"
requires-python = ">=3.10"
keywords = ["ffmpeg", "transcode", "converter", "video", "audio", "encoder"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: X11 Applications",
    "Environment :: Win32 (MS Windows)",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Video :: Conversion",
    "Topic :: Multimedia :: Sound/Audio :: Conversion",
]
dependencies = [
    "tqdm",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
freebird-converter = "freebird_converter.gui:main"
freebird-install-ffmpeg = "freebird_converter.installer:main"

[tool.hatch.build.targets.wheel]
packages = ["freebird_converter"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
