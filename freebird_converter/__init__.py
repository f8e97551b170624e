"""Desktop media converter that builds and runs ffmpeg command lines."""

__version__ = "0.1.0"