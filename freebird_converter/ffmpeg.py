"""Building ffmpeg command lines and reading ffmpeg's capability listings."""

from __future__ import annotations

import logging
import os
import re
import subprocess
from pathlib import Path
from typing import Optional, Union

from .models import (
    AudioEncoderClass,
    EncoderInfo,
    FormatInfo,
    PixelFormatInfo,
    VideoEncoderClass,
)

log = logging.getLogger(__name__)

PathArg = Optional[Union[str, "os.PathLike[str]"]]

_ENCODER_LINE = re.compile(r"^\s*([ VASFXBD.]+)\s+(\S+)\s+(.+)$")
_FORMAT_LINE = re.compile(r"^\s*([ DE]+)\s+(\S+)\s+(.+)$")
_PIXEL_FORMAT_LINE = re.compile(r"^\s*([ IO.]+)\s+(\S+)\s+(\d+)\s+(\d+)")
_UNSIGNED = re.compile(r"\+?[0-9]+")
_U32_MAX = 2**32 - 1


class TranscodeError(ValueError):
    """Raised when transcoding parameters are unusable."""


def _lines(text: str) -> list[str]:
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def _parse_u32(text: str) -> int | None:
    if not _UNSIGNED.fullmatch(text):
        return None
    value = int(text)
    return value if value <= _U32_MAX else None


def _is_number(text: str) -> bool:
    if "_" in text:
        return False
    try:
        float(text)
    except ValueError:
        return False
    return True


def build_ffmpeg_command(
    encoder: str,
    is_video: bool,
    is_audio: bool,
    is_subtitle: bool,
    container: str,
    pix_fmt: str,
    bitrate: str,
    quality: str,
    preset: str,
    gop: str,
    input_path: PathArg,
    output_dir: PathArg = None,
) -> list[str]:
    """Return the ffmpeg argument list that transcodes ``input_path``.

    The output file takes the input's stem with ``container`` as extension
    and goes to ``output_dir``, or next to the input when none is given.
    """
    if input_path is None:
        raise TranscodeError("The input file path cannot be empty")
    source = Path(input_path)
    if not source.exists():
        raise TranscodeError(f"The input file doesn't exist: {str(source)!r}")
    if not source.stem:
        raise TranscodeError("Invalid input file name")

    output_name = f"{source.stem}.{container}"
    target_dir = Path(output_dir) if output_dir is not None else source.parent
    output_path = target_dir / output_name

    args = ["ffmpeg", "-y", "-hide_banner", "-i", str(source)]
    if is_video:
        args += ["-c:v", encoder]
    if is_audio:
        args += ["-c:a", encoder]
    if is_subtitle:
        args += ["-c:s", encoder]

    use_quality = bool(quality.strip())
    has_bitrate = bool(bitrate.strip())
    has_preset = bool(preset.strip())

    if is_video:
        if pix_fmt:
            args += ["-pix_fmt", pix_fmt]
        if gop:
            args += ["-g", gop]
        video_family = VideoEncoderClass.from_name(encoder)
        if use_quality:
            args += [video_family.quality_param(), quality]
        elif has_bitrate:
            args += ["-b:v", bitrate]
        if has_preset:
            args += [video_family.preset_param(), preset]

    if is_audio:
        audio_family = AudioEncoderClass.from_name(encoder)
        if use_quality:
            param = audio_family.quality_param()
            if param is not None:
                args += [param, quality]
            elif audio_family.supports_q_scale():
                args += ["-q:a", quality]
        elif has_bitrate:
            args += ["-b:a", bitrate]
        if has_preset:
            preset_param = audio_family.preset_param()
            if preset_param is not None:
                args += [preset_param, preset]

    args.append(str(output_path))
    return args


def validate_transcode_params(
    encoder: str,
    is_video: bool,
    is_audio: bool,
    is_subtitle: bool,
    container: str,
    pix_fmt: str,
    bitrate: str,
    quality: str,
    gop: str,
    input_path: PathArg,
    output_dir: PathArg = None,
) -> None:
    """Check transcoding parameters; raise TranscodeError on the first fatal problem.

    Questionable but usable values are reported as logged warnings.
    """
    if not encoder.strip():
        raise TranscodeError("The encoder name cannot be empty")
    if not (is_video or is_audio or is_subtitle):
        raise TranscodeError(
            "Must specify at least one type of encoder in video, audio, or subtitles"
        )
    if not container.strip():
        raise TranscodeError("The container format cannot be empty")

    if is_video and not pix_fmt.strip():
        log.warning("Warning: no pixel format, ffmpeg will use the default pixel format")

    if not bitrate.strip() and not quality.strip():
        log.warning("Warning: no bitrate or quality, ffmpeg may use the encoder default")

    br = bitrate.strip()
    if br:
        conventional = br.endswith(("k", "K", "M", "G")) or all(
            c in "0123456789" for c in br
        )
        if not conventional:
            log.warning(
                "Warning: bitrate format unconventional "
                "(recommended using digital heel k/m/g, such as 2m)"
            )

    if is_video and quality.strip() and not _is_number(quality.strip()):
        log.warning("Warning: the video quality value should be the number (such as 23)")

    if gop.strip() and _parse_u32(gop.strip()) is None:
        raise TranscodeError("GOP interval must be positive integers")

    if input_path is None:
        raise TranscodeError("The input file path cannot be empty")
    source = Path(input_path)
    if not source.exists():
        raise TranscodeError(f"The input file doesn't exist: {str(source)!r}")

    if output_dir is not None and not Path(output_dir).exists():
        log.warning(
            "Warning: the output directory does not exist and will try to create: %r",
            str(output_dir),
        )


def parse_encoders_output(output: str) -> list[EncoderInfo]:
    """Parse the listing printed by ``ffmpeg -encoders``."""
    encoders = []
    for line in _lines(output):
        match = _ENCODER_LINE.match(line)
        if match is None:
            continue
        flags, name, description = match.groups()
        kind, frame, slice_, experimental = flags.ljust(4, ".")[:4]
        is_video = kind == "V"
        is_audio = kind == "A"
        is_subtitle = kind == "S"
        if (is_video or is_audio or is_subtitle) and name != "=":
            encoders.append(
                EncoderInfo(
                    name=name,
                    description=description.strip(),
                    is_video=is_video,
                    is_audio=is_audio,
                    is_subtitle=is_subtitle,
                    is_frame_multithreading=frame == "F",
                    is_slice_multithreading=slice_ == "S",
                    is_experimental=experimental == "X",
                )
            )
    return encoders


def parse_formats_output(output: str) -> list[FormatInfo]:
    """Parse the listing printed by ``ffmpeg -formats``."""
    formats = []
    for line in _lines(output):
        match = _FORMAT_LINE.match(line)
        if match is None:
            continue
        flags, name, description = match.groups()
        formats.append(
            FormatInfo(
                name=name,
                description=description.strip(),
                can_mux="E" in flags,
                can_demux="D" in flags,
            )
        )
    return formats


def parse_pixel_formats_output(output: str) -> list[PixelFormatInfo]:
    """Parse the listing printed by ``ffmpeg -pix_fmts``."""
    formats = []
    for line in _lines(output):
        match = _PIXEL_FORMAT_LINE.match(line)
        if match is None:
            continue
        flags, name, _components, bits = match.groups()
        formats.append(
            PixelFormatInfo(
                name=name,
                input_ok="I" in flags,
                output_ok="O" in flags,
                bits_per_pixel=_parse_u32(bits) or 0,
            )
        )
    return formats


def _run_ffmpeg(option: str) -> str:
    completed = subprocess.run(["ffmpeg", option], capture_output=True, check=False)
    return completed.stdout.decode("utf-8", errors="replace")


def get_encoders() -> list[EncoderInfo]:
    """Return every encoder the installed ffmpeg offers."""
    return parse_encoders_output(_run_ffmpeg("-encoders"))


def get_formats() -> list[FormatInfo]:
    """Return every container format the installed ffmpeg knows."""
    return parse_formats_output(_run_ffmpeg("-formats"))


def get_pixel_formats() -> list[PixelFormatInfo]:
    """Return every pixel format the installed ffmpeg knows."""
    return parse_pixel_formats_output(_run_ffmpeg("-pix_fmts"))


def get_colors() -> list[str]:
    """Return the trimmed lines of ``ffmpeg -colors``."""
    return [line.strip() for line in _lines(_run_ffmpeg("-colors"))]