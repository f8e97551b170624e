"""Starting and stopping the ffmpeg process for a converter state."""

from __future__ import annotations

import contextlib
import queue
import subprocess
import sys
import threading
from typing import IO

from .ffmpeg import TranscodeError, build_ffmpeg_command, validate_transcode_params
from .state import ConverterState

_CREATE_NO_WINDOW = 0x08000000


def _forward_lines(stream: IO[bytes], tag: str, channel: queue.Queue) -> None:
    try:
        for raw in iter(stream.readline, b""):
            line = raw.decode("utf-8", errors="replace")
            if line.endswith("\n"):
                line = line[:-1]
                if line.endswith("\r"):
                    line = line[:-1]
            channel.put(f"[{tag}] {line}")
    except (OSError, ValueError):
        pass
    finally:
        with contextlib.suppress(OSError, ValueError):
            stream.close()
        channel.put(None)


def start_ffmpeg(state: ConverterState) -> None:
    """Validate the settings, start ffmpeg and stream its output into ``state``."""
    state.output_lines.clear()
    state.error_message = None
    state.is_running = True

    try:
        validate_transcode_params(
            state.selected_encoder,
            state.is_video,
            state.is_audio,
            state.is_subtitle,
            state.selected_format,
            state.selected_pixel_format,
            state.bitrate,
            state.constant_rate_factor,
            state.gop,
            state.file_path1,
            state.folder_path1,
        )
    except TranscodeError as exc:
        state.error_message = f"Invalid parameter: {exc}"
        print(state.error_message, file=sys.stderr)
        return

    try:
        args = build_ffmpeg_command(
            state.selected_encoder,
            state.is_video,
            state.is_audio,
            state.is_subtitle,
            state.selected_format,
            state.selected_pixel_format,
            state.bitrate,
            state.constant_rate_factor,
            state.coding_default,
            state.gop,
            state.file_path1,
            state.folder_path1,
        )
    except TranscodeError as exc:
        state.error_message = f"Parameter error: {exc}"
        state.is_running = False
        return

    options = {}
    if sys.platform == "win32":
        options["creationflags"] = _CREATE_NO_WINDOW

    try:
        child = subprocess.Popen(
            args, stdout=subprocess.PIPE, stderr=subprocess.PIPE, **options
        )
    except OSError as exc:
        state.error_message = f"Failed run ffmpeg: {exc}"
        state.is_running = False
        return

    channel: queue.Queue = queue.Queue()
    state.receiver = channel
    state.open_streams = 2
    for stream, tag in ((child.stdout, "stdout"), (child.stderr, "stderr")):
        threading.Thread(
            target=_forward_lines, args=(stream, tag, channel), daemon=True
        ).start()

    state.child = child
    state.output_lines.append(">>> Start run ffmpeg ...")


def stop_ffmpeg(state: ConverterState) -> None:
    """Kill the running ffmpeg process, if any, and stop listening to it."""
    child, state.child = state.child, None
    if child is not None:
        with contextlib.suppress(OSError):
            child.kill()
        with contextlib.suppress(OSError):
            child.wait()
        state.output_lines.append(">>> User manual termination ffmpeg")
    state.is_running = False
    state.receiver = None