"""State of the converter window and the per-frame bookkeeping on it."""

from __future__ import annotations

import queue
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .ffmpeg import get_encoders, get_formats, get_pixel_formats
from .models import EncoderInfo, FormatInfo, PixelFormatInfo


def truncate_str(text: str, max_chars: int) -> str:
    """Cut ``text`` to ``max_chars`` characters, marking the cut with an ellipsis."""
    if len(text) > max_chars:
        return text[:max_chars] + "…"
    return text


def _describe_exit(code: int) -> str:
    if code < 0:
        return f"signal: {-code}"
    return f"exit code: {code}"


@dataclass
class ConverterState:
    """Everything the converter window shows and edits.

    ``receiver`` carries output lines from reader threads; each thread puts
    ``None`` when its stream ends, and ``open_streams`` counts those still open.
    """

    is_running: bool = False
    child: Optional[subprocess.Popen] = None
    receiver: Optional[queue.Queue] = None
    open_streams: int = 0
    error_message: Optional[str] = None

    file_path1: Optional[Path] = None
    file_path2: Optional[Path] = None
    file_picker: Optional[queue.Queue] = None
    active_picker: Optional[int] = None

    folder_picker: Optional[queue.Queue] = None
    active_folder_picker: Optional[int] = None
    folder_path1: Optional[Path] = None
    folder_path2: Optional[Path] = None

    encoder_info: list[EncoderInfo] = field(default_factory=list)
    format_info: list[FormatInfo] = field(default_factory=list)
    pixel_format_info: list[PixelFormatInfo] = field(default_factory=list)

    encoder_names: list[str] = field(default_factory=list)
    format_names: list[str] = field(default_factory=list)
    pixel_format_names: list[str] = field(default_factory=list)

    selected_encoder: str = ""
    selected_format: str = ""
    selected_pixel_format: str = ""

    bitrate: str = "2000"
    constant_rate_factor: str = "21"
    coding_default: str = ""
    gop: str = "120"
    is_video: bool = False
    is_audio: bool = False
    is_subtitle: bool = False

    output_lines: list[str] = field(default_factory=list)
    inbox: queue.Queue = field(default_factory=queue.Queue)

    def load_ffmpeg_data(self) -> None:
        """Query ffmpeg for its encoders and formats and select the first of each."""
        self.encoder_info = get_encoders()
        self.format_info = get_formats()
        self.pixel_format_info = get_pixel_formats()

        self.encoder_names = [info.name for info in self.encoder_info]
        self.format_names = [info.name for info in self.format_info]
        self.pixel_format_names = [info.name for info in self.pixel_format_info]

        self.selected_encoder = next(iter(self.encoder_names), "")
        self.selected_format = next(iter(self.format_names), "")
        self.selected_pixel_format = next(iter(self.pixel_format_names), "")

    def select_encoder(self, name: str) -> None:
        """Select an encoder and take over its stream type flags."""
        info = next((e for e in self.encoder_info if e.name == name), None)
        if info is None:
            raise ValueError(f"unknown encoder: {name!r}")
        self.selected_encoder = name
        self.is_video = info.is_video
        self.is_audio = info.is_audio
        self.is_subtitle = info.is_subtitle

    def poll_process(self) -> None:
        """Note when the running ffmpeg process has exited."""
        if not self.is_running or self.child is None:
            return
        try:
            code = self.child.poll()
        except OSError as exc:
            self.is_running = False
            self.error_message = f"Check the process state failure: {exc}"
            self.child = None
            return
        if code is not None:
            self.is_running = False
            self.output_lines.append(
                f">>> Process exit, status code: {_describe_exit(code)}"
            )
            self.child = None

    def drain_output(self) -> None:
        """Move every waiting output line into ``output_lines``."""
        while self.receiver is not None:
            try:
                item = self.receiver.get_nowait()
            except queue.Empty:
                return
            if item is None:
                self.open_streams -= 1
                if self.open_streams <= 0:
                    self.receiver = None
            else:
                self.output_lines.append(item)

    def check_file_picker(self) -> None:
        """Take over a file chosen in the file dialog, if one has arrived."""
        if self.file_picker is None:
            return
        try:
            path = self.file_picker.get_nowait()
        except queue.Empty:
            return
        picker, self.active_picker = self.active_picker, None
        if picker == 1:
            self.file_path1 = Path(path)
        elif picker == 2:
            self.file_path2 = Path(path)
        self.file_picker = None

    def check_folder_picker(self) -> None:
        """Take over a folder chosen in the folder dialog, if one has arrived."""
        if self.folder_picker is None:
            return
        try:
            path = self.folder_picker.get_nowait()
        except queue.Empty:
            return
        picker, self.active_folder_picker = self.active_folder_picker, None
        if picker == 1:
            self.folder_path1 = Path(path)
        elif picker == 2:
            self.folder_path2 = Path(path)
        self.folder_picker = None

    def tick(self) -> bool:
        """Run one frame of bookkeeping; return True while refreshing is needed."""
        self.poll_process()
        self.check_file_picker()
        self.check_folder_picker()
        self.drain_output()
        return self.is_running or self.receiver is not None