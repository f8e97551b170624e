"""The converter's main window."""

from __future__ import annotations

import argparse
import os
import queue
import sys
from pathlib import Path
from typing import Callable, Optional, Sequence, Union

from .dispatch import pick_file, pick_folder, process_message
from .installer import InstallError, ensure_ffmpeg
from .messages import MessageKind, UiMessage
from .models import EncoderInfo, FormatInfo, PixelFormatInfo
from .state import ConverterState, truncate_str

WINDOW_TITLE = "freebird format converter v0.1"
ALL_GOOD = "As right as rain~  ヾ(≧▽≦*)o"
FILE_PLACEHOLDER = "Select the files to be converted"
FOLDER_PLACEHOLDER = "Select the folder as the output directory"

_FRAME_MS = 50
_NAME_LIMIT = 100
_PICKER_ID = 1


def _flag(value: bool) -> str:
    return "true" if value else "false"


def encoder_type_label(info: EncoderInfo) -> str:
    """Name the kind of stream an encoder produces."""
    if info.is_subtitle:
        return "Subtitle"
    if info.is_video and info.is_audio:
        return "Video/Audio"
    if info.is_video:
        return "Video"
    if info.is_audio:
        return "Audio"
    return "Unknown"


def encoder_tooltip(info: EncoderInfo) -> str:
    """Hover text describing an encoder."""
    return (
        f"Type: {encoder_type_label(info)}\n"
        f"Description: {info.description}\n"
        f"Frame-level multithreading: {_flag(info.is_frame_multithreading)}\n"
        f"Slice-level multithreading: {_flag(info.is_slice_multithreading)}\n"
        f"Codec is experimental: {_flag(info.is_experimental)}\n"
    )


def format_tooltip(info: FormatInfo) -> str:
    """Hover text describing a container format."""
    return (
        f"Description: {info.description}\n"
        f"Can be read/unsealed as input: {_flag(info.can_mux)}\n"
        f"Can be written/encapsulated as output: {_flag(info.can_demux)}"
    )


def pixel_format_tooltip(info: PixelFormatInfo) -> str:
    """Hover text describing a pixel format."""
    return (
        f"Name: {info.name}\n"
        f"Input: {'True' if info.input_ok else 'False'}\n"
        f"Output: {'True' if info.output_ok else 'False'}\n"
        f"Number per pixel: {info.bits_per_pixel}"
    )


def path_label(
    path: Optional[Union[str, "os.PathLike[str]"]], placeholder: str
) -> str:
    """The file name of ``path``, or ``placeholder`` when there is none."""
    if path is None:
        return placeholder
    return Path(path).name or placeholder


def _encoder_hover(state: ConverterState) -> Optional[str]:
    name = state.selected_encoder
    if not name:
        return None
    info = next((e for e in state.encoder_info if e.name == name), None)
    if info is not None:
        return encoder_tooltip(info)
    if name != truncate_str(name, _NAME_LIMIT):
        return name
    return None


def _format_hover(state: ConverterState) -> Optional[str]:
    name = state.selected_format
    if not name:
        return None
    info = next((f for f in state.format_info if f.name == name), None)
    if info is not None:
        return format_tooltip(info)
    if name != truncate_str(name, _NAME_LIMIT):
        return name
    return None


def _pixel_format_hover(state: ConverterState) -> Optional[str]:
    name = state.selected_pixel_format
    if not name:
        return None
    info = next((p for p in state.pixel_format_info if p.name == name), None)
    return pixel_format_tooltip(info) if info is not None else None


class _Tooltip:
    """A small window that shows text while the pointer rests on a widget."""

    def __init__(self, widget, text_source: Callable[[], Optional[str]]) -> None:
        self._widget = widget
        self._text_source = text_source
        self._tip = None
        widget.bind("<Enter>", self._show, add="+")
        widget.bind("<Leave>", self._hide, add="+")
        widget.bind("<ButtonPress>", self._hide, add="+")

    def _show(self, _event=None) -> None:
        import tkinter as tk

        text = self._text_source()
        if not text or self._tip is not None:
            return
        x = self._widget.winfo_rootx() + 10
        y = self._widget.winfo_rooty() + self._widget.winfo_height() + 4
        tip = tk.Toplevel(self._widget)
        tip.wm_overrideredirect(True)
        tip.wm_geometry(f"+{x}+{y}")
        tk.Label(
            tip,
            text=text,
            justify="left",
            relief="solid",
            borderwidth=1,
            background="#ffffe0",
            padx=4,
            pady=2,
        ).pack()
        self._tip = tip

    def _hide(self, _event=None) -> None:
        if self._tip is not None:
            self._tip.destroy()
            self._tip = None


class ConverterWindow:
    """The main window: file choice, encoder settings, run control and output log."""

    def __init__(self, state: Optional[ConverterState] = None) -> None:
        self.state = state if state is not None else ConverterState()
        self._dialog_requests: queue.Queue = queue.Queue()
        self._root = None
        self._filedialog = None
        self._shown_output: Optional[str] = None
        self._stop_visible = False

    def run(self) -> None:
        """Build the window and run its event loop until it is closed."""
        import tkinter as tk
        from tkinter import filedialog, ttk

        self._filedialog = filedialog
        state = self.state
        root = tk.Tk()
        self._root = root
        root.title(WINDOW_TITLE)
        root.geometry("720x480")
        root.resizable(False, False)

        frame = ttk.Frame(root, padding=10)
        frame.pack(fill="both", expand=True)

        log_row = ttk.Frame(frame)
        log_row.pack(fill="x")
        ttk.Label(log_row, text="Log: ").pack(side="left")
        self._log_label = ttk.Label(log_row, text=ALL_GOOD)
        self._log_label.pack(side="left")
        ttk.Separator(frame).pack(fill="x", pady=4)

        top = ttk.Frame(frame)
        top.pack(fill="x")
        self._file_label = ttk.Label(top, width=28)
        self._file_label.pack(side="left")
        ttk.Button(
            top, text="Browse...", command=lambda: self._send(MessageKind.PICK_FILE)
        ).pack(side="left")
        ttk.Frame(top, width=10).pack(side="left")
        self._folder_label = ttk.Label(top, width=28)
        self._folder_label.pack(side="left")
        ttk.Button(
            top, text="Browse...", command=lambda: self._send(MessageKind.PICK_FOLDER)
        ).pack(side="left")
        self._run_button = ttk.Button(
            top, text="Run", command=lambda: self._send(MessageKind.START_FFMPEG)
        )
        self._run_button.pack(side="right")
        self._stop_button = ttk.Button(
            top, text="Stop", command=lambda: self._send(MessageKind.STOP_FFMPEG)
        )
        ttk.Separator(frame).pack(fill="x", pady=4)

        mid = ttk.Frame(frame)
        mid.pack(fill="x")
        ttk.Label(mid, text="Encoders:").pack(side="left")
        self._encoder_box = self._combo(
            ttk, mid, state.encoder_names, state.selected_encoder, 20, self._on_encoder
        )
        ttk.Label(mid, text="Layouts:").pack(side="left", padx=(5, 0))
        self._format_box = self._combo(
            ttk, mid, state.format_names, state.selected_format, 24, self._on_format
        )
        ttk.Label(mid, text="PixFmts:").pack(side="left", padx=(5, 0))
        self._pixel_box = self._combo(
            ttk,
            mid,
            state.pixel_format_names,
            state.selected_pixel_format,
            12,
            self._on_pixel_format,
        )
        _Tooltip(self._encoder_box, lambda: _encoder_hover(self.state))
        _Tooltip(self._format_box, lambda: _format_hover(self.state))
        _Tooltip(self._pixel_box, lambda: _pixel_format_hover(self.state))
        ttk.Separator(frame).pack(fill="x", pady=4)

        params = ttk.Frame(frame)
        params.pack(fill="x")
        self._bitrate = self._entry(tk, ttk, params, "Bitrate:", state.bitrate)
        self._crf = self._entry(tk, ttk, params, "crf:", state.constant_rate_factor)
        self._preset = self._entry(tk, ttk, params, "Preset:", state.coding_default)
        self._gop = self._entry(tk, ttk, params, "GOP:", state.gop)
        ttk.Separator(frame).pack(fill="x", pady=4)

        ttk.Label(frame, text="Output:").pack(anchor="w")
        output_row = ttk.Frame(frame)
        output_row.pack(fill="both", expand=True)
        scrollbar = ttk.Scrollbar(output_row, orient="vertical")
        self._output = tk.Text(
            output_row,
            height=20,
            font="TkFixedFont",
            wrap="none",
            state="disabled",
            yscrollcommand=scrollbar.set,
        )
        scrollbar.configure(command=self._output.yview)
        scrollbar.pack(side="right", fill="y")
        self._output.pack(side="left", fill="both", expand=True)

        self._refresh()
        root.after(_FRAME_MS, self._frame)
        root.mainloop()

    def _combo(self, ttk, parent, names, selected, width, on_select):
        box = ttk.Combobox(
            parent,
            state="readonly",
            width=width,
            values=[truncate_str(name, _NAME_LIMIT) for name in names],
        )
        box.set(truncate_str(selected, _NAME_LIMIT))
        box.bind("<<ComboboxSelected>>", lambda _event: on_select(box.current()))
        box.pack(side="left")
        return box

    @staticmethod
    def _entry(tk, ttk, parent, label, value):
        ttk.Label(parent, text=label).pack(side="left")
        variable = tk.StringVar(value=value)
        ttk.Entry(parent, textvariable=variable, width=7).pack(side="left", padx=(0, 10))
        return variable

    def _send(self, kind: MessageKind) -> None:
        picker = _PICKER_ID if kind in (MessageKind.PICK_FILE, MessageKind.PICK_FOLDER) else None
        self.state.inbox.put(UiMessage(kind, picker_id=picker))

    def _on_encoder(self, index: int) -> None:
        if 0 <= index < len(self.state.encoder_names):
            self.state.select_encoder(self.state.encoder_names[index])

    def _on_format(self, index: int) -> None:
        if 0 <= index < len(self.state.format_names):
            self.state.selected_format = self.state.format_names[index]

    def _on_pixel_format(self, index: int) -> None:
        if 0 <= index < len(self.state.pixel_format_names):
            self.state.selected_pixel_format = self.state.pixel_format_names[index]

    def _dialog_chooser(self, ask: Callable) -> Callable[[], Optional[str]]:
        """A chooser that, from any thread, has the dialog shown on the UI thread."""

        def choose() -> Optional[str]:
            reply: queue.Queue = queue.Queue(maxsize=1)
            self._dialog_requests.put((ask, reply))
            return reply.get()

        return choose

    def _serve_dialogs(self) -> None:
        import tkinter as tk

        while True:
            try:
                ask, reply = self._dialog_requests.get_nowait()
            except queue.Empty:
                return
            try:
                chosen = ask(parent=self._root)
            except tk.TclError:
                chosen = ""
            reply.put(chosen if isinstance(chosen, str) and chosen else None)

    def _handle_inbox(self) -> None:
        state = self.state
        while True:
            try:
                message = state.inbox.get_nowait()
            except queue.Empty:
                return
            if message.kind is MessageKind.PICK_FILE:
                pick_file(
                    state, _PICKER_ID, self._dialog_chooser(self._filedialog.askopenfilename)
                )
            elif message.kind is MessageKind.PICK_FOLDER:
                pick_folder(
                    state, _PICKER_ID, self._dialog_chooser(self._filedialog.askdirectory)
                )
            else:
                process_message(state, message)

    def _frame(self) -> None:
        state = self.state
        state.bitrate = self._bitrate.get()
        state.constant_rate_factor = self._crf.get()
        state.coding_default = self._preset.get()
        state.gop = self._gop.get()

        self._serve_dialogs()
        state.tick()
        self._handle_inbox()
        self._refresh()
        self._root.after(_FRAME_MS, self._frame)

    def _refresh(self) -> None:
        state = self.state
        self._log_label.configure(text=state.error_message or ALL_GOOD)
        self._file_label.configure(text=path_label(state.file_path1, FILE_PLACEHOLDER))
        self._folder_label.configure(
            text=path_label(state.folder_path1, FOLDER_PLACEHOLDER)
        )
        self._run_button.configure(state="disabled" if state.is_running else "normal")
        if state.is_running and not self._stop_visible:
            self._stop_button.pack(side="right", before=self._run_button)
            self._stop_visible = True
        elif not state.is_running and self._stop_visible:
            self._stop_button.pack_forget()
            self._stop_visible = False

        text = "\n".join(state.output_lines)
        if text != self._shown_output:
            self._output.configure(state="normal")
            self._output.delete("1.0", "end")
            self._output.insert("1.0", text)
            self._output.see("end")
            self._output.configure(state="disabled")
            self._shown_output = text


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Start the converter window."""
    parser = argparse.ArgumentParser(
        prog="freebird-converter",
        description="Convert media files between formats with ffmpeg.",
    )
    parser.parse_args(argv)

    if sys.platform == "win32":
        try:
            ensure_ffmpeg()
        except (InstallError, OSError) as exc:
            print(
                "Opus, something went wrong! The program will continue to run "
                f"but it may go wrong. ({exc})",
                file=sys.stderr,
            )

    state = ConverterState()
    try:
        state.load_ffmpeg_data()
    except OSError as exc:
        state.error_message = f"Failed to query ffmpeg: {exc}"
    ConverterWindow(state).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())