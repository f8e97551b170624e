"""Handling UI messages: file and folder dialogs, starting and stopping ffmpeg."""

from __future__ import annotations

import os
import queue
import threading
from pathlib import Path
from typing import Callable, Optional, Union

from .messages import MessageKind, UiMessage
from .service import start_ffmpeg, stop_ffmpeg
from .state import ConverterState

ChosenPath = Optional[Union[str, "os.PathLike[str]"]]
Chooser = Callable[[], ChosenPath]

_DEFAULT_PICKER_ID = 1


def _choose_file_with_tk() -> ChosenPath:
    import tkinter
    from tkinter import filedialog

    root = tkinter.Tk()
    root.withdraw()
    try:
        chosen = filedialog.askopenfilename(parent=root)
    finally:
        root.destroy()
    return chosen or None


def _choose_folder_with_tk() -> ChosenPath:
    import tkinter
    from tkinter import filedialog

    root = tkinter.Tk()
    root.withdraw()
    try:
        chosen = filedialog.askdirectory(parent=root)
    finally:
        root.destroy()
    return chosen or None


def _run_chooser(chooser: Chooser, channel: queue.Queue) -> None:
    chosen = chooser()
    if chosen:
        channel.put(Path(chosen))


def _start_picker(chooser: Chooser) -> tuple[queue.Queue, threading.Thread]:
    channel: queue.Queue = queue.Queue(maxsize=1)
    worker = threading.Thread(target=_run_chooser, args=(chooser, channel), daemon=True)
    return channel, worker


def pick_file(
    state: ConverterState, picker_id: int, chooser: Optional[Chooser] = None
) -> threading.Thread:
    """Open a file dialog in the background; the choice arrives in ``state.file_picker``.

    ``chooser`` blocks until the user decides and returns a path, or None
    when the dialog was cancelled. Returns the thread running it.
    """
    channel, worker = _start_picker(chooser or _choose_file_with_tk)
    state.file_picker = channel
    state.active_picker = picker_id
    worker.start()
    return worker


def pick_folder(
    state: ConverterState, picker_id: int, chooser: Optional[Chooser] = None
) -> threading.Thread:
    """Open a folder dialog in the background; the choice arrives in ``state.folder_picker``.

    ``chooser`` blocks until the user decides and returns a path, or None
    when the dialog was cancelled. Returns the thread running it.
    """
    channel, worker = _start_picker(chooser or _choose_folder_with_tk)
    state.folder_picker = channel
    state.active_folder_picker = picker_id
    worker.start()
    return worker


def process_message(state: ConverterState, message: UiMessage) -> None:
    """Act on one message from the user interface; kinds without a handler are ignored."""
    kind = message.kind
    if kind is MessageKind.PICK_FILE:
        pick_file(state, _DEFAULT_PICKER_ID)
    elif kind is MessageKind.PICK_FOLDER:
        pick_folder(state, _DEFAULT_PICKER_ID)
    elif kind is MessageKind.START_FFMPEG:
        start_ffmpeg(state)
    elif kind is MessageKind.STOP_FFMPEG:
        stop_ffmpeg(state)