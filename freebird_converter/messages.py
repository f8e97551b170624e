"""Messages passed from the user interface to the application logic."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


class MessageKind(enum.Enum):
    """What a UI message asks for or reports."""

    INCREMENT = enum.auto()
    DECREMENT = enum.auto()
    LOAD_DATA = enum.auto()
    DATA_LOADED = enum.auto()
    PICK_FILE = enum.auto()
    PICK_FOLDER = enum.auto()
    FILE_SELECTED = enum.auto()
    FOLDER_SELECTED = enum.auto()
    START_FFMPEG = enum.auto()
    STOP_FFMPEG = enum.auto()


@dataclass(frozen=True)
class UiMessage:
    """A single message; fields that do not apply to its kind stay None.

    A DATA_LOADED message carries either ``data`` or ``error``.
    """

    kind: MessageKind
    picker_id: Optional[int] = None
    path: Optional[Path] = None
    data: Optional[str] = None
    error: Optional[str] = None

    def __post_init__(self) -> None:
        if self.data is not None and self.error is not None:
            raise ValueError("a loaded result holds either data or an error, not both")
        if self.path is not None and not isinstance(self.path, Path):
            object.__setattr__(self, "path", Path(self.path))