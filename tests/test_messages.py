import dataclasses
from pathlib import Path

import pytest

from freebird_converter.messages import MessageKind, UiMessage


def test_messages_with_same_fields_are_equal():
    assert UiMessage(MessageKind.PICK_FILE, picker_id=1) == UiMessage(
        MessageKind.PICK_FILE, picker_id=1
    )
    assert UiMessage(MessageKind.PICK_FILE, picker_id=1) != UiMessage(
        MessageKind.PICK_FOLDER, picker_id=1
    )


def test_unused_fields_default_to_none():
    message = UiMessage(MessageKind.START_FFMPEG)
    assert (message.picker_id, message.path, message.data, message.error) == (
        None,
        None,
        None,
        None,
    )


def test_path_is_normalised_to_pathlib(tmp_path):
    message = UiMessage(MessageKind.FILE_SELECTED, picker_id=2, path=str(tmp_path))
    assert message.path == Path(tmp_path)
    assert isinstance(message.path, Path)


def test_messages_are_immutable():
    message = UiMessage(MessageKind.STOP_FFMPEG)
    with pytest.raises(dataclasses.FrozenInstanceError):
        message.kind = MessageKind.START_FFMPEG
    assert message.kind is MessageKind.STOP_FFMPEG


def test_loaded_result_cannot_hold_data_and_error():
    with pytest.raises(ValueError):
        UiMessage(MessageKind.DATA_LOADED, data="ok", error="failed")


def test_loaded_result_holds_error():
    message = UiMessage(MessageKind.DATA_LOADED, error="failed")
    assert message.error == "failed"
    assert message.data is None


def test_every_kind_is_distinct():
    messages = [
        UiMessage(kind, error="failed")
        if kind is MessageKind.DATA_LOADED
        else UiMessage(kind)
        for kind in MessageKind
    ]
    assert len(messages) == 10
    assert len({message.kind for message in messages}) == len(messages)
    assert len({message.kind.value for message in messages}) == len(messages)