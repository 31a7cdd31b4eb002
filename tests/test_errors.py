from pathlib import Path

import pytest

from bmsplayer.errors import (
    BmsError,
    FileReadError,
    InvalidTimingError,
    KeysoundNotFoundError,
    ParseError,
    UnsupportedPlayModeError,
)


def test_file_read_error_keeps_path_and_source():
    cause = OSError("disk gone")
    err = FileReadError("songs/a.bms", cause)
    assert err.path == Path("songs/a.bms")
    assert err.source is cause
    assert str(err).startswith("Failed to read BMS file: ")
    assert str(err).endswith("a.bms")


def test_parse_error_message_contains_detail():
    err = ParseError("unexpected token")
    assert isinstance(err, BmsError)
    assert err.detail == "unexpected token"
    assert str(err).startswith("Failed to parse BMS file: ")
    assert "unexpected token" in str(err)


def test_invalid_timing_message():
    err = InvalidTimingError("negative bpm")
    assert str(err).startswith("Invalid timing data: ")
    assert err.detail == "negative bpm"


def test_keysound_not_found_keeps_id():
    err = KeysoundNotFoundError(42)
    assert err.keysound_id == 42
    assert str(err).startswith("Keysound not found: ")
    assert "42" in str(err)


def test_unsupported_play_mode_is_a_bms_error():
    err = UnsupportedPlayModeError("Pms9Key")
    assert isinstance(err, BmsError)
    assert err.mode == "Pms9Key"
    assert str(err).startswith("Unsupported play mode: ")
    assert "Pms9Key" in str(err)


@pytest.mark.parametrize(
    "error",
    [
        ParseError("bad"),
        InvalidTimingError("bad"),
        KeysoundNotFoundError(1),
        UnsupportedPlayModeError("Dp14Key"),
        FileReadError("x.bms", OSError("gone")),
    ],
)
def test_every_error_is_caught_as_bms_error(error):
    with pytest.raises(BmsError) as info:
        raise error
    assert info.value is error
    assert str(info.value) == str(error)