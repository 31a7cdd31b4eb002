from fractions import Fraction

import pytest

from bmsplayer.audio import (
    SILENCE_DB,
    AudioScheduler,
    KeysoundLoadResult,
    amplitude_to_decibels,
    find_audio_file,
)
from bmsplayer.chart import BgmEvent, Chart


class RecordingAudio:
    def __init__(self):
        self.calls = []

    def play_bgm_at(self, keysound_id, time_ms):
        self.calls.append((keysound_id, time_ms))


def make_chart(times):
    return Chart(
        bgm_events=[
            BgmEvent(0, Fraction(0), t, i + 1) for i, t in enumerate(times)
        ]
    )


def test_find_audio_file_exact(tmp_path):
    (tmp_path / "kick.wav").write_bytes(b"")
    assert find_audio_file(tmp_path, "kick.wav") == tmp_path / "kick.wav"


def test_find_audio_file_lowercase(tmp_path):
    (tmp_path / "kick.wav").write_bytes(b"")
    found = find_audio_file(tmp_path, "KICK.WAV")
    assert found is not None and found.exists()
    assert found.name.lower() == "kick.wav"


def test_find_audio_file_alternate_extension(tmp_path):
    (tmp_path / "snare.ogg").write_bytes(b"")
    assert find_audio_file(tmp_path, "snare.wav") == tmp_path / "snare.ogg"


def test_find_audio_file_missing(tmp_path):
    (tmp_path / "other.wav").write_bytes(b"")
    assert find_audio_file(tmp_path, "absent.wav") is None


def test_amplitude_bounds():
    assert amplitude_to_decibels(0.0) == SILENCE_DB
    assert amplitude_to_decibels(-0.5) == SILENCE_DB
    assert amplitude_to_decibels(1.0) == 0.0
    assert amplitude_to_decibels(2.0) == 0.0


def test_amplitude_tenth_is_minus_twenty():
    assert amplitude_to_decibels(0.1) == pytest.approx(-20.0)


def test_amplitude_is_increasing():
    values = [amplitude_to_decibels(a) for a in (0.05, 0.2, 0.5, 0.9)]
    assert values == sorted(values)
    assert all(v < 0.0 for v in values)


def test_keysound_load_result():
    result = KeysoundLoadResult(loaded=3, failed=[(1, "a.wav", "File not found")])
    assert result.total() == 4
    assert result.all_loaded() is False
    assert KeysoundLoadResult(loaded=2).all_loaded() is True
    assert KeysoundLoadResult().total() == 0


def test_scheduler_respects_lookahead():
    chart = make_chart([0.0, 50.0, 150.0, 300.0])
    audio = RecordingAudio()
    scheduler = AudioScheduler()
    scheduler.update(chart, audio, 0.0, 1000.0)
    assert audio.calls == [(1, 1000.0), (2, 1050.0)]

    scheduler.update(chart, audio, 100.0, 1000.0)
    assert audio.calls[2:] == [(3, 1150.0)]


def test_scheduler_schedules_each_event_once():
    chart = make_chart([0.0, 50.0, 150.0, 300.0])
    audio = RecordingAudio()
    scheduler = AudioScheduler()
    for now in (0.0, 0.0, 500.0, 500.0, 1000.0):
        scheduler.update(chart, audio, now, 0.0)
    assert [kid for kid, _ in audio.calls] == [1, 2, 3, 4]


def test_scheduler_reset_replays_events():
    chart = make_chart([0.0, 400.0])
    audio = RecordingAudio()
    scheduler = AudioScheduler()
    scheduler.update(chart, audio, 1000.0, 0.0)
    scheduler.reset()
    scheduler.update(chart, audio, 1000.0, 0.0)
    assert audio.calls == [(1, 0.0), (2, 400.0), (1, 0.0), (2, 400.0)]


def test_scheduler_empty_chart():
    audio = RecordingAudio()
    AudioScheduler().update(Chart(), audio, 0.0, 0.0)
    assert audio.calls == []