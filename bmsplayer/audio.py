"""Keysound file lookup, volume conversion and BGM scheduling."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from bmsplayer.chart import Chart

AUDIO_EXTENSIONS = ("wav", "ogg", "mp3", "flac")
SILENCE_DB = -60.0
IDENTITY_DB = 0.0
DEFAULT_LOOKAHEAD_MS = 100.0


def find_audio_file(base_path: str | Path, filename: str) -> Path | None:
    """Locate a keysound, trying a lower-case name and other audio extensions."""
    base = Path(base_path)

    candidate = base / filename
    if candidate.exists():
        return candidate

    candidate = base / filename.lower()
    if candidate.exists():
        return candidate

    stem = Path(filename).stem
    if not stem:
        return None

    for ext in AUDIO_EXTENSIONS:
        alt_name = f"{stem}.{ext}"
        for name in (alt_name, alt_name.lower()):
            candidate = base / name
            if candidate.exists():
                return candidate

    return None


def amplitude_to_decibels(amplitude: float) -> float:
    """Convert a linear amplitude in 0.0-1.0 to decibels."""
    if amplitude <= 0.0:
        return SILENCE_DB
    if amplitude >= 1.0:
        return IDENTITY_DB
    return 20.0 * math.log10(amplitude)


@dataclass
class KeysoundLoadResult:
    """Outcome of loading a set of keysounds."""

    loaded: int = 0
    failed: list[tuple[int, str, str]] = field(default_factory=list)

    def total(self) -> int:
        """Number of keysounds attempted."""
        return self.loaded + len(self.failed)

    def all_loaded(self) -> bool:
        """Whether every keysound loaded."""
        return not self.failed


class BgmPlayer(Protocol):
    """Anything that can schedule a keysound at an audio clock time."""

    def play_bgm_at(self, keysound_id: int, time_ms: float) -> object: ...


class AudioScheduler:
    """Hands BGM events to the audio backend shortly before they are due."""

    def __init__(self, lookahead_ms: float = DEFAULT_LOOKAHEAD_MS) -> None:
        self.lookahead_ms = lookahead_ms
        self._bgm_index = 0

    def reset(self) -> None:
        """Start scheduling again from the first BGM event."""
        self._bgm_index = 0

    def update(
        self,
        chart: Chart,
        audio: BgmPlayer,
        current_time_ms: float,
        start_delay_ms: float,
    ) -> None:
        """Schedule every pending BGM event due within the lookahead window."""
        schedule_until = current_time_ms + self.lookahead_ms
        events = chart.bgm_events
        while self._bgm_index < len(events):
            event = events[self._bgm_index]
            if event.time_ms > schedule_until:
                break
            audio.play_bgm_at(event.keysound_id, event.time_ms + start_delay_ms)
            self._bgm_index += 1