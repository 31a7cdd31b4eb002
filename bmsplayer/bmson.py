"""Reading of the JSON-based BMSON chart format."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from fractions import Fraction
from typing import Any

from bmsplayer.chart import (
    BgaEvent,
    BgaLayer,
    BgmEvent,
    BpmChange,
    Chart,
    LnType,
    Metadata,
    Note,
    NoteChannel,
    NoteType,
    PlayMode,
    StopEvent,
    TimingData,
)
from bmsplayer.errors import ParseError

TICKS_PER_BEAT = 240
TICKS_PER_MEASURE = TICKS_PER_BEAT * 4

DEFAULT_JUDGE_RANK = 100
DEFAULT_TOTAL = 300.0

_MISSING = object()


def _describe(value: Any) -> str:
    return type(value).__name__


def _get(data: dict[str, Any], key: str, context: str, default: Any = _MISSING) -> Any:
    if key in data:
        return data[key]
    if default is _MISSING:
        raise ParseError(f"missing field `{key}` in {context}")
    return default


def _as_object(value: Any, context: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise ParseError(f"{context}: expected an object, got {_describe(value)}")
    return value


def _as_list(value: Any, context: str) -> list[Any]:
    if not isinstance(value, list):
        raise ParseError(f"{context}: expected an array, got {_describe(value)}")
    return value


def _as_str(value: Any, context: str) -> str:
    if not isinstance(value, str):
        raise ParseError(f"{context}: expected a string, got {_describe(value)}")
    return value


def _as_int(value: Any, context: str, *, unsigned: bool = False) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ParseError(f"{context}: expected an integer, got {_describe(value)}")
    if unsigned and value < 0:
        raise ParseError(f"{context}: expected a non-negative integer, got {value}")
    return value


def _as_float(value: Any, context: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ParseError(f"{context}: expected a number, got {_describe(value)}")
    return float(value)


def _as_bool(value: Any, context: str) -> bool:
    if not isinstance(value, bool):
        raise ParseError(f"{context}: expected a boolean, got {_describe(value)}")
    return value


@dataclass
class BmsonInfo:
    """Chart metadata block."""

    title: str
    init_bpm: float
    subtitle: str = ""
    artist: str = ""
    subartists: list[str] = field(default_factory=list)
    genre: str = ""
    mode_hint: str = ""
    chart_name: str = ""
    level: int = 0
    total: float | None = None
    judge_rank: int | None = None

    @classmethod
    def from_dict(cls, data: Any) -> BmsonInfo:
        ctx = "info"
        data = _as_object(data, ctx)
        total = _get(data, "total", ctx, None)
        judge_rank = _get(data, "judge_rank", ctx, None)
        return cls(
            title=_as_str(_get(data, "title", ctx), "info.title"),
            init_bpm=_as_float(_get(data, "init_bpm", ctx), "info.init_bpm"),
            subtitle=_as_str(_get(data, "subtitle", ctx, ""), "info.subtitle"),
            artist=_as_str(_get(data, "artist", ctx, ""), "info.artist"),
            subartists=[
                _as_str(s, "info.subartists")
                for s in _as_list(_get(data, "subartists", ctx, []), "info.subartists")
            ],
            genre=_as_str(_get(data, "genre", ctx, ""), "info.genre"),
            mode_hint=_as_str(_get(data, "mode_hint", ctx, ""), "info.mode_hint"),
            chart_name=_as_str(_get(data, "chart_name", ctx, ""), "info.chart_name"),
            level=_as_int(_get(data, "level", ctx, 0), "info.level", unsigned=True),
            total=None if total is None else _as_float(total, "info.total"),
            judge_rank=(
                None
                if judge_rank is None
                else _as_int(judge_rank, "info.judge_rank", unsigned=True)
            ),
        )


@dataclass
class BarLine:
    """Bar line marker."""

    y: int

    @classmethod
    def from_dict(cls, data: Any) -> BarLine:
        data = _as_object(data, "lines[]")
        return cls(y=_as_int(_get(data, "y", "lines[]"), "lines[].y"))


@dataclass
class BmsonBpmEvent:
    """BPM change at a tick position."""

    y: int
    bpm: float

    @classmethod
    def from_dict(cls, data: Any) -> BmsonBpmEvent:
        ctx = "bpm_events[]"
        data = _as_object(data, ctx)
        return cls(
            y=_as_int(_get(data, "y", ctx), f"{ctx}.y"),
            bpm=_as_float(_get(data, "bpm", ctx), f"{ctx}.bpm"),
        )


@dataclass
class BmsonStopEvent:
    """Scroll stop at a tick position, lasting a number of ticks."""

    y: int
    duration: int

    @classmethod
    def from_dict(cls, data: Any) -> BmsonStopEvent:
        ctx = "stop_events[]"
        data = _as_object(data, ctx)
        return cls(
            y=_as_int(_get(data, "y", ctx), f"{ctx}.y"),
            duration=_as_int(_get(data, "duration", ctx), f"{ctx}.duration"),
        )


@dataclass
class BmsonNote:
    """A note: lane ``x`` (0 is BGM), tick ``y``, long-note length ``l``."""

    x: int
    y: int
    l: int = 0  # noqa: E741
    c: bool = False

    @classmethod
    def from_dict(cls, data: Any) -> BmsonNote:
        ctx = "notes[]"
        data = _as_object(data, ctx)
        return cls(
            x=_as_int(_get(data, "x", ctx), f"{ctx}.x"),
            y=_as_int(_get(data, "y", ctx), f"{ctx}.y"),
            l=_as_int(_get(data, "l", ctx, 0), f"{ctx}.l"),
            c=_as_bool(_get(data, "c", ctx, False), f"{ctx}.c"),
        )


@dataclass
class SoundChannel:
    """A sound file and the notes that play it."""

    name: str
    notes: list[BmsonNote] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> SoundChannel:
        ctx = "sound_channels[]"
        data = _as_object(data, ctx)
        return cls(
            name=_as_str(_get(data, "name", ctx), f"{ctx}.name"),
            notes=[
                BmsonNote.from_dict(n)
                for n in _as_list(_get(data, "notes", ctx), f"{ctx}.notes")
            ],
        )


@dataclass
class BgaHeader:
    """Image file declaration."""

    id: int
    name: str

    @classmethod
    def from_dict(cls, data: Any) -> BgaHeader:
        ctx = "bga_header[]"
        data = _as_object(data, ctx)
        return cls(
            id=_as_int(_get(data, "id", ctx), f"{ctx}.id", unsigned=True),
            name=_as_str(_get(data, "name", ctx), f"{ctx}.name"),
        )


@dataclass
class BmsonBgaEvent:
    """Image change at a tick position."""

    y: int
    id: int

    @classmethod
    def from_dict(cls, data: Any) -> BmsonBgaEvent:
        ctx = "bga event"
        data = _as_object(data, ctx)
        return cls(
            y=_as_int(_get(data, "y", ctx), f"{ctx}.y"),
            id=_as_int(_get(data, "id", ctx), f"{ctx}.id", unsigned=True),
        )


@dataclass
class BgaData:
    """Background animation block."""

    bga_header: list[BgaHeader] = field(default_factory=list)
    bga_events: list[BmsonBgaEvent] = field(default_factory=list)
    layer_events: list[BmsonBgaEvent] = field(default_factory=list)
    poor_events: list[BmsonBgaEvent] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> BgaData:
        ctx = "bga"
        data = _as_object(data, ctx)

        def events(key: str) -> list[BmsonBgaEvent]:
            items = _as_list(_get(data, key, ctx, []), f"{ctx}.{key}")
            return [BmsonBgaEvent.from_dict(e) for e in items]

        headers = _as_list(_get(data, "bga_header", ctx, []), f"{ctx}.bga_header")
        return cls(
            bga_header=[BgaHeader.from_dict(h) for h in headers],
            bga_events=events("bga_events"),
            layer_events=events("layer_events"),
            poor_events=events("poor_events"),
        )


@dataclass
class Bmson:
    """A whole BMSON document."""

    version: str
    info: BmsonInfo
    sound_channels: list[SoundChannel] = field(default_factory=list)
    lines: list[BarLine] = field(default_factory=list)
    bpm_events: list[BmsonBpmEvent] = field(default_factory=list)
    stop_events: list[BmsonStopEvent] = field(default_factory=list)
    bga: BgaData | None = None

    @classmethod
    def from_dict(cls, data: Any) -> Bmson:
        """Build a document from decoded JSON, raising ParseError on bad shape."""
        ctx = "document"
        data = _as_object(data, ctx)
        bga = _get(data, "bga", ctx, None)
        return cls(
            version=_as_str(_get(data, "version", ctx), "version"),
            info=BmsonInfo.from_dict(_get(data, "info", ctx)),
            sound_channels=[
                SoundChannel.from_dict(c)
                for c in _as_list(_get(data, "sound_channels", ctx), "sound_channels")
            ],
            lines=[
                BarLine.from_dict(b)
                for b in _as_list(_get(data, "lines", ctx, []), "lines")
            ],
            bpm_events=[
                BmsonBpmEvent.from_dict(e)
                for e in _as_list(_get(data, "bpm_events", ctx, []), "bpm_events")
            ],
            stop_events=[
                BmsonStopEvent.from_dict(e)
                for e in _as_list(_get(data, "stop_events", ctx, []), "stop_events")
            ],
            bga=None if bga is None else BgaData.from_dict(bga),
        )

    @classmethod
    def from_json(cls, text: str) -> Bmson:
        """Parse BMSON text."""
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ParseError(str(exc)) from exc
        return cls.from_dict(data)

    def to_chart(self) -> Chart:
        """Convert to the player's chart model."""
        play_mode = self.detect_play_mode()
        timing_data = self._build_timing_data()
        metadata = self._build_metadata(play_mode)
        notes, bgm_events = self._convert_notes(play_mode)
        bga_events = self._convert_bga_events()
        return Chart(
            metadata=metadata,
            timing_data=timing_data,
            notes=notes,
            bgm_events=bgm_events,
            bga_events=bga_events,
        )

    def collect_wav_files(self) -> dict[int, str]:
        """Keysound id (channel index) to sound file name."""
        return {i: channel.name for i, channel in enumerate(self.sound_channels)}

    def collect_bmp_files(self) -> dict[int, str]:
        """Image id to image file name."""
        if self.bga is None:
            return {}
        return {header.id: header.name for header in self.bga.bga_header}

    def detect_play_mode(self) -> PlayMode:
        """Play mode implied by the mode hint."""
        if self.info.mode_hint in ("popn-5k", "popn-9k"):
            return PlayMode.PMS_9KEY
        return PlayMode.BMS_7KEY

    def _ms(self, ticks: int) -> float:
        return ticks_to_ms(ticks, self.info.init_bpm, self.bpm_events)

    def _build_timing_data(self) -> TimingData:
        bpm_changes = []
        for event in self.bpm_events:
            measure, position = ticks_to_measure_position(event.y)
            bpm_changes.append(BpmChange(measure, position, event.bpm))

        stops = []
        for event in self.stop_events:
            measure, position = ticks_to_measure_position(event.y)
            duration_192 = max(0, int(event.duration / TICKS_PER_BEAT * 48.0))
            stops.append(StopEvent(measure, position, duration_192))

        return TimingData(
            initial_bpm=self.info.init_bpm,
            bpm_changes=bpm_changes,
            stops=stops,
            measure_lengths=[],
        )

    def _build_metadata(self, play_mode: PlayMode) -> Metadata:
        judge_rank = (
            DEFAULT_JUDGE_RANK if self.info.judge_rank is None else self.info.judge_rank
        )
        if judge_rank <= 50:
            rank = 0
        elif judge_rank <= 75:
            rank = 1
        elif judge_rank <= 100:
            rank = 2
        else:
            rank = 3

        return Metadata(
            title=self.info.title,
            subtitle=self.info.subtitle or None,
            artist=self.info.artist,
            genre=self.info.genre,
            bpm=self.info.init_bpm,
            play_level=self.info.level,
            rank=rank,
            total=DEFAULT_TOTAL if self.info.total is None else self.info.total,
            ln_type=LnType.CN,
            play_mode=play_mode,
        )

    def _convert_notes(self, play_mode: PlayMode) -> tuple[list[Note], list[BgmEvent]]:
        notes: list[Note] = []
        bgm_events: list[BgmEvent] = []

        for keysound_id, channel in enumerate(self.sound_channels):
            for bmson_note in channel.notes:
                measure, position = ticks_to_measure_position(bmson_note.y)
                time_ms = self._ms(bmson_note.y)

                if bmson_note.x == 0:
                    bgm_events.append(BgmEvent(measure, position, time_ms, keysound_id))
                    continue

                note_channel = x_to_channel(bmson_note.x, play_mode)
                if bmson_note.l > 0:
                    end_tick = bmson_note.y + bmson_note.l
                    end_time_ms = self._ms(end_tick)
                    end_measure, end_position = ticks_to_measure_position(end_tick)
                    notes.append(
                        Note(
                            measure,
                            position,
                            time_ms,
                            note_channel,
                            keysound_id,
                            NoteType.LONG_START,
                            end_time_ms,
                        )
                    )
                    notes.append(
                        Note(
                            end_measure,
                            end_position,
                            end_time_ms,
                            note_channel,
                            keysound_id,
                            NoteType.LONG_END,
                        )
                    )
                else:
                    notes.append(
                        Note(
                            measure,
                            position,
                            time_ms,
                            note_channel,
                            keysound_id,
                            NoteType.NORMAL,
                        )
                    )

        notes.sort(key=lambda n: n.time_ms)
        bgm_events.sort(key=lambda b: b.time_ms)
        return notes, bgm_events

    def _convert_bga_events(self) -> list[BgaEvent]:
        if self.bga is None:
            return []
        groups = (
            (self.bga.bga_events, BgaLayer.BASE),
            (self.bga.layer_events, BgaLayer.OVERLAY),
            (self.bga.poor_events, BgaLayer.POOR),
        )
        events = [
            BgaEvent(self._ms(event.y), event.id, layer)
            for group, layer in groups
            for event in group
        ]
        events.sort(key=lambda e: e.time_ms)
        return events


def ticks_to_measure_position(ticks: int) -> tuple[int, Fraction]:
    """Split a tick count into a measure number and a fraction of the measure."""
    measure, remainder = divmod(ticks, TICKS_PER_MEASURE)
    return measure, Fraction(remainder, TICKS_PER_MEASURE)


def ticks_to_ms(
    target_ticks: int, init_bpm: float, bpm_events: list[BmsonBpmEvent]
) -> float:
    """Milliseconds from the start to a tick position, following BPM changes."""

    def ms_per_tick(bpm: float) -> float:
        return 60000.0 / bpm / TICKS_PER_BEAT

    time_ms = 0.0
    current_tick = 0
    current_bpm = init_bpm

    for event in sorted(bpm_events, key=lambda e: e.y):
        if event.y >= target_ticks:
            break
        time_ms += (event.y - current_tick) * ms_per_tick(current_bpm)
        current_tick = event.y
        current_bpm = event.bpm

    time_ms += (target_ticks - current_tick) * ms_per_tick(current_bpm)
    return time_ms


_BEAT_7K_LANES = {
    1: NoteChannel.KEY1,
    2: NoteChannel.KEY2,
    3: NoteChannel.KEY3,
    4: NoteChannel.KEY4,
    5: NoteChannel.KEY5,
    6: NoteChannel.KEY6,
    7: NoteChannel.KEY7,
    8: NoteChannel.SCRATCH,
}

_POPN_9K_LANES = {x: NoteChannel(x) for x in range(1, 10)}

_BEAT_14K_LANES = {
    1: NoteChannel.SCRATCH,
    **{x: NoteChannel(x - 1) for x in range(2, 16)},
    16: NoteChannel.SCRATCH2,
}

_LANES = {
    PlayMode.BMS_7KEY: ("beat-7k", _BEAT_7K_LANES),
    PlayMode.PMS_9KEY: ("popn-9k", _POPN_9K_LANES),
    PlayMode.DP_14KEY: ("beat-14k", _BEAT_14K_LANES),
}


def x_to_channel(x: int, play_mode: PlayMode) -> NoteChannel:
    """Map a BMSON lane number to a note channel, raising ParseError if invalid."""
    mode_name, lanes = _LANES[play_mode]
    try:
        return lanes[x]
    except KeyError:
        raise ParseError(f"Invalid BMSON lane for {mode_name}: {x}") from None