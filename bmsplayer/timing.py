"""Conversion of chart positions (measure + fraction) into milliseconds."""

from __future__ import annotations

from dataclasses import dataclass
from fractions import Fraction

from bmsplayer.chart import Chart, TimingData

_MS_PER_MINUTE = 60000.0
_BEATS_PER_MEASURE = 4.0
_STOP_UNITS_PER_MEASURE = 192.0


@dataclass(frozen=True)
class _TimingEvent:
    measure: int
    position: Fraction
    order: int  # BPM changes (0) come before stops (1) at the same position
    bpm: float = 0.0
    duration_192: int = 0

    @property
    def is_stop(self) -> bool:
        return self.order == 1

    def sort_key(self) -> tuple[int, Fraction, int]:
        return (self.measure, self.position, self.order)


def compare_fractions(a: Fraction, b: Fraction) -> int:
    """Three-way comparison: -1 if a < b, 0 if equal, 1 if a > b."""
    a, b = Fraction(a), Fraction(b)
    return (a > b) - (a < b)


def _build_timing_events(timing: TimingData) -> list[_TimingEvent]:
    events = [
        _TimingEvent(change.measure, Fraction(change.position), 0, bpm=change.bpm)
        for change in timing.bpm_changes
    ]
    events.extend(
        _TimingEvent(stop.measure, Fraction(stop.position), 1, duration_192=stop.duration_192)
        for stop in timing.stops
    )
    events.sort(key=_TimingEvent.sort_key)
    return events


def _measure_length(measure: int, timing: TimingData) -> float:
    return next(
        (m.length for m in timing.measure_lengths if m.measure == measure),
        1.0,
    )


def _interval_ms(
    from_measure: int,
    from_position: Fraction,
    to_measure: int,
    to_position: Fraction,
    bpm: float,
    timing: TimingData,
) -> float:
    """Time between two positions at a constant BPM."""
    if from_measure == to_measure and from_position == to_position:
        return 0.0

    ms_per_beat = _MS_PER_MINUTE / bpm
    from_f = float(from_position)
    to_f = float(to_position)

    if from_measure == to_measure:
        length = _measure_length(from_measure, timing)
        return _BEATS_PER_MEASURE * length * (to_f - from_f) * ms_per_beat

    beats = _BEATS_PER_MEASURE * _measure_length(from_measure, timing) * (1.0 - from_f)
    beats += sum(
        _BEATS_PER_MEASURE * _measure_length(m, timing)
        for m in range(from_measure + 1, to_measure)
    )
    beats += _BEATS_PER_MEASURE * _measure_length(to_measure, timing) * to_f
    return beats * ms_per_beat


def calculate_time_ms(measure: int, position: Fraction, timing: TimingData) -> float:
    """Milliseconds from the chart start to the given measure and position."""
    position = Fraction(position)
    time_ms = 0.0
    current_bpm = timing.initial_bpm
    current_measure = 0
    current_position = Fraction(0)

    for event in _build_timing_events(timing):
        if event.measure > measure or (
            event.measure == measure and position < event.position
        ):
            break

        time_ms += _interval_ms(
            current_measure,
            current_position,
            event.measure,
            event.position,
            current_bpm,
            timing,
        )

        if event.is_stop:
            stop_beats = event.duration_192 / _STOP_UNITS_PER_MEASURE * _BEATS_PER_MEASURE
            time_ms += stop_beats * (_MS_PER_MINUTE / current_bpm)
        else:
            current_bpm = event.bpm

        current_measure = event.measure
        current_position = event.position

    time_ms += _interval_ms(
        current_measure, current_position, measure, position, current_bpm, timing
    )
    return time_ms


def measure_start_times(chart: Chart) -> list[float]:
    """Start time in milliseconds of every measure up to the chart's last one."""
    zero = Fraction(0)
    return [
        calculate_time_ms(m, zero, chart.timing_data)
        for m in range(chart.max_measure() + 1)
    ]


def beats_to_ms(beats: float, bpm: float) -> float:
    """Duration of a number of beats at the given BPM."""
    return beats * (_MS_PER_MINUTE / bpm)


def ms_to_beats(ms: float, bpm: float) -> float:
    """Number of beats that fit into a duration at the given BPM."""
    return ms / (_MS_PER_MINUTE / bpm)