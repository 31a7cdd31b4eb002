from fractions import Fraction

import pytest

from bmsplayer.chart import (
    BgmEvent,
    BpmChange,
    Chart,
    MeasureLength,
    StopEvent,
    TimingData,
)
from bmsplayer.timing import (
    beats_to_ms,
    calculate_time_ms,
    compare_fractions,
    measure_start_times,
    ms_to_beats,
)


def make_timing(initial_bpm, bpm_changes=(), stops=(), measure_lengths=()):
    return TimingData(
        initial_bpm=initial_bpm,
        bpm_changes=list(bpm_changes),
        stops=list(stops),
        measure_lengths=list(measure_lengths),
    )


def test_basic_timing():
    timing = make_timing(120.0)
    assert calculate_time_ms(0, Fraction(0), timing) == pytest.approx(0.0, abs=0.001)
    assert calculate_time_ms(1, Fraction(0), timing) == pytest.approx(2000.0, abs=0.001)
    assert calculate_time_ms(0, Fraction(1, 2), timing) == pytest.approx(1000.0, abs=0.001)


def test_bpm_change_at_position_zero():
    timing = make_timing(120.0, [BpmChange(1, Fraction(0), 240.0)])
    assert calculate_time_ms(1, Fraction(0), timing) == pytest.approx(2000.0, abs=0.001)
    assert calculate_time_ms(2, Fraction(0), timing) == pytest.approx(3000.0, abs=0.001)


def test_bpm_change_mid_measure():
    timing = make_timing(120.0, [BpmChange(0, Fraction(1, 2), 240.0)])
    assert calculate_time_ms(0, Fraction(1, 2), timing) == pytest.approx(1000.0, abs=0.001)
    assert calculate_time_ms(1, Fraction(0), timing) == pytest.approx(1500.0, abs=0.001)


def test_stop_event():
    timing = make_timing(120.0, stops=[StopEvent(0, Fraction(1, 2), 48)])
    assert calculate_time_ms(0, Fraction(3, 4), timing) == pytest.approx(2000.0, abs=0.001)


def test_multiple_bpm_changes_same_measure():
    timing = make_timing(
        120.0,
        [
            BpmChange(0, Fraction(1, 4), 180.0),
            BpmChange(0, Fraction(1, 2), 240.0),
        ],
    )
    expected = 500.0 + (60000.0 / 180.0) + 500.0
    assert calculate_time_ms(1, Fraction(0), timing) == pytest.approx(expected, abs=0.01)


def test_bpm_changes_given_out_of_order_are_sorted():
    timing = make_timing(
        120.0,
        [
            BpmChange(0, Fraction(1, 2), 240.0),
            BpmChange(0, Fraction(1, 4), 180.0),
        ],
    )
    expected = 500.0 + (60000.0 / 180.0) + 500.0
    assert calculate_time_ms(1, Fraction(0), timing) == pytest.approx(expected, abs=0.01)


def test_measure_length():
    timing = make_timing(120.0, measure_lengths=[MeasureLength(0, 0.5)])
    assert calculate_time_ms(1, Fraction(0), timing) == pytest.approx(1000.0, abs=0.001)


def test_fraction_comparison():
    a = Fraction(1, 4)
    b = Fraction(2, 8)
    assert compare_fractions(a, b) == 0
    c = Fraction(1, 3)
    assert compare_fractions(a, c) == -1
    assert compare_fractions(c, a) == 1


def test_bpm_change_and_stop_at_same_position():
    timing = make_timing(
        120.0,
        [BpmChange(0, Fraction(1, 2), 240.0)],
        [StopEvent(0, Fraction(1, 2), 48)],
    )
    assert calculate_time_ms(1, Fraction(0), timing) == pytest.approx(1750.0, abs=0.01)


def test_stop_given_before_bpm_change_still_applies_after_it():
    timing = make_timing(
        120.0,
        stops=[StopEvent(0, Fraction(1, 2), 48)],
        bpm_changes=[BpmChange(0, Fraction(1, 2), 240.0)],
    )
    assert calculate_time_ms(1, Fraction(0), timing) == pytest.approx(1750.0, abs=0.01)


def test_time_is_monotonic_over_measures():
    timing = make_timing(
        150.0,
        [BpmChange(2, Fraction(1, 3), 90.0)],
        [StopEvent(1, Fraction(1, 2), 96)],
        [MeasureLength(3, 0.75)],
    )
    times = [calculate_time_ms(m, Fraction(0), timing) for m in range(6)]
    assert times == sorted(times)
    assert len(set(times)) == len(times)


def test_measure_start_times():
    chart = Chart(
        timing_data=make_timing(120.0),
        bgm_events=[BgmEvent(2, Fraction(0), 4000.0, 1)],
    )
    starts = measure_start_times(chart)
    assert starts == pytest.approx([0.0, 2000.0, 4000.0])


def test_measure_start_times_empty_chart():
    chart = Chart(timing_data=make_timing(120.0))
    assert measure_start_times(chart) == [0.0]


def test_beats_to_ms():
    assert beats_to_ms(1.0, 120.0) == pytest.approx(500.0)
    assert beats_to_ms(4.0, 120.0) == pytest.approx(2000.0)


def test_beats_ms_round_trip():
    for beats, bpm in [(1.0, 120.0), (3.5, 173.0), (0.25, 60.0)]:
        assert ms_to_beats(beats_to_ms(beats, bpm), bpm) == pytest.approx(beats)