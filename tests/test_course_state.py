from dataclasses import dataclass

from bmsplayer.course import DanCourse, DanRequirements
from bmsplayer.course_state import CoursePassResult, CourseState, CourseStats
from bmsplayer.grade import DanGrade
from bmsplayer.score import ClearLamp


@dataclass
class _Result:
    chart_path: str = "test.bms"
    title: str = "Test"
    artist: str = "Artist"
    ex_score: int = 1000
    max_combo: int = 100
    pgreat_count: int = 400
    great_count: int = 100
    good_count: int = 10
    bad_count: int = 5
    poor_count: int = 3
    total_notes: int = 500
    clear_lamp: ClearLamp = ClearLamp.HARD
    fast_count: int = 30
    slow_count: int = 20


def make_test_course(requirements=None):
    return DanCourse(
        name="Test Course",
        grade=DanGrade.dan(1),
        charts=["a.bms", "b.bms"],
        gauge_type="Hard",
        requirements=requirements or DanRequirements(),
    )


def test_course_state_progression():
    state = CourseState(make_test_course())
    assert state.current_stage == 0
    assert state.total_stages() == 2
    assert not state.is_completed()
    assert not state.failed

    result = _Result()
    assert state.complete_stage(result, 50.0) is True
    assert state.current_stage == 1
    assert state.gauge_hp == 50.0

    assert state.complete_stage(result, 30.0) is False
    assert state.is_completed()
    assert state.check_requirements() is CoursePassResult.PASSED


def test_course_failure():
    state = CourseState(make_test_course())
    assert state.complete_stage(_Result(), 0.0) is False
    assert state.failed
    assert state.check_requirements() is CoursePassResult.FAILED


def test_stats_accumulation():
    state = CourseState(make_test_course())
    result = _Result()
    state.complete_stage(result, 50.0)
    state.complete_stage(result, 30.0)

    stats = state.total_stats
    assert stats.ex_score == 2000
    assert stats.pgreat_count == 800
    assert stats.total_notes == 1000
    assert stats.max_combo == 100
    assert len(state.stage_results) == 2
    assert state.stage_results[1].end_gauge_hp == 30.0


def test_incomplete_course():
    state = CourseState(make_test_course())
    state.complete_stage(_Result(), 80.0)
    assert state.check_requirements() is CoursePassResult.INCOMPLETE


def test_mark_failed():
    state = CourseState(make_test_course())
    state.mark_failed()
    assert state.check_requirements() is CoursePassResult.FAILED


def test_min_gauge_requirement():
    state = CourseState(make_test_course(DanRequirements(min_gauge=40.0)))
    state.complete_stage(_Result(), 50.0)
    state.complete_stage(_Result(), 30.0)
    assert state.check_requirements() is CoursePassResult.FAILED


def test_max_bad_poor_requirement():
    state = CourseState(make_test_course(DanRequirements(max_bad_poor=15)))
    state.complete_stage(_Result(), 50.0)
    state.complete_stage(_Result(), 50.0)
    assert state.check_requirements() is CoursePassResult.FAILED

    lenient = CourseState(make_test_course(DanRequirements(max_bad_poor=16)))
    lenient.complete_stage(_Result(), 50.0)
    lenient.complete_stage(_Result(), 50.0)
    assert lenient.check_requirements() is CoursePassResult.PASSED


def test_full_combo_requirement():
    state = CourseState(make_test_course(DanRequirements(full_combo=True)))
    state.complete_stage(_Result(), 50.0)
    state.complete_stage(_Result(), 50.0)
    assert state.check_requirements() is CoursePassResult.FAILED

    clean = CourseState(make_test_course(DanRequirements(full_combo=True)))
    clean.complete_stage(_Result(bad_count=0, poor_count=0), 50.0)
    clean.complete_stage(_Result(bad_count=0, poor_count=0), 50.0)
    assert clean.check_requirements() is CoursePassResult.PASSED


def test_set_initial_gauge_hp():
    state = CourseState(make_test_course())
    state.set_initial_gauge_hp(70.0)
    assert state.gauge_hp == 70.0


def test_accuracy_and_rank():
    empty = CourseStats()
    assert empty.accuracy() == 0.0
    assert empty.rank() == "F"

    perfect = CourseStats()
    perfect.add_result(_Result(ex_score=1000, total_notes=500))
    assert perfect.accuracy() == 100.0
    assert perfect.rank() == "MAX"

    half = CourseStats()
    half.add_result(_Result(ex_score=500, total_notes=500))
    assert half.rank() == "E"


def test_max_combo_keeps_best_stage():
    stats = CourseStats()
    stats.add_result(_Result(max_combo=300))
    stats.add_result(_Result(max_combo=120))
    assert stats.max_combo == 300