"""Progress and results while a dan course is being played."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from bmsplayer.course import DanCourse, DanRequirements
from bmsplayer.score import ClearLamp


class StageOutcome(Protocol):
    """The parts of a finished play that a course run needs."""

    chart_path: str
    title: str
    clear_lamp: ClearLamp
    ex_score: int
    max_combo: int
    pgreat_count: int
    great_count: int
    good_count: int
    bad_count: int
    poor_count: int
    total_notes: int
    fast_count: int
    slow_count: int


_RANKS = (
    (100.0, "MAX"),
    (94.44, "AAA"),
    (88.88, "AA"),
    (77.77, "A"),
    (66.66, "B"),
    (55.55, "C"),
    (44.44, "D"),
    (33.33, "E"),
)


@dataclass
class CourseStats:
    """Totals accumulated over all played stages."""

    ex_score: int = 0
    max_combo: int = 0
    pgreat_count: int = 0
    great_count: int = 0
    good_count: int = 0
    bad_count: int = 0
    poor_count: int = 0
    total_notes: int = 0
    fast_count: int = 0
    slow_count: int = 0

    def add_result(self, result: StageOutcome) -> None:
        """Add one stage's result; max combo keeps the best stage's."""
        self.ex_score += result.ex_score
        self.max_combo = max(self.max_combo, result.max_combo)
        self.pgreat_count += result.pgreat_count
        self.great_count += result.great_count
        self.good_count += result.good_count
        self.bad_count += result.bad_count
        self.poor_count += result.poor_count
        self.total_notes += result.total_notes
        self.fast_count += result.fast_count
        self.slow_count += result.slow_count

    def accuracy(self) -> float:
        """EX score as a percentage of the maximum."""
        if self.total_notes == 0:
            return 0.0
        return self.ex_score / (self.total_notes * 2) * 100.0

    def rank(self) -> str:
        """Letter rank for the accuracy."""
        acc = self.accuracy()
        return next((name for threshold, name in _RANKS if acc >= threshold), "F")


@dataclass
class StageResult:
    """Result of one stage of a course."""

    chart_path: str
    title: str
    ex_score: int
    clear_lamp: ClearLamp
    end_gauge_hp: float


class CoursePassResult(Enum):
    """Verdict on a course run."""

    PASSED = "Passed"
    FAILED = "Failed"
    INCOMPLETE = "Incomplete"


@dataclass
class CourseState:
    """Running state of a course: stage, carried gauge and totals."""

    course: DanCourse
    gauge_hp: float = 100.0
    _current_stage: int = field(default=0, init=False)
    _failed: bool = field(default=False, init=False)
    _stage_results: list[StageResult] = field(default_factory=list, init=False)
    _total_stats: CourseStats = field(default_factory=CourseStats, init=False)

    @property
    def current_stage(self) -> int:
        """Index of the stage being played, from 0."""
        return self._current_stage

    @property
    def failed(self) -> bool:
        return self._failed

    @property
    def stage_results(self) -> tuple[StageResult, ...]:
        return tuple(self._stage_results)

    @property
    def total_stats(self) -> CourseStats:
        return self._total_stats

    @property
    def requirements(self) -> DanRequirements:
        return self.course.requirements

    def total_stages(self) -> int:
        return self.course.stage_count()

    def is_completed(self) -> bool:
        """Whether every stage has been played."""
        return self._current_stage >= self.course.stage_count()

    def set_initial_gauge_hp(self, hp: float) -> None:
        """Gauge to start the next stage with."""
        self.gauge_hp = hp

    def complete_stage(self, result: StageOutcome, end_gauge_hp: float) -> bool:
        """Record a finished stage; return True if the course goes on."""
        self._stage_results.append(
            StageResult(
                chart_path=result.chart_path,
                title=result.title,
                ex_score=result.ex_score,
                clear_lamp=result.clear_lamp,
                end_gauge_hp=end_gauge_hp,
            )
        )
        self._total_stats.add_result(result)
        self.gauge_hp = end_gauge_hp

        if end_gauge_hp <= 0.0:
            self._failed = True
            return False

        self._current_stage += 1
        return not self.is_completed()

    def mark_failed(self) -> None:
        """Fail the course, for instance when the player quits."""
        self._failed = True

    def check_requirements(self) -> CoursePassResult:
        """Whether the run passed, failed or is still going."""
        if self._failed:
            return CoursePassResult.FAILED
        if not self.is_completed():
            return CoursePassResult.INCOMPLETE

        req = self.course.requirements
        stats = self._total_stats
        if self.gauge_hp < req.min_gauge:
            return CoursePassResult.FAILED
        if (
            req.max_bad_poor is not None
            and stats.bad_count + stats.poor_count > req.max_bad_poor
        ):
            return CoursePassResult.FAILED
        if req.full_combo and (stats.bad_count > 0 or stats.poor_count > 0):
            return CoursePassResult.FAILED
        return CoursePassResult.PASSED