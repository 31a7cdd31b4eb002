"""Best-score records kept for each chart."""

from __future__ import annotations

import hashlib
import time
from dataclasses import dataclass, fields
from enum import IntEnum
from pathlib import Path
from typing import Any, Protocol


class ClearLamp(IntEnum):
    """Clear status of a play, ordered from worst to best."""

    NO_PLAY = 0
    FAILED = 1
    ASSIST_EASY = 2
    EASY = 3
    NORMAL = 4
    HARD = 5
    EX_HARD = 6
    FULL_COMBO = 7

    @classmethod
    def from_value(cls, value: int) -> ClearLamp:
        """Lamp for a stored value; unknown values count as NO_PLAY."""
        try:
            return cls(value)
        except ValueError:
            return cls.NO_PLAY


class PlayOutcome(Protocol):
    """The parts of a finished play that a score record needs."""

    clear_lamp: int
    ex_score: int
    max_combo: int
    pgreat_count: int
    great_count: int
    good_count: int
    bad_count: int
    poor_count: int


def compute_file_hash(path: str | Path) -> str:
    """Hex SHA-256 digest of a file's contents."""
    return hashlib.sha256(Path(path).read_bytes()).hexdigest()


_COUNTER_FIELDS = (
    "clear_lamp",
    "ex_score",
    "max_combo",
    "play_count",
    "clear_count",
    "last_played",
    "pgreat_count",
    "great_count",
    "good_count",
    "bad_count",
    "poor_count",
)


@dataclass
class SavedScore:
    """Best results and play counters for one chart."""

    chart_hash: str
    clear_lamp: int = int(ClearLamp.NO_PLAY)
    ex_score: int = 0
    max_combo: int = 0
    play_count: int = 0
    clear_count: int = 0
    last_played: int = 0
    pgreat_count: int = 0
    great_count: int = 0
    good_count: int = 0
    bad_count: int = 0
    poor_count: int = 0

    @classmethod
    def from_play_result(cls, chart_hash: str, result: PlayOutcome) -> SavedScore:
        """Score of a single play, stamped with the current time."""
        return cls(
            chart_hash=chart_hash,
            clear_lamp=int(result.clear_lamp),
            ex_score=result.ex_score,
            max_combo=result.max_combo,
            play_count=0,
            clear_count=0,
            last_played=int(time.time()),
            pgreat_count=result.pgreat_count,
            great_count=result.great_count,
            good_count=result.good_count,
            bad_count=result.bad_count,
            poor_count=result.poor_count,
        )

    @classmethod
    def from_dict(cls, data: Any) -> SavedScore:
        """Build a record from its JSON form, raising ValueError on bad shape."""
        if not isinstance(data, dict):
            raise ValueError("score record must be an object")
        chart_hash = data.get("hash")
        if not isinstance(chart_hash, str):
            raise ValueError("score record needs a string `hash`")
        values: dict[str, int] = {}
        for name in _COUNTER_FIELDS:
            if name not in data:
                raise ValueError(f"missing field `{name}` in score record")
            value = data[name]
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(f"field `{name}` must be a non-negative integer")
            values[name] = value
        return cls(chart_hash=chart_hash, **values)

    def to_dict(self) -> dict[str, Any]:
        """JSON form of the record."""
        result: dict[str, Any] = {"hash": self.chart_hash}
        for f in fields(self):
            if f.name != "chart_hash":
                result[f.name] = getattr(self, f.name)
        return result

    def lamp(self) -> ClearLamp:
        """The stored clear lamp as an enum member."""
        return ClearLamp.from_value(self.clear_lamp)

    def is_better_than(self, other: SavedScore) -> bool:
        """Whether this beats another score: lamp first, then EX score."""
        if self.clear_lamp != other.clear_lamp:
            return self.clear_lamp > other.clear_lamp
        return self.ex_score > other.ex_score

    def update(self, new_score: SavedScore) -> bool:
        """Fold in a new play; return True if it is a new best."""
        self.play_count += 1
        self.last_played = new_score.last_played

        if new_score.clear_lamp > ClearLamp.FAILED:
            self.clear_count += 1

        is_better = new_score.is_better_than(self)

        if new_score.clear_lamp > self.clear_lamp:
            self.clear_lamp = new_score.clear_lamp

        if new_score.ex_score > self.ex_score:
            self.ex_score = new_score.ex_score
            self.pgreat_count = new_score.pgreat_count
            self.great_count = new_score.great_count
            self.good_count = new_score.good_count
            self.bad_count = new_score.bad_count
            self.poor_count = new_score.poor_count

        if new_score.max_combo > self.max_combo:
            self.max_combo = new_score.max_combo

        return is_better