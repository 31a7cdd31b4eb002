"""Persistent records of cleared dan certification courses."""

from __future__ import annotations

import json
from dataclasses import dataclass, fields
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

import platformdirs

from bmsplayer.grade import DanGrade

APP_NAME = "brs"
FALLBACK_DATA_DIR = Path(".brs-data")
RECORDS_FILE_NAME = "dan_records.json"

_COUNTER_FIELDS = (
    "ex_score",
    "max_combo",
    "pgreat_count",
    "great_count",
    "good_count",
    "bad_count",
    "poor_count",
    "clear_count",
    "last_cleared",
)


def record_key(grade: DanGrade, course_name: str) -> str:
    """Storage key combining a grade and a course name, e.g. ``Dan(1):SP 初段``."""
    return f"{grade.debug_name()}:{course_name}"


def default_data_dir() -> Path:
    """Directory the player keeps its data in."""
    try:
        return Path(platformdirs.user_data_dir(APP_NAME, APP_NAME))
    except Exception:  # pragma: no cover - platform without a data directory
        return FALLBACK_DATA_DIR


@dataclass
class DanRecord:
    """Best results and clear count for one course."""

    grade: DanGrade
    course_name: str
    ex_score: int = 0
    max_combo: int = 0
    pgreat_count: int = 0
    great_count: int = 0
    good_count: int = 0
    bad_count: int = 0
    poor_count: int = 0
    clear_count: int = 0
    last_cleared: int = 0

    def to_dict(self) -> dict[str, Any]:
        """JSON form of the record."""
        result: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            result[f.name] = value.to_json() if f.name == "grade" else value
        return result

    @classmethod
    def from_dict(cls, data: Any) -> DanRecord:
        """Build a record from its JSON form, raising ValueError on bad shape."""
        if not isinstance(data, dict):
            raise ValueError("dan record must be an object")
        if "grade" not in data:
            raise ValueError("missing field `grade` in dan record")
        course_name = data.get("course_name")
        if not isinstance(course_name, str):
            raise ValueError("dan record needs a string `course_name`")
        values: dict[str, int] = {}
        for name in _COUNTER_FIELDS:
            if name not in data:
                raise ValueError(f"missing field `{name}` in dan record")
            value = data[name]
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(f"field `{name}` must be a non-negative integer")
            values[name] = value
        return cls(grade=DanGrade.from_json(data["grade"]), course_name=course_name, **values)


class DanRepository:
    """Dan records stored as one JSON file in the data directory."""

    def __init__(self, data_dir: str | Path | None = None) -> None:
        self.data_dir = Path(data_dir) if data_dir is not None else default_data_dir()
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self._records: dict[str, DanRecord] = {}
        self._load()

    @property
    def records_file(self) -> Path:
        return self.data_dir / RECORDS_FILE_NAME

    @property
    def records(self) -> Mapping[str, DanRecord]:
        """All records by storage key (read-only view)."""
        return MappingProxyType(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def _load(self) -> None:
        path = self.records_file
        if not path.exists():
            return
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"{path}: expected an object of records")
        self._records = {key: DanRecord.from_dict(value) for key, value in data.items()}

    def save(self) -> None:
        """Write all records to disk."""
        content = json.dumps(
            {key: record.to_dict() for key, record in self._records.items()},
            indent=2,
            ensure_ascii=False,
        )
        self.records_file.write_text(content, encoding="utf-8")

    def get(self, grade: DanGrade, course_name: str) -> DanRecord | None:
        """Record for a grade and course, if it was ever cleared."""
        return self._records.get(record_key(grade, course_name))

    def update(self, new_record: DanRecord) -> bool:
        """Fold in a clear; True on a first clear or a better EX score."""
        key = record_key(new_record.grade, new_record.course_name)
        existing = self._records.get(key)
        if existing is None:
            self._records[key] = new_record
            return True

        existing.clear_count += 1
        existing.last_cleared = new_record.last_cleared

        if new_record.ex_score > existing.ex_score:
            existing.ex_score = new_record.ex_score
            existing.pgreat_count = new_record.pgreat_count
            existing.great_count = new_record.great_count
            existing.good_count = new_record.good_count
            existing.bad_count = new_record.bad_count
            existing.poor_count = new_record.poor_count
            return True

        if new_record.max_combo > existing.max_combo:
            existing.max_combo = new_record.max_combo
        return False

    def cleared_grades(self) -> set[DanGrade]:
        """Every grade with at least one clear."""
        return {record.grade for record in self._records.values()}

    def highest_grade(self) -> DanGrade | None:
        """The hardest cleared grade, or None if nothing was cleared."""
        return max((record.grade for record in self._records.values()), default=None)