"""Dan certification course definitions."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from bmsplayer.grade import DanGrade

DEFAULT_GAUGE_TYPE = "Hard"


def _number(value: Any, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"`{name}` must be a number")
    return float(value)


@dataclass
class DanRequirements:
    """Conditions a finished course must meet to pass."""

    min_gauge: float = 0.0
    max_bad_poor: int | None = None
    full_combo: bool = False

    @classmethod
    def from_dict(cls, data: Any) -> DanRequirements:
        """Build from JSON form; absent fields take their defaults."""
        if not isinstance(data, dict):
            raise ValueError("requirements must be an object")
        min_gauge = _number(data.get("min_gauge", 0.0), "min_gauge")
        max_bad_poor = data.get("max_bad_poor")
        if max_bad_poor is not None and (
            isinstance(max_bad_poor, bool)
            or not isinstance(max_bad_poor, int)
            or max_bad_poor < 0
        ):
            raise ValueError("`max_bad_poor` must be a non-negative integer")
        full_combo = data.get("full_combo", False)
        if not isinstance(full_combo, bool):
            raise ValueError("`full_combo` must be a boolean")
        return cls(min_gauge=min_gauge, max_bad_poor=max_bad_poor, full_combo=full_combo)


@dataclass
class DanCourse:
    """A sequence of charts played in one run with a shared gauge."""

    name: str
    grade: DanGrade
    charts: list[str]
    gauge_type: str = DEFAULT_GAUGE_TYPE
    requirements: DanRequirements = field(default_factory=DanRequirements)

    @classmethod
    def from_dict(cls, data: Any) -> DanCourse:
        """Build from JSON form, raising ValueError on bad shape."""
        if not isinstance(data, dict):
            raise ValueError("course must be an object")
        for key in ("name", "grade", "charts"):
            if key not in data:
                raise ValueError(f"missing field `{key}` in course")
        name = data["name"]
        if not isinstance(name, str):
            raise ValueError("`name` must be a string")
        charts = data["charts"]
        if not isinstance(charts, list) or not all(isinstance(c, str) for c in charts):
            raise ValueError("`charts` must be a list of strings")
        gauge_type = data.get("gauge_type", DEFAULT_GAUGE_TYPE)
        if not isinstance(gauge_type, str) or not gauge_type:
            raise ValueError("`gauge_type` must be a non-empty string")
        requirements = (
            DanRequirements.from_dict(data["requirements"])
            if "requirements" in data
            else DanRequirements()
        )
        return cls(
            name=name,
            grade=DanGrade.from_json(data["grade"]),
            charts=list(charts),
            gauge_type=gauge_type,
            requirements=requirements,
        )

    @classmethod
    def from_json(cls, text: str) -> DanCourse:
        """Parse a course from JSON text."""
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValueError(str(exc)) from exc
        return cls.from_dict(data)

    @classmethod
    def load(cls, path: str | Path) -> DanCourse:
        """Read a course file; OSError if unreadable, ValueError if invalid."""
        path = Path(path)
        text = path.read_text(encoding="utf-8")
        try:
            return cls.from_json(text)
        except ValueError as exc:
            raise ValueError(f"Failed to parse {path}: {exc}") from exc

    def stage_count(self) -> int:
        """Number of charts in the course."""
        return len(self.charts)

    def resolve_chart_paths(self, course_dir: str | Path) -> list[Path]:
        """Chart paths joined onto the course file's directory."""
        base = Path(course_dir)
        return [base / chart for chart in self.charts]


def load_courses(directory: str | Path) -> list[tuple[Path, DanCourse]]:
    """Load every valid ``.json`` course below a directory, easiest grade first."""
    directory = Path(directory)
    courses: list[tuple[Path, DanCourse]] = []
    if not directory.exists():
        return courses

    try:
        entries = sorted(directory.iterdir())
    except OSError:
        return courses

    for path in entries:
        if path.is_dir():
            courses.extend(load_courses(path))
        elif path.suffix == ".json":
            try:
                courses.append((path, DanCourse.load(path)))
            except (OSError, ValueError):
                continue

    courses.sort(key=lambda item: item[1].grade)
    return courses