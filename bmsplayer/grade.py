"""Dan certification grades."""

from __future__ import annotations

import functools
from dataclasses import dataclass
from enum import Enum
from typing import Any


class GradeKind(Enum):
    KYU = "Kyu"
    DAN = "Dan"
    KAIDEN = "Kaiden"
    OVERJOY = "Overjoy"


_NUMBERED = (GradeKind.KYU, GradeKind.DAN)


@functools.total_ordering
@dataclass(frozen=True)
class DanGrade:
    """A certification grade, ordered from easiest to hardest."""

    kind: GradeKind
    number: int | None = None

    def __post_init__(self) -> None:
        if self.kind in _NUMBERED:
            if not isinstance(self.number, int) or isinstance(self.number, bool):
                raise ValueError(f"{self.kind.value} grade needs an integer number")
            if not 0 <= self.number <= 255:
                raise ValueError(f"grade number out of range: {self.number}")
        elif self.number is not None:
            raise ValueError(f"{self.kind.value} grade takes no number")

    @classmethod
    def kyu(cls, n: int) -> DanGrade:
        return cls(GradeKind.KYU, n)

    @classmethod
    def dan(cls, n: int) -> DanGrade:
        return cls(GradeKind.DAN, n)

    @classmethod
    def kaiden(cls) -> DanGrade:
        return cls(GradeKind.KAIDEN)

    @classmethod
    def overjoy(cls) -> DanGrade:
        return cls(GradeKind.OVERJOY)

    def display_name(self) -> str:
        """Name shown to the player."""
        if self.kind is GradeKind.KYU:
            return f"{self.number}級"
        if self.kind is GradeKind.DAN:
            return f"{self.number}段"
        if self.kind is GradeKind.KAIDEN:
            return "皆伝"
        return "OVERJOY"

    def debug_name(self) -> str:
        """Compact identifier such as ``Dan(1)`` or ``Kaiden``."""
        if self.kind in _NUMBERED:
            return f"{self.kind.value}({self.number})"
        return self.kind.value

    def next(self) -> DanGrade | None:
        """The next harder grade, or None after the last one."""
        if self.kind is GradeKind.KYU:
            if self.number == 1:
                return DanGrade.dan(1)
            return DanGrade.kyu(self.number - 1)
        if self.kind is GradeKind.DAN:
            if self.number == 10:
                return DanGrade.kaiden()
            return DanGrade.dan(self.number + 1)
        if self.kind is GradeKind.KAIDEN:
            return DanGrade.overjoy()
        return None

    def sort_key(self) -> int:
        """Ordering key; lower is easier."""
        if self.kind is GradeKind.KYU:
            return 8 - self.number
        if self.kind is GradeKind.DAN:
            return 7 + self.number
        if self.kind is GradeKind.KAIDEN:
            return 18
        return 19

    @classmethod
    def from_sort_key(cls, key: int) -> DanGrade | None:
        if -1 <= key <= 6:
            return cls.kyu(8 - key)
        if 8 <= key <= 17:
            return cls.dan(key - 7)
        if key == 18:
            return cls.kaiden()
        if key == 19:
            return cls.overjoy()
        return None

    def to_json(self) -> Any:
        """JSON form: ``{"Dan": 1}`` for numbered grades, a bare name otherwise."""
        if self.kind in _NUMBERED:
            return {self.kind.value: self.number}
        return self.kind.value

    @classmethod
    def from_json(cls, data: Any) -> DanGrade:
        if isinstance(data, str):
            try:
                kind = GradeKind(data)
            except ValueError:
                raise ValueError(f"unknown grade: {data!r}") from None
            return cls(kind)
        if isinstance(data, dict) and len(data) == 1:
            ((name, number),) = data.items()
            try:
                kind = GradeKind(name)
            except ValueError:
                raise ValueError(f"unknown grade: {name!r}") from None
            if kind not in _NUMBERED:
                raise ValueError(f"{name} grade takes no number")
            return cls(kind, number)
        raise ValueError(f"invalid grade: {data!r}")

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, DanGrade):
            return NotImplemented
        return self.sort_key() < other.sort_key()