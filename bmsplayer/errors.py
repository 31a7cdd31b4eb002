"""Exceptions raised while reading and interpreting chart files."""

from __future__ import annotations

from pathlib import Path


class BmsError(Exception):
    """Base class for all chart loading errors."""


class FileReadError(BmsError):
    """A chart file could not be read from disk."""

    def __init__(self, path: str | Path, source: BaseException | None = None) -> None:
        self.path = Path(path)
        self.source = source
        super().__init__(f"Failed to read BMS file: {self.path}")


class ParseError(BmsError):
    """A chart file was read but its contents could not be parsed."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Failed to parse BMS file: {detail}")


class InvalidTimingError(BmsError):
    """The timing data of a chart is inconsistent."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Invalid timing data: {detail}")


class KeysoundNotFoundError(BmsError):
    """A note refers to a keysound that is not defined."""

    def __init__(self, keysound_id: int) -> None:
        self.keysound_id = keysound_id
        super().__init__(f"Keysound not found: {keysound_id}")


class UnsupportedPlayModeError(BmsError):
    """The chart uses a play mode the player cannot handle."""

    def __init__(self, mode: str) -> None:
        self.mode = mode
        super().__init__(f"Unsupported play mode: {mode}")