"""Score storage with backups, atomic writes and recovery from corruption."""

from __future__ import annotations

import json
import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

from bmsplayer.dan_records import default_data_dir
from bmsplayer.score import SavedScore

logger = logging.getLogger(__name__)

SCORES_FILE_NAME = "scores.json"


@dataclass
class LoadResult:
    """Outcome of loading scores from disk."""

    success: bool
    recovered_from_backup: bool = False
    error_message: str | None = None


def _parse_scores(path: Path) -> dict[str, SavedScore]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise OSError(f"Failed to read: {path}: {exc}") from exc
    try:
        data: Any = json.loads(content)
        if not isinstance(data, dict):
            raise ValueError("expected an object of scores")
        return {key: SavedScore.from_dict(value) for key, value in data.items()}
    except ValueError as exc:
        raise ValueError(f"Failed to parse JSON: {path}: {exc}") from exc


class ScoreRepository:
    """Best scores per chart hash, kept in a JSON file in the data directory."""

    def __init__(self, data_dir: str | Path | None = None) -> None:
        self.data_dir = Path(data_dir) if data_dir is not None else default_data_dir()
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self._scores: dict[str, SavedScore] = {}
        self.load_result = self._load()
        if self.load_result.error_message:
            logger.warning("Score repository warning: %s", self.load_result.error_message)

    @property
    def scores_file(self) -> Path:
        return self.data_dir / SCORES_FILE_NAME

    @property
    def backup_file(self) -> Path:
        return self.data_dir / f"{SCORES_FILE_NAME}.bak"

    @property
    def temp_file(self) -> Path:
        return self.data_dir / f"{SCORES_FILE_NAME}.tmp"

    @property
    def corrupted_file(self) -> Path:
        return self.data_dir / f"{SCORES_FILE_NAME}.corrupted"

    @property
    def scores(self) -> Mapping[str, SavedScore]:
        """All scores by chart hash (read-only view)."""
        return MappingProxyType(self._scores)

    def __len__(self) -> int:
        return len(self._scores)

    def _load_from_backup(self) -> LoadResult:
        self._scores = _parse_scores(self.backup_file)
        logger.warning("Recovered scores from backup file")
        return LoadResult(success=True, recovered_from_backup=True)

    def _load(self) -> LoadResult:
        path = self.scores_file
        if not path.exists():
            if self.backup_file.exists():
                return self._load_from_backup()
            return LoadResult(success=True)

        try:
            self._scores = _parse_scores(path)
            return LoadResult(success=True)
        except (OSError, ValueError) as main_err:
            try:
                shutil.copyfile(path, self.corrupted_file)
                logger.warning("Corrupted scores file backed up to: %s", self.corrupted_file)
            except OSError as copy_err:
                logger.warning("Failed to backup corrupted file: %s", copy_err)

            if not self.backup_file.exists():
                self._scores = {}
                return LoadResult(
                    success=False,
                    error_message=(
                        f"Main file corrupted and no backup available: {main_err}"
                    ),
                )

            try:
                result = self._load_from_backup()
            except (OSError, ValueError) as backup_err:
                logger.warning("Both main and backup files corrupted. Starting fresh.")
                self._scores = {}
                return LoadResult(
                    success=False,
                    error_message=(
                        f"Both files corrupted: main={main_err}, backup={backup_err}"
                    ),
                )
            result.error_message = (
                f"Main file corrupted ({main_err}), recovered from backup"
            )
            return result

    def save(self) -> None:
        """Write scores atomically, keeping the previous file as a backup."""
        content = json.dumps(
            {key: score.to_dict() for key, score in self._scores.items()}, indent=2
        )
        temp = self.temp_file
        temp.write_text(content, encoding="utf-8")

        try:
            _parse_scores(temp)
        except (OSError, ValueError) as exc:
            raise ValueError(f"Temp file verification failed - JSON is invalid: {exc}") from exc

        path = self.scores_file
        if path.exists():
            try:
                shutil.copyfile(path, self.backup_file)
            except OSError as exc:
                logger.warning("Failed to create backup: %s", exc)

        os.replace(temp, path)

    def get(self, chart_hash: str) -> SavedScore | None:
        """Stored score for a chart hash."""
        return self._scores.get(chart_hash)

    def update(self, chart_hash: str, new_score: SavedScore) -> bool:
        """Fold in a play; True if it is a new best (always on first play)."""
        existing = self._scores.get(chart_hash)
        if existing is not None:
            return existing.update(new_score)
        score = SavedScore(chart_hash)
        score.update(new_score)
        self._scores[chart_hash] = score
        return True