from __future__ import annotations

import json
import logging
import os
import shutil
from pathlib import Path
from typing import Any, Mapping, Optional

from ..utils.events import EventBus
from .errors import CorruptStatsError, StatsError
from .models import StatsRecord
from .paths import default_stats_path, ensure_dir

logger = logging.getLogger(__name__)

GAME_OVER_EVENT = "game_over"


class StatsManager:
    """Reads and writes the stats file, keeping a .bak copy of the last good save.

    A missing file means a fresh record. A corrupt file falls back to the
    backup; when both are unreadable CorruptStatsError is raised.
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = Path(path) if path is not None else default_stats_path()
        self._record: Optional[StatsRecord] = None

    @property
    def backup_path(self) -> Path:
        return self.path.with_suffix(self.path.suffix + ".bak")

    # Public API

    def load(self) -> StatsRecord:
        if not self.path.exists() and not self.backup_path.exists():
            self._record = StatsRecord()
            return self._record
        self._record = self._load_with_fallback()
        return self._record

    @property
    def record(self) -> StatsRecord:
        if self._record is None:
            return self.load()
        return self._record

    def record_outcome(self, outcome: Mapping[str, Any]) -> StatsRecord:
        """Add one finished game to the totals and persist them."""
        record = self.record.record(outcome)
        self.save()
        logger.info("Stats saved: played=%d won=%d", record.played, record.won)
        return record

    def save(self) -> Path:
        text = json.dumps(self.record.to_dict(), indent=2, sort_keys=True)
        self._atomic_write(self.path, text)
        return self.path

    def reset(self) -> StatsRecord:
        self._record = StatsRecord()
        self.save()
        logger.info("Stats reset at %s", self.path)
        return self._record

    def attach(self, bus: EventBus) -> None:
        """Record every game that ends on ``bus``."""
        bus.subscribe(GAME_OVER_EVENT, self._on_game_over)

    def detach(self, bus: EventBus) -> None:
        bus.unsubscribe(GAME_OVER_EVENT, self._on_game_over)

    # Internal utilities

    def _on_game_over(self, payload: Optional[dict]) -> None:
        if payload is None:
            logger.warning("game_over published without an outcome; stats not updated")
            return
        self.record_outcome(payload)

    def _load_with_fallback(self) -> StatsRecord:
        try:
            return self._read(self.path)
        except StatsError as primary_exc:
            logger.warning("Stats file %s unreadable (%s); trying backup", self.path, primary_exc)
            if self.backup_path.exists():
                try:
                    return self._read(self.backup_path)
                except StatsError as backup_exc:
                    logger.warning("Stats backup %s unreadable: %s", self.backup_path, backup_exc)
            raise CorruptStatsError(f"Unable to load stats from {self.path}: {primary_exc}") from primary_exc

    def _read(self, path: Path) -> StatsRecord:
        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError as e:
            raise StatsError(f"Stats file not found: {path}") from e
        except (OSError, ValueError) as e:
            raise StatsError(f"Stats file {path} is not valid JSON: {e}") from e
        return StatsRecord.from_dict(data)

    def _atomic_write(self, path: Path, text: str) -> None:
        """Write text to path atomically, keeping the previous file as path.bak.

        Strategy:
        - Write to path.tmp
        - Flush and fsync
        - Copy existing path to path.bak
        - Replace path with path.tmp
        """
        tmp = path.with_suffix(path.suffix + ".tmp")
        bak = path.with_suffix(path.suffix + ".bak")
        ensure_dir(path.parent)
        with tmp.open("w", encoding="utf-8") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        if path.exists():
            shutil.copy2(str(path), str(bak))
        os.replace(str(tmp), str(path))
        if not bak.exists():
            shutil.copy2(str(path), str(bak))
