from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Optional

import yaml

from .errors import SettingsError

logger = logging.getLogger(__name__)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class GameSettings:
    seed: Optional[int] = None


@dataclass
class LoggingSettings:
    level: str = "WARNING"


@dataclass
class StatsSettings:
    enabled: bool = True
    path: Optional[str] = None


@dataclass
class CliSettings:
    recent_events: int = 5


@dataclass
class Settings:
    game: GameSettings = field(default_factory=GameSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    stats: StatsSettings = field(default_factory=StatsSettings)
    cli: CliSettings = field(default_factory=CliSettings)

    @staticmethod
    def _load_yaml(path: Path) -> dict:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise SettingsError(f"Settings file {path} must contain a mapping")
        return data

    @classmethod
    def _deep_merge(cls, base: dict, overlay: dict) -> dict:
        merged = dict(base)
        for k, v in (overlay or {}).items():
            if isinstance(v, dict) and isinstance(base.get(k), dict):
                merged[k] = cls._deep_merge(base[k], v)
            else:
                merged[k] = v
        return merged

    @classmethod
    def _from_dict(cls, data: dict) -> "Settings":
        try:
            settings = Settings(
                game=GameSettings(**(data.get("game") or {})),
                logging=LoggingSettings(**(data.get("logging") or {})),
                stats=StatsSettings(**(data.get("stats") or {})),
                cli=CliSettings(**(data.get("cli") or {})),
            )
        except TypeError as exc:
            raise SettingsError(f"Unknown settings key: {exc}") from exc
        settings.validate()
        return settings

    @classmethod
    def load(cls, user_path: Optional[Path] = None) -> "Settings":
        """Load settings from built-in defaults and optional user override file.

        If user_path is provided and exists, overlay values onto defaults.
        """
        try:
            with resources.files("scoundrel.config").joinpath("default_settings.yaml").open("r", encoding="utf-8") as f:
                default_data = yaml.safe_load(f) or {}
        except FileNotFoundError:
            logger.warning("Default settings not found; falling back to dataclass defaults.")
            default_data = dataclasses.asdict(Settings())

        user_data = {}
        if user_path is not None:
            if user_path.exists():
                user_data = cls._load_yaml(user_path)
                logger.info("Loaded user settings from %s", user_path)
            else:
                logger.warning("User settings file not found: %s", user_path)

        merged = cls._deep_merge(default_data, user_data)
        settings = cls._from_dict(merged)
        logger.debug("Settings merged: %s", settings)
        return settings

    def validate(self) -> None:
        seed = self.game.seed
        if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int)):
            raise SettingsError(f"game.seed must be an integer or null, got {seed!r}")
        if str(self.logging.level).upper() not in _LOG_LEVELS:
            raise SettingsError(f"logging.level must be one of {', '.join(_LOG_LEVELS)}")
        if not isinstance(self.stats.enabled, bool):
            raise SettingsError("stats.enabled must be true or false")
        if not isinstance(self.cli.recent_events, int) or self.cli.recent_events < 0:
            raise SettingsError("cli.recent_events must be a non-negative integer")

    @property
    def stats_path(self) -> Optional[Path]:
        return Path(self.stats.path).expanduser() if self.stats.path else None

    def save(self, path: Path) -> None:
        data = dataclasses.asdict(self)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            yaml.safe_dump(data, f, sort_keys=False)
        logger.info("Saved settings to %s", path)
