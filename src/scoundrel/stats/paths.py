from __future__ import annotations

from pathlib import Path

from platformdirs import PlatformDirs

APP_NAME = "Scoundrel"
STATS_FILE_NAME = "stats.json"


def default_data_root() -> Path:
    """Per-user data directory for Scoundrel, as reported by platformdirs."""
    d = PlatformDirs(appname=APP_NAME, appauthor=False)
    return Path(d.user_data_dir)


def default_stats_path() -> Path:
    return default_data_root() / STATS_FILE_NAME


def ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path
