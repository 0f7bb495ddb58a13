"""Per-user locations for the saved player state and logs."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from platformdirs import AppDirs

APP_NAME = "remote-deck"
STATE_FILE_NAME = "state.json"


@lru_cache(maxsize=1)
def get_app_dirs() -> AppDirs:
    return AppDirs(APP_NAME, appauthor=False)


def config_dir() -> Path:
    path = Path(get_app_dirs().user_config_dir)
    path.mkdir(parents=True, exist_ok=True)
    return path


def log_dir() -> Path:
    path = Path(get_app_dirs().user_log_dir)
    path.mkdir(parents=True, exist_ok=True)
    return path


def state_path(override: str | Path | None = None) -> Path:
    """Return the saved-state file, honoring an explicit `--state-file` path."""
    if override:
        return Path(override).expanduser()
    return config_dir() / STATE_FILE_NAME
