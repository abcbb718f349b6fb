# src/config/settings.py
"""Settings loaded from environment variables (+ .env in the working directory).

Every variable is optional and prefixed with TASKCONSOLE_, e.g.
TASKCONSOLE_DATA_DIR=/tmp/tasks. Paths default under the per-user app
data directory, like the rest of the app's state.
"""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

ENV_PREFIX = "TASKCONSOLE"
APP_NAME = "Task Console"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None or v.strip() == "" else v.strip()


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


def default_data_dir() -> Path:
    return Path(os.getenv("APPDATA") or Path.home()) / "TaskConsole"


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    db_path: Path
    storage_key: str
    log_dir: Path
    log_level: str
    export_dir: Path

    @staticmethod
    def from_env() -> "Settings":
        data_dir = _env_path(_k("DATA_DIR"), default_data_dir())
        return Settings(
            data_dir=data_dir,
            db_path=_env_path(_k("DB_PATH"), data_dir / "tasks.sqlite3"),
            storage_key=_env(_k("STORAGE_KEY"), "task-console-v23"),
            log_dir=_env_path(_k("LOG_DIR"), data_dir / "logs"),
            log_level=_env(_k("LOG_LEVEL"), "INFO").upper(),
            export_dir=_env_path(_k("EXPORT_DIR"), Path.home()),
        )


_SETTINGS: Optional[Settings] = None


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS
