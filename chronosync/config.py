"""Settings loaded from CHRONOSYNC_* environment variables."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

ENV_PREFIX = "CHRONOSYNC"


def _k(suffix: str) -> str:
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    log_dir: Path
    log_level: str
    web_host: str
    web_port: int


def load_settings(data_dir: Optional[Path] = None) -> Settings:
    """Build settings from the environment; ``data_dir`` wins over the env."""
    if data_dir is None:
        data_dir = _env_path(_k("DATA_DIR"), Path.home() / ".chronosync")
    return Settings(
        data_dir=data_dir,
        log_dir=_env_path(_k("LOG_DIR"), data_dir / "logs"),
        log_level=_env(_k("LOG_LEVEL"), "INFO").upper(),
        web_host=_env(_k("WEB_HOST"), "127.0.0.1"),
        web_port=_env_int(_k("WEB_PORT"), 8000),
    )
