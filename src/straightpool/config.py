"""
Configuration loading for StraightPool.

Settings come from ``config/config.json`` at the project root when it exists,
with environment variables taking precedence:

* ``STRAIGHTPOOL_DATABASE_URL`` overrides ``database_url``
* ``STRAIGHTPOOL_LOG_LEVEL`` overrides ``log_level``
"""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

CONFIG_DIRNAME = "config"
CONFIG_FILENAME = "config.json"

DEFAULT_DATABASE_URL = "sqlite:///straightpool.db"
DEFAULT_TARGET_SCORE = 125


@dataclass(frozen=True)
class Settings:
    database_url: str = DEFAULT_DATABASE_URL
    log_level: str = "INFO"
    default_target_score: int = DEFAULT_TARGET_SCORE
    host: str = "127.0.0.1"
    port: int = 8000


def _find_config_path(start: Path) -> Path:
    for base in [start, *start.parents[:4]]:
        p = base / CONFIG_DIRNAME / CONFIG_FILENAME
        if p.exists():
            return p
    # fallback: project root (../.. from src/straightpool/)
    return Path(__file__).resolve().parents[2] / CONFIG_DIRNAME / CONFIG_FILENAME


def load_config(path: Optional[Path] = None) -> Settings:
    cfg_path = path or _find_config_path(Path.cwd())
    data: dict = {}
    if cfg_path.exists():
        with open(cfg_path, "r", encoding="utf-8") as f:
            data = json.load(f)

    api_cfg = data.get("api", {})
    return Settings(
        database_url=os.getenv(
            "STRAIGHTPOOL_DATABASE_URL", data.get("database_url", DEFAULT_DATABASE_URL)
        ),
        log_level=os.getenv("STRAIGHTPOOL_LOG_LEVEL", data.get("log_level", "INFO")).upper(),
        default_target_score=int(data.get("default_target_score", DEFAULT_TARGET_SCORE)),
        host=str(api_cfg.get("host", "127.0.0.1")),
        port=int(api_cfg.get("port", 8000)),
    )
