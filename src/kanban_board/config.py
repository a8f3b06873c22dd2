"""
Application configuration.

Persisted as JSON in a platform-specific config directory.
"""
from __future__ import annotations

import json
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)


def get_config_dir() -> Path:
    """
    Get platform-specific config directory.

    Returns:
        - Windows: %LOCALAPPDATA%/KanbanBoard
        - macOS: ~/Library/Application Support/KanbanBoard
        - Linux: ~/.config/kanban-board
    """
    if sys.platform == "win32":
        base = Path(os.environ.get("LOCALAPPDATA", Path.home() / "AppData" / "Local"))
        return base / "KanbanBoard"
    elif sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "KanbanBoard"
    else:
        xdg_config = os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
        return Path(xdg_config) / "kanban-board"


class AppConfig(BaseModel):
    """Global board config."""

    # Where local_storage.json lives
    data_dir: str = Field(default_factory=lambda: str(get_config_dir()))
    storage_key: str = "kanban-cards"

    # Web page
    title: str = "Kanban Board"
    host: str = "127.0.0.1"
    port: int = Field(default=8080, ge=1, le=65535)
    debug: bool = False

    def data_path(self) -> Path:
        return Path(self.data_dir).expanduser()


def config_path() -> Path:
    return get_config_dir() / "config.json"


def load_config(path: Optional[Path] = None) -> AppConfig:
    """Load config; defaults if the file is missing or invalid."""
    path = path or config_path()
    if not path.exists():
        return AppConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return AppConfig(**data)
    except (json.JSONDecodeError, TypeError, ValidationError) as e:
        logger.warning(f"[CONFIG] invalid config, using defaults | path={path} error={e}")
        return AppConfig()


def save_config(cfg: AppConfig, path: Optional[Path] = None) -> None:
    path = path or config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(cfg.model_dump_json(indent=2), encoding="utf-8")
