"""
Where notion-sync keeps its files.

Everything lives under one home directory: ``config.json`` at the top and
the sync state document under ``data/``. ``NOTION_SYNC_HOME`` relocates the
whole tree, which is also how the tests isolate themselves.
"""

import os
import sys
from pathlib import Path
from typing import Optional
import logging


HOME_ENV = "NOTION_SYNC_HOME"
APP_DIR_NAME = "notion-sync"


def platform_home() -> Path:
    """Per-user application directory for the current platform."""
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_DIR_NAME
    if sys.platform.startswith("win"):
        base = os.environ.get("APPDATA")
        root = Path(base) if base else Path.home() / "AppData" / "Roaming"
        return root / APP_DIR_NAME
    return Path.home() / ".config" / APP_DIR_NAME


class PathManager:
    """Resolves the notion-sync home once and derives file locations from it."""

    CONFIG_FILE = "config.json"
    STATE_FILE = "sync_state.json"

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self._home: Optional[Path] = None

    @property
    def working_dir(self) -> Path:
        if self._home is None:
            override = os.environ.get(HOME_ENV)
            if override:
                self._home = Path(override).expanduser().resolve()
                self.logger.debug(f"{HOME_ENV} set, using {self._home}")
            else:
                self._home = platform_home()
        return self._home

    def reset(self) -> None:
        """Drop the cached home so ``NOTION_SYNC_HOME`` is consulted again."""
        self._home = None

    def ensure_directories(self) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)

    @property
    def data_dir(self) -> Path:
        return self.working_dir / "data"

    @property
    def config_path(self) -> Path:
        return self.working_dir / self.CONFIG_FILE

    @property
    def state_path(self) -> Path:
        return self.data_dir / self.STATE_FILE


_path_manager: Optional[PathManager] = None


def get_path_manager() -> PathManager:
    """Process-wide PathManager."""
    global _path_manager
    if _path_manager is None:
        _path_manager = PathManager()
    return _path_manager
