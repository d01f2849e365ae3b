"""
Loading and saving the notion-sync config file, plus the Notion token lookup.
"""

import os
from pathlib import Path
from typing import Optional

from .exceptions import ConfigurationError
from .models import SyncConfig
from .paths import get_path_manager


def get_default_config_path() -> Path:
    return get_path_manager().config_path


def load_config(config_path: Optional[str] = None) -> SyncConfig:
    """Read ``config_path`` (default: ``<home>/config.json``); a missing file yields defaults."""
    path = config_path or str(get_default_config_path())
    return SyncConfig.load_from_file(path)


def save_config(config: SyncConfig, config_path: Optional[str] = None) -> None:
    """Write ``config``, creating the notion-sync home when saving to the default location."""
    if config_path is None:
        manager = get_path_manager()
        manager.ensure_directories()
        config_path = str(manager.config_path)
    config.save_to_file(config_path)


def get_notion_token(config: SyncConfig) -> str:
    """
    The Notion integration secret, taken from the environment variable named
    by ``config.notion_token_env``. Tokens are never stored in the config file.

    Raises:
        ConfigurationError: the variable is unset or blank
    """
    token = os.environ.get(config.notion_token_env, "").strip()
    if not token:
        raise ConfigurationError(
            f"Notion token not found. Set the {config.notion_token_env} environment variable "
            "to an internal integration secret."
        )
    return token
