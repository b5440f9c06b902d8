"""Configuration package for snapkeep.

Example:
    >>> from snapkeep.config import ConfigLoader
    >>> config = ConfigLoader().load()
    >>> project = config.get_project("web")
    >>> target = config.get_target()
"""

from .config_loader import (
    DEFAULT_CONFIG_NAME,
    DEFAULT_MAX_BACKUPS,
    AppConfig,
    ConfigLoader,
    LoadedConfig,
)

__all__ = [
    "DEFAULT_CONFIG_NAME",
    "DEFAULT_MAX_BACKUPS",
    "AppConfig",
    "ConfigLoader",
    "LoadedConfig",
]
