"""Configuration and logging setup."""

from .settings import BotConfig, Settings, get_settings, load_config, load_secret_key
from .logging_config import close_logging, get_logger, setup_logging

__all__ = [
    "BotConfig",
    "Settings",
    "get_settings",
    "load_config",
    "load_secret_key",
    "close_logging",
    "get_logger",
    "setup_logging",
]
