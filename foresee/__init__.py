#!filepath: foresee/__init__.py

from .utils.logger import Logging, logs, init_logging
from .config.app_config import AppConfig
from .registry import list_strategies

__all__ = [
    "logs", "Logging", "init_logging",
    "AppConfig",
    "list_strategies",
]
