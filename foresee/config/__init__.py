from .app_config import AppConfig
from .log_config import LogConfig
from .training_config import TrainingConfig

__all__ = ["AppConfig", "LogConfig", "TrainingConfig"]
