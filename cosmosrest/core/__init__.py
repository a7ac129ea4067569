"""Core module initialization."""

from .config_manager import ConfigManager, CosmosRestConfig
from .logging_config import setup_logging, get_logger

__all__ = [
    "ConfigManager",
    "CosmosRestConfig",
    "setup_logging",
    "get_logger",
]
