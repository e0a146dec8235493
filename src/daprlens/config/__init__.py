"""Configuration models, YAML loading and logging setup."""

from .config_parser import ConfigError, load_config
from .config_schema import AppConfig, DiscoveryConfig, LoggingConfig
from .logging_config import init_logging

__all__ = [
    "AppConfig",
    "ConfigError",
    "DiscoveryConfig",
    "LoggingConfig",
    "init_logging",
    "load_config",
]
