# src/esristyle/config/__init__.py
"""
Configuration system using Pydantic
"""

from esristyle.config.exceptions import (ConfigurationError,
                                         ConfigurationNotFoundError,
                                         ConfigurationValidationError)
from esristyle.config.loader import ConfigManager, get_config, load_config
from esristyle.config.models import (AppConfig, GlobalConfig, LoggingConfig,
                                     ProxyConfig, StyleConfig)

DEFAULT_ENVIRONMENT = "development"

ENVIRONMENTS = ("development", "production", "test")

__all__ = [
    "AppConfig",
    "ConfigManager",
    "ConfigurationError",
    "ConfigurationNotFoundError",
    "ConfigurationValidationError",
    "DEFAULT_ENVIRONMENT",
    "ENVIRONMENTS",
    "GlobalConfig",
    "LoggingConfig",
    "ProxyConfig",
    "StyleConfig",
    "get_config",
    "load_config",
]
