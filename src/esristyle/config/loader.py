"""
Configuration loader supporting separate environment files
"""

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from loguru import logger
from pydantic import ValidationError

from esristyle.config.exceptions import (ConfigurationNotFoundError,
                                         ConfigurationValidationError)
from esristyle.config.models import AppConfig

ENV_PREFIX = "ESRISTYLE"
ENV_SECTIONS = {"global": "GLOBAL", "style": "STYLE"}


class ConfigManager:
    """Config manager supporting a base file, environment files and env overrides"""

    def __init__(self):
        self._config: Optional[AppConfig] = None

    def load_config(
        self,
        config_path: Optional[Path] = None,
        environment: str = "development",
    ) -> AppConfig:
        """
        Load configuration.

        1. base file (``config/esristyle_config.yaml`` unless given), built-in
           defaults when none is found
        2. ``environments/<environment>.yaml`` next to the base file
        3. ``ESRISTYLE_GLOBAL_*`` and ``ESRISTYLE_STYLE_*`` environment variables

        Raises:
            ConfigurationNotFoundError: an explicit config_path does not exist
            ConfigurationValidationError: the merged configuration is invalid
        """
        logger.debug(f"Environment: {environment}")

        if config_path is not None:
            config_path = Path(config_path)
            if not config_path.exists():
                raise ConfigurationNotFoundError(f"Configuration file not found: {config_path}")

        base_config_data = self._load_base_config(config_path)

        env_config_data = self._load_environment_config(config_path, environment)
        if env_config_data:
            self._merge_configs(base_config_data, env_config_data)

        self._apply_env_overrides(base_config_data)

        try:
            self._config = AppConfig(**base_config_data)
        except ValidationError as e:
            raise ConfigurationValidationError(f"Invalid configuration: {e}") from e
        return self._config

    def get_config(self) -> AppConfig:
        """Get loaded configuration"""
        if self._config is None:
            raise ValueError("Configuration not loaded. Call load_config() first.")
        return self._config

    def _load_base_config(self, config_path: Optional[Path]) -> Dict[str, Any]:
        """Load the base configuration file"""
        if config_path is None:
            config_path = self._find_base_config_file()
            if config_path is None:
                logger.debug("No base config file found, using defaults")
                return {}

        logger.debug(f"Loading base config: {config_path}")
        with open(config_path, "r") as f:
            return yaml.safe_load(f) or {}

    def _load_environment_config(
        self, base_config_path: Optional[Path], environment: str
    ) -> Optional[Dict[str, Any]]:
        """Load environment-specific configuration file"""
        for env_path in self._find_environment_config_paths(base_config_path, environment):
            if env_path.exists():
                logger.debug(f"Loading environment config: {env_path}")
                with open(env_path, "r") as f:
                    env_config = yaml.safe_load(f)

                if env_config:
                    return env_config
                logger.warning(f"Environment config is empty: {env_path}")

        logger.debug(f"No environment config found for '{environment}'")
        return None

    def _find_base_config_file(self) -> Optional[Path]:
        search_paths = [
            Path("config/esristyle_config.yaml"),
            Path("config/config.yaml"),
            Path("~/.config/esristyle/config.yaml").expanduser(),
        ]
        for path in search_paths:
            if path.exists():
                return path
        return None

    def _find_environment_config_paths(
        self, base_config_path: Optional[Path], environment: str
    ) -> List[Path]:
        base_dir = base_config_path.parent if base_config_path else Path("config")
        return [
            base_dir / "environments" / f"{environment}.yaml",
            base_dir / "environments" / f"{environment}.yml",
            base_dir / f"{environment}.yaml",
        ]

    def _merge_configs(self, base: Dict[str, Any], override: Dict[str, Any]) -> None:
        """Recursively merge configuration dictionaries"""
        for key, value in override.items():
            if key.startswith("_"):  # Skip meta keys like _environment
                continue

            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._merge_configs(base[key], value)
            else:
                base[key] = value
                logger.debug(f"Override: {key} = {value}")

    def _apply_env_overrides(self, config: Dict[str, Any]) -> None:
        """Apply environment variable overrides"""
        for section, name in ENV_SECTIONS.items():
            prefix = f"{ENV_PREFIX}_{name}_"
            overrides = {
                env_var[len(prefix):].lower(): value
                for env_var, value in os.environ.items()
                if env_var.startswith(prefix)
            }
            if not overrides:
                continue

            section_data = config.setdefault(section, {})
            for key, value in overrides.items():
                self._set_nested_value(section_data, key, value)
                logger.debug(f"Env override: {prefix}{key.upper()} = {value}")

    def _set_nested_value(self, config: Dict[str, Any], key: str, value: str) -> None:
        """
        Set a value addressed by an env var suffix.

        Keys that exist at the current level win over a nested split, so
        ``STYLE_GROUP_BY_LABEL`` sets ``group_by_label`` rather than
        ``group.by.label``.
        """
        current = config
        parts = key.split("_")
        while parts:
            joined = "_".join(parts)
            if joined in current or len(parts) == 1 or not isinstance(
                current.get(parts[0]), dict
            ):
                current[joined] = value
                return
            current = current[parts.pop(0)]


# Global instance
_config_manager = ConfigManager()


def load_config(
    config_path: Optional[Path] = None, environment: str = "development"
) -> AppConfig:
    """Load configuration with separate environment files"""
    return _config_manager.load_config(config_path, environment)


def get_config() -> AppConfig:
    """Get the loaded configuration"""
    return _config_manager.get_config()
