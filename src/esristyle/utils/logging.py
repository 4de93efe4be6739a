# src/esristyle/utils/logging.py
"""
Centralized logging configuration for the esristyle application.
"""

import sys
from pathlib import Path
from typing import Dict, Optional

from loguru import logger

from esristyle.config import ConfigurationError, load_config
from esristyle.config.models import ConsoleLoggingConfig, FileLoggingConfig
from esristyle.utils.console import create_console

LEVEL_COLORS = {
    "ERROR": "bold red",
    "CRITICAL": "bold red",
    "WARNING": "bold orange1",
    "SUCCESS": "bold green",
}


class StyleLogger:
    """Centralized logger for the esristyle application with config integration."""

    def __init__(self):
        # stdout stays free for exported documents
        self.console = create_console(stderr=True)
        self._is_configured = False
        self._current_level = "INFO"
        self._log_file: Optional[Path] = None
        self._environment = "development"

    def setup(
        self,
        verbose: bool = False,
        log_file: Optional[Path] = None,
        environment: str = "development",
        config_path: Optional[Path] = None,
    ):
        """
        Setup logging using the configuration system.

        Args:
            verbose: Enable debug logging (overrides config)
            log_file: Optional custom log file path (overrides config)
            environment: Environment name for config loading
            config_path: Optional path to config file
        """
        if self._is_configured:
            return

        self._environment = environment

        try:
            app_config = load_config(config_path=config_path, environment=environment)
        except ConfigurationError as e:
            self._setup_fallback_logging(verbose)
            logger.warning(f"Failed to load config, using fallback logging: {e}")
            return

        logging_config = app_config.global_.logging
        log_level = "DEBUG" if verbose else app_config.global_.log_level
        self._current_level = log_level

        logger.remove()
        self._setup_console_logging(log_level, verbose, logging_config.console)

        if log_file:
            self._log_file = Path(log_file)
            self._setup_file_logging(log_level, FileLoggingConfig(enabled=True))
        elif logging_config.file.enabled:
            self._log_file = logging_config.get_file_path(environment)
            self._setup_file_logging(log_level, logging_config.file)

        if logging_config.modules:
            self._setup_module_logging(logging_config.modules)

        self._is_configured = True

        if verbose:
            self.console.print(
                f"[dim]Logging configured: level={log_level}, file={self._log_file}[/dim]"
            )
        logger.debug(f"esristyle logging initialized (level={log_level}, env={environment})")

    def _setup_fallback_logging(self, verbose: bool):
        """Console-only logging when the configuration cannot be loaded."""
        logger.remove()
        self._current_level = "DEBUG" if verbose else "INFO"
        logger.add(
            sys.stderr,
            format="{level}: {message}",
            level=self._current_level,
            colorize=False,
        )
        self._is_configured = True

    def _setup_console_logging(
        self, log_level: str, verbose: bool, console_config: ConsoleLoggingConfig
    ):
        detailed = verbose or console_config.format == "detailed"

        if not self.console.is_terminal:
            if detailed:
                format_str = "{time:HH:mm:ss} | {level: <8} | {name}:{function} - {message}"
            elif console_config.show_time:
                format_str = "{time:HH:mm:ss} | {level} | {message}"
            else:
                format_str = "{level} | {message}"

            logger.add(
                sys.stderr, format=format_str, level=log_level, colorize=False, diagnose=verbose
            )
            return

        def rich_sink(message):
            record = message.record
            level = record["level"].name
            style = LEVEL_COLORS.get(level, "bold")

            parts = []
            if console_config.show_time:
                parts.append(f"[green]{record['time'].strftime('%H:%M:%S')}[/green]")
            parts.append(f"[{style}]{level}[/{style}]")

            if detailed:
                location = f"{record['name']}:{record['function']}"
                if console_config.show_path:
                    location += f":{record['line']}"
                parts.append(f"[cyan]{location}[/cyan] - {record['message']}")
            else:
                parts.append(record["message"])

            self.console.print(" | ".join(parts), markup=True, highlight=False)

        logger.add(
            rich_sink,
            format="{message}",
            level=log_level,
            colorize=False,
            diagnose=verbose,
        )

    def _setup_file_logging(self, log_level: str, file_config: FileLoggingConfig):
        if not self._log_file:
            return

        self._log_file.parent.mkdir(parents=True, exist_ok=True)

        logger.add(
            str(self._log_file),
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
            level=log_level,
            rotation=file_config.rotation,
            retention=file_config.retention,
            compression=file_config.compression,
            enqueue=True,
        )

    def _setup_module_logging(self, modules_config: Dict[str, str]):
        """Setup module-specific log levels."""
        for module_name, level in modules_config.items():

            def create_module_filter(module):
                return lambda record: record["name"].startswith(module)

            logger.add(
                sys.stderr,
                format="{level} | {name} - {message}",
                level=level,
                filter=create_module_filter(module_name),
            )

    def reset(self):
        """Drop all sinks so the next setup() call configures logging again."""
        logger.remove()
        self._is_configured = False
        self._log_file = None

    def get_log_file_path(self) -> Optional[Path]:
        return self._log_file

    def show_log_info(self):
        """Display logging information."""
        self.console.print("[bold]Logging Configuration:[/bold]")
        self.console.print(f"  Environment: {self._environment}")
        self.console.print(f"  Level: {self._current_level}")
        self.console.print(f"  Log file: {self._log_file}")
        if self._log_file and self._log_file.exists():
            size_mb = self._log_file.stat().st_size / (1024 * 1024)
            self.console.print(f"  File size: {size_mb:.2f} MB")


# Global logger instance
style_logger = StyleLogger()


def setup_logging(
    verbose: bool = False,
    log_file: Optional[Path] = None,
    environment: str = "development",
    config_path: Optional[Path] = None,
):
    """
    Setup logging for the esristyle application.

    Args:
        verbose: Enable debug logging
        log_file: Optional custom log file path
        environment: Environment name
        config_path: Optional path to config file
    """
    style_logger.setup(
        verbose=verbose,
        log_file=log_file,
        environment=environment,
        config_path=config_path,
    )
