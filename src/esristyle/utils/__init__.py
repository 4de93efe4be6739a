"""
esristyle utilities module.
"""

from esristyle.utils.console import console, create_console
from esristyle.utils.logging import logger, setup_logging, style_logger

__all__ = [
    "console",
    "create_console",
    "logger",
    "setup_logging",
    "style_logger",
]
