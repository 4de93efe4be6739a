"""
Command line interface for esristyle
"""

from esristyle.cli.main import cli
from esristyle.cli.style_cmd import style_commands

__all__ = ["cli", "style_commands"]
