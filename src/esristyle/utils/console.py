"""
Rich console shared by the CLI.
"""
import os
import sys

from rich.console import Console


def create_console(stderr: bool = False) -> Console:
    """
    Create a Rich console adapted to the environment.

    Legacy Windows consoles get ASCII box drawing; pipes and redirects get
    plain output.
    """
    stream = sys.stderr if stderr else sys.stdout
    console_kwargs = {"force_terminal": True if stream.isatty() else None}

    if os.name == "nt" and not (
        os.environ.get("WT_SESSION") or os.environ.get("TERM_PROGRAM") == "vscode"
    ):
        console_kwargs.update(legacy_windows=True, safe_box=True)

    return Console(stderr=stderr, **console_kwargs)


console = create_console()
