"""Textual TUI for parley.

Hides the terminal presentation: message rendering, input handling and how
streamed updates reach the screen.
"""

from .app import ParleyApp, run_textual_tui
from .callbacks import DebugRouter, TextualPresenter
from .commands import parse_file_command
from .config import LogLevel

__all__ = [
    "DebugRouter",
    "LogLevel",
    "ParleyApp",
    "TextualPresenter",
    "parse_file_command",
    "run_textual_tui",
]
