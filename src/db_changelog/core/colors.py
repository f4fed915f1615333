"""Console colors and formatting utilities for db-changelog.

ANSI styling for the CLI report. Styling is off when the report stream is not a
terminal, when NO_COLOR is set, or when --no-color is given.
"""

import os
import re
import sys
from typing import TextIO


def _terminal_supports_color(stream: TextIO | None = None) -> bool:
    stream = stream if stream is not None else sys.stdout
    return hasattr(stream, 'isatty') and stream.isatty() and (os.name != 'nt' or bool(os.environ.get('TERM')))


class ConsoleColors:
    """ANSI styling for report lines.

    All methods return ``text`` unchanged while colors are disabled, so
    callers never need to check ``is_enabled()`` themselves.
    """
    GREEN = '\033[92m'
    RED = '\033[91m'
    BOLD = '\033[1m'
    DIM = '\033[90m'
    RESET = '\033[0m'
    ANSI_ESCAPE = re.compile(r'\033\[[0-9;]*m')

    _enabled = _terminal_supports_color()

    @classmethod
    def configure(cls, no_color: bool = False, stream: TextIO | None = None) -> None:
        """Apply the color policy for the stream the report is printed to (default: stdout).

        --no-color and NO_COLOR win over TTY detection.
        """
        cls._enabled = not (no_color or os.environ.get('NO_COLOR')) and _terminal_supports_color(stream)

    @classmethod
    def is_enabled(cls) -> bool:
        return cls._enabled

    @classmethod
    def _wrap(cls, style: str, text: str) -> str:
        return f"{style}{text}{cls.RESET}" if cls._enabled else text

    @classmethod
    def success(cls, text: str) -> str:
        return cls._wrap(cls.GREEN, text)

    @classmethod
    def error(cls, text: str) -> str:
        return cls._wrap(cls.RED, text)

    @classmethod
    def bold(cls, text: str) -> str:
        return cls._wrap(cls.BOLD, text)

    @classmethod
    def dim(cls, text: str) -> str:
        return cls._wrap(cls.DIM, text)

    @classmethod
    def status(cls, success: bool, text: str) -> str:
        """Green for success, red for failure."""
        return cls.success(text) if success else cls.error(text)

    @classmethod
    def visible_len(cls, text: str) -> int:
        """Length of ``text`` as shown on screen, ignoring escape codes."""
        return len(cls.ANSI_ESCAPE.sub('', text))

    @classmethod
    def ljust(cls, text: str, width: int) -> str:
        return text + ' ' * max(0, width - cls.visible_len(text))


def format_file_size(size_bytes: int) -> str:
    """
    Format a byte count for the report.

    Args:
        size_bytes: Size in bytes

    Returns:
        Human-readable string (e.g., "1.5 MB", "256 KB", "42 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    size = size_bytes / 1024
    for unit in ['KB', 'MB', 'GB']:
        if size < 1024:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} TB"


def _format_error_msg(operation: str, item_type: str | None = None, error: Exception | None = None) -> str:
    """
    Build an error message of the form 'Error <operation> for <item_type>: <error>'.

    Args:
        operation: What failed (e.g., "serializing")
        item_type: Optional context such as the changelog format
        error: Optional exception appended to the message
    """
    msg = f"Error {operation}"
    if item_type:
        msg += f" for {item_type}"
    if error:
        msg += f": {error}"
    return msg
