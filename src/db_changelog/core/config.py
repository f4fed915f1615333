"""Configuration dataclasses for db-changelog.

These dataclasses centralize run-level options for type safety and easy
testing. They can be created from command-line arguments or used directly
in code.
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass, field


@dataclass
class LogConfig:
    """Configuration for diagnostic output.

    Attributes:
        level: Minimum level string (DEBUG, INFO, WARNING, SEVERE)
        log_file: Optional file that receives WARNING and SEVERE messages
        log_format: "text" (default) or "json" for structured lines
    """

    level: str = "INFO"
    log_file: str | None = None
    log_format: str = "text"


@dataclass
class EmissionConfig:
    """Run-level configuration for changelog emission.

    Attributes:
        default_encoding: Encoding used by targets without an explicit override
        changeset_author: Author recorded on every generated change set
        show_progress: Show a progress bar while targets are written
        log: Logging configuration
    """

    default_encoding: str = "UTF-8"
    changeset_author: str = "db-changelog (generated)"
    show_progress: bool = False
    log: LogConfig = field(default_factory=LogConfig)

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> EmissionConfig:
        """Create configuration from parsed command-line arguments."""
        return cls(
            default_encoding=getattr(args, "output_encoding", None) or "UTF-8",
            changeset_author=getattr(args, "author", None) or "db-changelog (generated)",
            show_progress=getattr(args, "progress", False),
            log=LogConfig(
                level=getattr(args, "log_level", "INFO"),
                log_file=getattr(args, "log_file", None),
                log_format=getattr(args, "log_format", "text"),
            ),
        )
