"""CLI module - Command-line interface components."""

from db_changelog.cli.main import declare_targets, main, run
from db_changelog.cli.parser import OutputSpec, build_parser, parse_arguments, parse_output_spec

__all__ = [
    "OutputSpec",
    "build_parser",
    "declare_targets",
    "main",
    "parse_arguments",
    "parse_output_spec",
    "run",
]
