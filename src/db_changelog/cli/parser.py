"""CLI argument parsing for db-changelog."""

from __future__ import annotations

import argparse
import os
from dataclasses import dataclass

import argcomplete

from db_changelog.core.constants import (
    DEFAULT_CHANGESET_AUTHOR,
    DEFAULT_OUTPUT_ENCODING,
    ENV_CHANGESET_AUTHOR,
    ENV_LOG_LEVEL,
    ENV_OUTPUT_ENCODING,
)
from db_changelog.core.version import __version__


@dataclass(frozen=True)
class OutputSpec:
    """One requested output, as given on the command line."""

    format_name: str | None
    path: str
    encoding: str | None = None


def _split_encoding(value: str) -> tuple[str, str | None]:
    """Split 'PATH:ENCODING'. A trailing part containing a path separator is not an encoding."""
    path, sep, encoding = value.rpartition(":")
    if not sep or not path or not encoding or "/" in encoding or "\\" in encoding:
        return value, None
    return path, encoding


def parse_output_spec(value: str) -> OutputSpec:
    """Parse a ``--output`` value: 'FORMAT=PATH[:ENCODING]' or just 'PATH[:ENCODING]'."""
    value = value.strip()
    if not value:
        raise argparse.ArgumentTypeError("output value must not be empty")

    format_name, sep, rest = value.partition("=")
    if not sep:
        format_name, rest = None, value
    elif not format_name.strip() or not rest.strip():
        raise argparse.ArgumentTypeError(f"expected FORMAT=PATH[:ENCODING], got '{value}'")

    path, encoding = _split_encoding(rest.strip())
    return OutputSpec(format_name=format_name.strip() if format_name else None, path=path, encoding=encoding)


def parse_encoding_override(value: str) -> tuple[str, str]:
    """Parse an ``--encoding-for`` value: 'PATH=ENCODING'."""
    path, sep, encoding = value.rpartition("=")
    if not sep or not path.strip() or not encoding.strip():
        raise argparse.ArgumentTypeError(f"expected PATH=ENCODING, got '{value}'")
    return path.strip(), encoding.strip()


class _AppendOutput(argparse.Action):
    """Append an OutputSpec for a fixed format (``--xml PATH`` and friends)."""

    def __init__(self, option_strings, dest, format_name: str | None = None, **kwargs):
        self.format_name = format_name
        super().__init__(option_strings, dest, **kwargs)

    def __call__(self, parser, namespace, values, option_string=None):
        outputs = list(getattr(namespace, self.dest, None) or [])
        if isinstance(values, OutputSpec):
            outputs.append(values)
        else:
            path, encoding = _split_encoding(values)
            outputs.append(OutputSpec(format_name=self.format_name, path=path, encoding=encoding))
        setattr(namespace, self.dest, outputs)


def build_parser() -> argparse.ArgumentParser:
    """Build the db-changelog argument parser."""
    parser = argparse.ArgumentParser(
        prog="db-changelog",
        description="db-changelog - Write a schema diff result to one or more changelog files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # One XML changelog
  db-changelog diff.json --xml changelog.xml

  # Several formats from the same diff, each with its own encoding
  db-changelog diff.json --xml out/changelog.xml --txt out/changelog.txt:UTF-16

  # Generic form; format inferred from the extension when omitted
  db-changelog diff.json --output yaml=changelog.yml --output report.csv

  # Write to standard output
  db-changelog diff.json --yaml -

  # Only emit objects belonging to tables matching a pattern
  db-changelog diff.json --xml changelog.xml --include-objects "table:orders.*"

  # Skip schema qualifiers and one table
  db-changelog diff.json --xml changelog.xml --no-include-schema --exclude-objects table1

Exit Codes:
  0 - Every changelog output was written
  1 - At least one changelog output failed
  2 - Configuration error (unknown format, conflicting filters, no outputs, unreadable diff file)
        """,
    )

    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}", help="Show program version and exit"
    )

    parser.add_argument(
        "diff_file",
        metavar="DIFF_FILE",
        help="JSON diff result produced by a schema comparison",
    )

    # ---- Outputs ----
    output_group = parser.add_argument_group("Outputs", "Each option may be repeated; outputs are written in order")
    for format_name in ("xml", "yaml", "json", "txt", "csv"):
        output_group.add_argument(
            f"--{format_name}",
            dest="outputs",
            action=_AppendOutput,
            format_name=format_name,
            metavar="PATH[:ENCODING]",
            help=f"Write a {format_name} changelog to PATH ('-' for stdout)",
        )
    output_group.add_argument(
        "--output",
        dest="outputs",
        action=_AppendOutput,
        type=parse_output_spec,
        metavar="[FORMAT=]PATH[:ENCODING]",
        help="Write a changelog to PATH; the format is inferred from the extension when omitted",
    )
    output_group.add_argument(
        "--encoding-for",
        dest="encoding_overrides",
        action="append",
        type=parse_encoding_override,
        default=[],
        metavar="PATH=ENCODING",
        help="Set the encoding for the output written to PATH",
    )
    output_group.add_argument(
        "--output-encoding",
        default=os.environ.get(ENV_OUTPUT_ENCODING, DEFAULT_OUTPUT_ENCODING),
        metavar="ENCODING",
        help=f"Default encoding for outputs without an override "
        f"(default: {DEFAULT_OUTPUT_ENCODING}, or {ENV_OUTPUT_ENCODING} env var)",
    )
    output_group.add_argument(
        "--author",
        default=os.environ.get(ENV_CHANGESET_AUTHOR, DEFAULT_CHANGESET_AUTHOR),
        help=f"Author recorded on generated change sets (default: '{DEFAULT_CHANGESET_AUTHOR}', "
        f"or {ENV_CHANGESET_AUTHOR} env var)",
    )

    # ---- Filtering ----
    filter_group = parser.add_argument_group("Filtering")
    filter_group.add_argument(
        "--include-objects",
        metavar="PATTERNS",
        help="Only emit objects matching these comma-separated patterns ('regex' or 'type:regex')",
    )
    filter_group.add_argument(
        "--exclude-objects",
        metavar="PATTERNS",
        help="Emit every object except those matching these patterns (cannot be combined with --include-objects)",
    )
    filter_group.add_argument(
        "--no-include-catalog",
        dest="include_catalog",
        action="store_false",
        help="Omit catalog names from emitted changes",
    )
    filter_group.add_argument(
        "--no-include-schema",
        dest="include_schema",
        action="store_false",
        help="Omit schema names from emitted changes",
    )
    filter_group.add_argument(
        "--no-include-tablespace",
        dest="include_tablespace",
        action="store_false",
        help="Omit tablespace names from emitted changes",
    )

    # ---- Diagnostics ----
    log_group = parser.add_argument_group("Diagnostics")
    log_group.add_argument(
        "--log-level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "SEVERE"],
        default=os.environ.get(ENV_LOG_LEVEL, "INFO").upper(),
        help=f"Minimum diagnostic level (default: INFO, or {ENV_LOG_LEVEL} env var)",
    )
    log_group.add_argument(
        "--log-file",
        help="Append WARNING and SEVERE diagnostics to this file instead of stderr",
    )
    log_group.add_argument(
        "--log-format",
        choices=["text", "json"],
        default="text",
        help="Diagnostic line format: text (default) or json (one JSON object per line)",
    )
    log_group.add_argument("--progress", action="store_true", help="Show a progress bar while writing outputs")
    log_group.add_argument("--no-color", action="store_true", help="Disable ANSI colors in the report")

    parser.set_defaults(outputs=[])
    return parser


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments"""
    parser = build_parser()

    # Enable shell tab-completion
    argcomplete.autocomplete(parser)

    return parser.parse_args(argv)
