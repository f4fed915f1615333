"""db-changelog command-line entry point."""

from __future__ import annotations

import argparse
import sys
from typing import TextIO

from dotenv import load_dotenv

from db_changelog.cli.parser import OutputSpec, parse_arguments
from db_changelog.core.colors import ConsoleColors
from db_changelog.core.config import EmissionConfig
from db_changelog.core.constants import BANNER_WIDTH, STDOUT_DESTINATIONS
from db_changelog.core.exceptions import ConfigurationError
from db_changelog.core.logging import DiagnosticSink, setup_logging
from db_changelog.diff.filters import build_filter_policy
from db_changelog.diff.models import load_diff_result
from db_changelog.pipeline.driver import ChangeLogPipeline
from db_changelog.pipeline.models import EmissionResult, OutputTarget
from db_changelog.pipeline.summary import (
    append_github_step_summary,
    build_emission_step_summary,
    summarize_results,
)
from db_changelog.pipeline.targets import declare_target

EXIT_SUCCESS = 0
EXIT_TARGET_FAILED = 1
EXIT_CONFIG_ERROR = 2


def declare_targets(outputs: list[OutputSpec], encoding_overrides: list[tuple[str, str]]) -> list[OutputTarget]:
    """Declare one target per requested output, applying ``--encoding-for`` overrides by path."""
    overrides = dict(encoding_overrides)
    targets = []
    for spec in outputs:
        encoding = spec.encoding or overrides.get(spec.path)
        targets.append(declare_target(spec.path, spec.format_name, encoding))
    return targets


def print_report(results: list[EmissionResult], stream: TextIO) -> None:
    """Print one line per target followed by the overall verdict."""
    summary = summarize_results(results)
    print("=" * BANNER_WIDTH, file=stream)
    print(ConsoleColors.bold("CHANGELOG OUTPUTS"), file=stream)
    print("=" * BANNER_WIDTH, file=stream)
    for result in results:
        if result.success:
            mark = ConsoleColors.success("✓")
            detail = ""
            if result.file_size_bytes:
                detail = ConsoleColors.dim(f"{result.file_size_formatted}, {result.duration:.2f}s")
        else:
            mark = ConsoleColors.error("✗")
            detail = ConsoleColors.error(result.error_message)
        label = f"#{result.index} {result.format_name:<5} {result.encoding:<8}"
        print(f"  {mark} {ConsoleColors.ljust(label, 22)} {result.destination}  {detail}".rstrip(), file=stream)
    print("-" * BANNER_WIDTH, file=stream)
    print(ConsoleColors.status(summary.all_succeeded, summary.message), file=stream)


def _writes_stdout(args: argparse.Namespace) -> bool:
    return any(spec.path in STDOUT_DESTINATIONS for spec in args.outputs)


def run(args: argparse.Namespace) -> int:
    """Run the CLI for already parsed arguments and return the exit code."""
    config = EmissionConfig.from_args(args)

    # Keep diagnostics and the report off stdout when a changelog goes there
    console = sys.stderr if _writes_stdout(args) else sys.stdout
    ConsoleColors.configure(no_color=getattr(args, "no_color", False), stream=console)

    try:
        sink = setup_logging(
            config.log.level,
            config.log.log_file,
            config.log.log_format,
            encoding=config.default_encoding,
            stdout=console,
        )
    except ConfigurationError as e:
        print(ConsoleColors.error(f"ERROR: {e}"), file=sys.stderr)
        return EXIT_CONFIG_ERROR

    try:
        return _run_pipeline(args, config, sink, console)
    finally:
        sink.close()


def _run_pipeline(args: argparse.Namespace, config: EmissionConfig, sink: DiagnosticSink, console: TextIO) -> int:
    logger = sink.logger
    try:
        policy = build_filter_policy(
            include_catalog=args.include_catalog,
            include_schema=args.include_schema,
            include_tablespace=args.include_tablespace,
            include_objects=args.include_objects,
            exclude_objects=args.exclude_objects,
        )
        targets = declare_targets(args.outputs, args.encoding_overrides)
        pipeline = ChangeLogPipeline.from_config(targets, policy, config)
        diff_result = load_diff_result(args.diff_file)
    except ConfigurationError as e:
        sink.debug(f"Configuration error: {e}")
        print(ConsoleColors.error(f"ERROR: {e}"), file=sys.stderr)
        return EXIT_CONFIG_ERROR

    logger.info(f"Diff result loaded from {args.diff_file}: {diff_result.summary.natural_language_summary}")
    results = pipeline.run(diff_result, logger=sink, show_progress=config.show_progress)

    print_report(results, console)

    append_github_step_summary(build_emission_step_summary(results), logger)

    summary = summarize_results(results)
    if summary.all_succeeded:
        logger.info(summary.message)
        return EXIT_SUCCESS
    logger.warning(summary.message)
    return EXIT_TARGET_FAILED


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the script"""
    load_dotenv()

    args = parse_arguments(argv)
    sys.exit(run(args))


if __name__ == "__main__":
    main()
