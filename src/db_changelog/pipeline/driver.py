"""Emission driver: writes one diff result to every declared output target.

Targets are processed sequentially in declaration order. A failure on one
target is recorded in its EmissionResult and never stops the remaining
targets. Every stream that was opened is flushed and closed exactly once.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import TextIO

from tqdm import tqdm

from db_changelog.core.colors import _format_error_msg
from db_changelog.core.config import EmissionConfig
from db_changelog.core.constants import DEFAULT_CHANGESET_AUTHOR, DEFAULT_OUTPUT_ENCODING, TQDM_BAR_FORMAT
from db_changelog.core.exceptions import (
    DataAccessError,
    DestinationOpenError,
    NoOutputTargetsError,
    OpenError,
    OutputError,
    SerializationError,
    UnsupportedEncodingError,
)
from db_changelog.core.logging import DiagnosticSink
from db_changelog.diff.filters import FilterPolicy
from db_changelog.diff.models import DiffResult
from db_changelog.output.registry import available_formats
from db_changelog.pipeline.destinations import FileDestination
from db_changelog.pipeline.models import EmissionResult, FailureKind, OutputTarget

module_logger = logging.getLogger(__name__)


def _resolve_logger(logger: logging.Logger | DiagnosticSink | None) -> logging.Logger:
    if logger is None:
        return module_logger
    if isinstance(logger, DiagnosticSink):
        return logger.logger
    return logger


def _open_target(target: OutputTarget, encoding: str) -> TextIO:
    """Open the target's destination, normalizing stray errors into OpenError subclasses."""
    description = target.describe()
    try:
        return target.destination.open(encoding)
    except OpenError as e:
        if e.output_format is None:
            e.output_format = target.format_name
        raise
    except LookupError as e:
        raise UnsupportedEncodingError(
            encoding, output_path=description, output_format=target.format_name, original_error=e
        ) from e
    except OSError as e:
        raise DestinationOpenError(
            "Unable to diff databases to change log file. Error creating output stream",
            output_path=description,
            output_format=target.format_name,
            details=str(e),
            original_error=e,
        ) from e


def _release(stream: TextIO) -> Exception | None:
    """Flush then close ``stream``. Close runs even when flush fails.

    Returns the first error raised, if any.
    """
    error: Exception | None = None
    try:
        stream.flush()
    except Exception as e:
        error = e
    try:
        stream.close()
    except Exception as e:
        if error is None:
            error = e
    return error


def _written_size(target: OutputTarget) -> int:
    if isinstance(target.destination, FileDestination):
        try:
            return target.destination.path.stat().st_size
        except OSError:
            return 0
    return 0


def emit_target(
    index: int,
    target: OutputTarget,
    diff_result: DiffResult,
    policy: FilterPolicy,
    default_encoding: str = DEFAULT_OUTPUT_ENCODING,
    *,
    author: str = DEFAULT_CHANGESET_AUTHOR,
    logger: logging.Logger | DiagnosticSink | None = None,
) -> EmissionResult:
    """Write one output target and return its result.

    Only non-``Exception`` errors (KeyboardInterrupt, SystemExit) propagate,
    and only after the opened stream has been released.
    """
    log = _resolve_logger(logger)
    encoding = target.resolve_encoding(default_encoding)
    description = target.describe()
    start_time = time.time()

    result = EmissionResult(
        index=index,
        destination=description,
        format_name=target.format_name,
        encoding=encoding,
        success=False,
    )

    log.debug(f"Writing {target.format_name} changelog #{index} to {description} ({encoding})")
    try:
        stream = _open_target(target, encoding)
    except OpenError as e:
        result.failure = (
            FailureKind.UNSUPPORTED_ENCODING
            if isinstance(e, UnsupportedEncodingError)
            else FailureKind.DESTINATION_UNOPENABLE
        )
        result.error = e
        result.duration = time.time() - start_time
        log.warning(f"Changelog target #{index} ({description}) failed: {e}")
        log.debug("Open failure details", exc_info=e)
        return result

    error: OutputError | None = None
    failure: FailureKind | None = None
    try:
        target.serializer.write(diff_result, policy, stream, author=author)
    except DataAccessError as e:
        failure = FailureKind.DATA_ACCESS
        error = SerializationError(
            _format_error_msg("reading diff data", target.format_name),
            output_path=description,
            output_format=target.format_name,
            details=str(e),
            original_error=e,
        )
    except Exception as e:
        failure = FailureKind.SERIALIZATION
        if isinstance(e, SerializationError):
            if e.output_path is None:
                e.output_path = description
            error = e
        else:
            error = SerializationError(
                _format_error_msg("serializing", target.format_name),
                output_path=description,
                output_format=target.format_name,
                details=f"{type(e).__name__}: {e}",
                original_error=e,
            )
    finally:
        release_error = _release(stream)

    if error is None and release_error is not None:
        failure = FailureKind.SERIALIZATION
        error = SerializationError(
            "Unable to flush or close changelog output",
            output_path=description,
            output_format=target.format_name,
            details=str(release_error),
            original_error=release_error,
        )

    result.duration = time.time() - start_time
    if error is not None:
        result.failure = failure
        result.error = error
        log.warning(f"Changelog target #{index} ({description}) failed: {error}")
        log.debug("Serialization failure details", exc_info=error.original_error or error)
        return result

    result.success = True
    result.file_size_bytes = _written_size(target)
    log.debug(f"Changelog target #{index} written to {description} in {result.duration:.2f}s")
    return result


def run_emission(
    targets: Iterable[OutputTarget],
    diff_result: DiffResult,
    policy: FilterPolicy,
    default_encoding: str = DEFAULT_OUTPUT_ENCODING,
    *,
    author: str = DEFAULT_CHANGESET_AUTHOR,
    logger: logging.Logger | DiagnosticSink | None = None,
    show_progress: bool = False,
) -> list[EmissionResult]:
    """
    Write ``diff_result`` to every target, in declaration order.

    Args:
        targets: Output targets to write
        diff_result: Shared, read-only diff result
        policy: Shared, read-only filter policy
        default_encoding: Encoding for targets without an override
        author: Author recorded on generated change sets
        logger: Logger or DiagnosticSink receiving diagnostics
        show_progress: Show a tqdm progress bar

    Returns:
        One EmissionResult per target, in the same order. This function does
        not raise because a target failed.
    """
    target_list = list(targets)
    results = []

    with tqdm(
        total=len(target_list),
        desc="Writing changelogs",
        unit="target",
        bar_format=TQDM_BAR_FORMAT,
        leave=False,
        disable=not show_progress,
    ) as pbar:
        for index, target in enumerate(target_list, start=1):
            result = emit_target(
                index, target, diff_result, policy, default_encoding, author=author, logger=logger
            )
            results.append(result)
            pbar.set_postfix_str(f"{'✓' if result.success else '✗'} {result.destination}", refresh=True)
            pbar.update(1)

    return results


@dataclass(frozen=True)
class ChangeLogPipeline:
    """Validated emission configuration: targets, filter policy and run defaults.

    Construction fails with NoOutputTargetsError when no target is given, so
    a pipeline always has something to write.
    """

    targets: Sequence[OutputTarget]
    policy: FilterPolicy = field(default_factory=FilterPolicy)
    default_encoding: str = DEFAULT_OUTPUT_ENCODING
    author: str = DEFAULT_CHANGESET_AUTHOR

    def __post_init__(self) -> None:
        object.__setattr__(self, "targets", tuple(self.targets))
        if not self.targets:
            raise NoOutputTargetsError(available_formats())

    @classmethod
    def from_config(
        cls, targets: Sequence[OutputTarget], policy: FilterPolicy, config: EmissionConfig
    ) -> ChangeLogPipeline:
        return cls(
            targets=targets,
            policy=policy,
            default_encoding=config.default_encoding,
            author=config.changeset_author,
        )

    def run(
        self,
        diff_result: DiffResult,
        logger: logging.Logger | DiagnosticSink | None = None,
        show_progress: bool = False,
    ) -> list[EmissionResult]:
        log = _resolve_logger(logger)
        log.info(f"Writing {len(self.targets)} changelog output(s): {diff_result.summary.total_summary}")
        return run_emission(
            self.targets,
            diff_result,
            self.policy,
            self.default_encoding,
            author=self.author,
            logger=logger,
            show_progress=show_progress,
        )
