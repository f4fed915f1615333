"""Logging helpers for db-changelog.

The diagnostic sink is a thin layer over the standard library ``logging``
package: a minimum-level gate on the ``db_changelog`` logger plus two
handlers, one for DEBUG/INFO output and one for WARNING/SEVERE output.
"""

from __future__ import annotations

import atexit
import json
import logging
import os
import sys
from datetime import UTC, datetime
from enum import IntEnum
from pathlib import Path
from typing import TextIO

from db_changelog.core.exceptions import ConfigurationError, InternalError

# SEVERE sits above the stdlib ERROR level so it never collides with ERROR's name.
SEVERE = 45
logging.addLevelName(SEVERE, "SEVERE")

DEFAULT_LOGGER_NAME = "db_changelog"
TEXT_LOG_FORMAT = "[%(levelname)s] %(asctime)s: %(name)s: %(message)s"
TEXT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_SINK_HANDLER_ATTR = "_db_changelog_sink_handler"
_LEVEL_ALIASES = {"WARN": "WARNING", "ERROR": "SEVERE", "CRITICAL": "SEVERE"}


class LogLevel(IntEnum):
    """Severity levels understood by the diagnostic sink."""

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    SEVERE = SEVERE

    @classmethod
    def parse(cls, value: LogLevel | int | str) -> LogLevel:
        """Resolve a level from an enum member, a numeric level or a name.

        Raises:
            InternalError: If the value is not a known level
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            name = value.strip().upper()
            name = _LEVEL_ALIASES.get(name, name)
            if name in cls.__members__:
                return cls[name]
        elif isinstance(value, int) and not isinstance(value, bool):
            try:
                return cls(value)
            except ValueError:
                pass
        raise InternalError(f"Encountered an unknown log level: {value!r}")


class _LevelRangeFilter(logging.Filter):
    """Pass records whose level lies in [minimum, maximum)."""

    def __init__(self, minimum: int, maximum: int | None = None):
        super().__init__()
        self.minimum = minimum
        self.maximum = maximum

    def filter(self, record: logging.LogRecord) -> bool:
        if record.levelno < self.minimum:
            return False
        return self.maximum is None or record.levelno < self.maximum


class _NonBlankFilter(logging.Filter):
    """Drop records whose rendered message is empty or whitespace."""

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            message = record.getMessage()
        except Exception:
            # Keep logging resilient when message formatting fails; let the formatter report it.
            return True
        return bool(message and message.strip())


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging output.

    Each log record is a single JSON object on one line.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def _build_formatter(log_format: str) -> logging.Formatter:
    if log_format.lower() == "json":
        return JSONFormatter()
    return logging.Formatter(TEXT_LOG_FORMAT, datefmt=TEXT_DATE_FORMAT)


class DiagnosticSink:
    """Severity-gated diagnostic channel with separate output and error routes.

    DEBUG and INFO lines go to ``stdout``; WARNING and SEVERE lines go to
    ``stderr`` or, once a log file is set, to that file. Streams are fixed at
    construction and nothing global is swapped. ``close_log_file()`` restores
    the error route to the stream given at construction, and ``close()``
    (also called on context manager exit) detaches the sink from its logger.

    Example:
        with DiagnosticSink(level="WARNING") as sink:
            sink.severe("Unable to write changelog")
    """

    def __init__(
        self,
        name: str = DEFAULT_LOGGER_NAME,
        level: LogLevel | int | str = LogLevel.INFO,
        *,
        stdout: TextIO | None = None,
        stderr: TextIO | None = None,
        log_file: str | os.PathLike | None = None,
        encoding: str = "UTF-8",
        log_format: str = "text",
    ):
        self.name = name
        self.encoding = encoding
        self._stdout = stdout if stdout is not None else sys.stdout
        self._stderr = stderr if stderr is not None else sys.stderr
        self._formatter = _build_formatter(log_format)
        self._log_file: Path | None = None

        self._logger = logging.getLogger(name)
        self._previous_propagate = self._logger.propagate
        self._previous_level = self._logger.level
        self._detach_existing_sink_handlers()
        self._logger.propagate = False
        self._logger.setLevel(LogLevel.parse(level))

        self._out_handler = self._make_handler(logging.StreamHandler(self._stdout), LogLevel.DEBUG, LogLevel.WARNING)
        self._err_handler = self._make_handler(logging.StreamHandler(self._stderr), LogLevel.WARNING)
        self._logger.addHandler(self._out_handler)
        self._logger.addHandler(self._err_handler)

        if log_file is not None:
            self.set_log_file(log_file)

    def _detach_existing_sink_handlers(self) -> None:
        for handler in self._logger.handlers[:]:
            if getattr(handler, _SINK_HANDLER_ATTR, False):
                self._logger.removeHandler(handler)
                handler.close()

    def _make_handler(self, handler: logging.Handler, minimum: int, maximum: int | None = None) -> logging.Handler:
        handler.setFormatter(self._formatter)
        handler.addFilter(_LevelRangeFilter(minimum, maximum))
        handler.addFilter(_NonBlankFilter())
        setattr(handler, _SINK_HANDLER_ATTR, True)
        return handler

    def _replace_error_handler(self, handler: logging.Handler) -> None:
        old = self._err_handler
        self._logger.removeHandler(old)
        old.flush()
        if isinstance(old, logging.FileHandler):
            old.close()
        self._err_handler = self._make_handler(handler, LogLevel.WARNING)
        self._logger.addHandler(self._err_handler)

    @property
    def logger(self) -> logging.Logger:
        """The underlying ``logging.Logger``; child loggers propagate into it."""
        return self._logger

    @property
    def level(self) -> LogLevel:
        return LogLevel.parse(self._logger.level)

    @property
    def log_file(self) -> Path | None:
        return self._log_file

    def set_level(self, level: LogLevel | int | str) -> None:
        self._logger.setLevel(LogLevel.parse(level))

    def is_enabled_for(self, level: LogLevel | int | str) -> bool:
        return self._logger.isEnabledFor(LogLevel.parse(level))

    def set_log_file(self, log_file: str | os.PathLike) -> None:
        """Send WARNING and SEVERE output to ``log_file`` (created if missing)."""
        path = Path(log_file)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            handler = logging.FileHandler(path, mode="a", encoding=self.encoding)
        except LookupError as e:
            raise ConfigurationError(
                f"Log file encoding [{self.encoding}] is not supported", field="encoding", details=str(e)
            ) from e
        except OSError as e:
            raise ConfigurationError(
                f"Could not create log file {path.absolute()}", field="log_file", details=str(e)
            ) from e
        self._replace_error_handler(handler)
        self._log_file = path

    def close_log_file(self) -> None:
        """Close the log file, if any, and route errors back to the default stream."""
        if self._log_file is None:
            return
        self._replace_error_handler(logging.StreamHandler(self._stderr))
        self._log_file = None

    def close(self) -> None:
        """Close the log file and detach both handlers from the logger."""
        self.close_log_file()
        for handler in (self._out_handler, self._err_handler):
            handler.flush()
            self._logger.removeHandler(handler)
        self._logger.propagate = self._previous_propagate
        self._logger.setLevel(self._previous_level)

    def __enter__(self) -> DiagnosticSink:
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def log(self, level: LogLevel | int | str, message: str, exc_info: BaseException | bool | None = None) -> None:
        """Log ``message`` at ``level``.

        Raises:
            InternalError: If ``level`` is not a known level
        """
        resolved = LogLevel.parse(level)
        self._logger.log(resolved, message, exc_info=exc_info)

    def debug(self, message: str, exc_info: BaseException | bool | None = None) -> None:
        self.log(LogLevel.DEBUG, message, exc_info)

    def info(self, message: str, exc_info: BaseException | bool | None = None) -> None:
        self.log(LogLevel.INFO, message, exc_info)

    def warning(self, message: str, exc_info: BaseException | bool | None = None) -> None:
        self.log(LogLevel.WARNING, message, exc_info)

    def severe(self, message: str, exc_info: BaseException | bool | None = None) -> None:
        self.log(LogLevel.SEVERE, message, exc_info)


# Module-level tracking so logging.shutdown is registered only once
_atexit_registered = False


def setup_logging(
    log_level: str | None = None,
    log_file: str | None = None,
    log_format: str = "text",
    encoding: str = "UTF-8",
    name: str = DEFAULT_LOGGER_NAME,
    stdout: TextIO | None = None,
) -> DiagnosticSink:
    """Create the diagnostic sink used by the CLI.

    Args:
        log_level: Minimum level (DEBUG, INFO, WARNING, SEVERE)
        log_file: Optional file receiving WARNING and SEVERE output
        log_format: Output format - "text" (default) or "json"
        encoding: Encoding used for the log file
        name: Logger name the sink attaches to
        stdout: Stream for DEBUG and INFO lines (default: sys.stdout)

    Returns:
        Configured DiagnosticSink

    Priority: 1) Passed parameter, 2) Environment variable LOG_LEVEL, 3) Default INFO
    """
    global _atexit_registered

    if not _atexit_registered:
        atexit.register(logging.shutdown)
        _atexit_registered = True

    if log_level is None:
        log_level = os.environ.get("LOG_LEVEL", "INFO")

    try:
        level = LogLevel.parse(log_level)
    except InternalError:
        print(f"Warning: Invalid log level '{log_level}', using INFO", file=sys.stderr)
        level = LogLevel.INFO

    sink = DiagnosticSink(
        name, level, stdout=stdout, log_file=log_file, encoding=encoding, log_format=log_format
    )
    if log_file is not None:
        sink.debug(f"Logging initialized. Log file: {log_file}")
    return sink
