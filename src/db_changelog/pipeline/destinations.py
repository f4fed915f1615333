"""Changelog destinations.

A destination is anything that can be opened for writing with a named
character encoding and returns a text stream. The emission driver owns the
returned stream and flushes and closes it exactly once.
"""

from __future__ import annotations

import codecs
import io
import os
import sys
from pathlib import Path
from typing import BinaryIO, Protocol, TextIO, runtime_checkable

from db_changelog.core.constants import STDOUT_DESTINATIONS
from db_changelog.core.exceptions import DestinationOpenError, UnsupportedEncodingError


@runtime_checkable
class Destination(Protocol):
    """Where a changelog is written."""

    def describe(self) -> str:
        """Short human-readable name used in logs and reports."""
        ...

    def open(self, encoding: str) -> TextIO:
        """Open for writing with ``encoding``.

        Raises:
            UnsupportedEncodingError: If the encoding is unknown
            DestinationOpenError: If the destination cannot be created or opened
        """
        ...


def check_encoding(encoding: str, output_path: str | None = None) -> None:
    """Raise UnsupportedEncodingError unless ``encoding`` names a known text codec.

    Runs before a destination is touched, so bytes-to-bytes codecs such as
    ``rot13`` or ``hex`` never truncate an existing file.
    """
    try:
        codecs.lookup(encoding)
        io.TextIOWrapper(io.BytesIO(), encoding=encoding).detach()
    except LookupError as e:
        raise UnsupportedEncodingError(encoding, output_path=output_path, original_error=e) from e


class _BorrowedTextWrapper(io.TextIOWrapper):
    """Text layer over a stream owned by someone else; close() detaches instead of closing it."""

    _released = False

    def close(self) -> None:
        if self._released:
            return
        self._released = True
        try:
            self.flush()
        finally:
            self.detach()


class FileDestination:
    """A file path; missing parent directories are created on open."""

    def __init__(self, path: str | os.PathLike):
        self.path = Path(path)

    def describe(self) -> str:
        return str(self.path)

    def open(self, encoding: str) -> TextIO:
        check_encoding(encoding, str(self.path))
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            return open(self.path, "w", encoding=encoding, newline="")
        except OSError as e:
            raise DestinationOpenError(
                "Unable to diff databases to change log file. Error creating output stream",
                output_path=str(self.path),
                details=str(e),
                original_error=e,
            ) from e

    def __repr__(self) -> str:
        return f"FileDestination({str(self.path)!r})"


class StreamDestination:
    """An already-open binary stream. Closing the changelog leaves the stream open."""

    def __init__(self, stream: BinaryIO, name: str = "<stream>"):
        self.stream = stream
        self.name = name

    def describe(self) -> str:
        return self.name

    def open(self, encoding: str) -> TextIO:
        check_encoding(encoding, self.name)
        return _BorrowedTextWrapper(self.stream, encoding=encoding, newline="")

    def __repr__(self) -> str:
        return f"StreamDestination({self.name!r})"


class StdoutDestination:
    """Standard output, resolved when opened."""

    def describe(self) -> str:
        return "<stdout>"

    def open(self, encoding: str) -> TextIO:
        check_encoding(encoding, "<stdout>")
        sys.stdout.flush()
        return _BorrowedTextWrapper(sys.stdout.buffer, encoding=encoding, newline="")

    def __repr__(self) -> str:
        return "StdoutDestination()"


def as_destination(destination: Destination | str | os.PathLike | BinaryIO) -> Destination:
    """Coerce a path, '-'/'stdout', binary stream or Destination into a Destination."""
    if isinstance(destination, Destination):
        return destination
    if isinstance(destination, str) and destination in STDOUT_DESTINATIONS:
        return StdoutDestination()
    if isinstance(destination, (str, os.PathLike)):
        return FileDestination(destination)
    if hasattr(destination, "write"):
        return StreamDestination(destination, str(getattr(destination, "name", "<stream>")))
    raise TypeError(f"Unsupported changelog destination: {destination!r}")
