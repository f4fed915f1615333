"""Pipeline data structures: output targets and per-target emission results."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from db_changelog.core.colors import format_file_size
from db_changelog.core.exceptions import OpenError, OutputError
from db_changelog.output.protocols import ChangeLogSerializer
from db_changelog.pipeline.destinations import Destination


@dataclass(frozen=True)
class OutputTarget:
    """One destination + serializer + optional encoding override.

    The serializer is bound when the target is declared; the encoding is
    resolved against the run's default only when the target is written.
    """

    destination: Destination
    serializer: ChangeLogSerializer
    encoding: str | None = None

    @property
    def format_name(self) -> str:
        return self.serializer.format_name

    def describe(self) -> str:
        return self.destination.describe()

    def resolve_encoding(self, default_encoding: str) -> str:
        """Effective encoding: the override when set, otherwise ``default_encoding``."""
        return self.encoding if self.encoding else default_encoding


class FailureKind(Enum):
    """Why a single target failed."""

    UNSUPPORTED_ENCODING = "unsupported_encoding"
    DESTINATION_UNOPENABLE = "destination_unopenable"
    SERIALIZATION = "serialization"
    DATA_ACCESS = "data_access"

    @property
    def is_open_failure(self) -> bool:
        return self in (FailureKind.UNSUPPORTED_ENCODING, FailureKind.DESTINATION_UNOPENABLE)


@dataclass
class EmissionResult:
    """Result of writing one output target"""

    index: int  # 1-based position in declaration order
    destination: str
    format_name: str
    encoding: str
    success: bool
    duration: float = 0.0
    failure: FailureKind | None = None
    error: OutputError | None = None
    file_size_bytes: int = 0

    @property
    def error_message(self) -> str:
        return str(self.error) if self.error is not None else ""

    @property
    def is_open_failure(self) -> bool:
        return isinstance(self.error, OpenError)

    @property
    def file_size_formatted(self) -> str:
        """Return human-readable file size (e.g., '1.5 MB', '256 KB')."""
        return format_file_size(self.file_size_bytes)
