"""Core module - Foundation components with no internal dependencies.

This module provides the basic building blocks used throughout the application:
- Version information
- Custom exceptions
- Configuration dataclasses
- Constants and defaults
- Console colors and the diagnostic sink
"""

from db_changelog.core.version import __version__

from db_changelog.core.exceptions import (
    ChangeLogError,
    ConfigurationError,
    ConflictingFiltersError,
    DataAccessError,
    DestinationOpenError,
    InternalError,
    NoOutputTargetsError,
    OpenError,
    OutputError,
    SerializationError,
    UnknownFormatError,
    UnsupportedEncodingError,
)

from db_changelog.core.config import EmissionConfig, LogConfig

from db_changelog.core.constants import (
    DEFAULT_CHANGESET_AUTHOR,
    DEFAULT_OUTPUT_ENCODING,
    EXTENSION_TO_FORMAT,
    infer_format_from_path,
)

from db_changelog.core.logging import SEVERE, DiagnosticSink, LogLevel, setup_logging

__all__ = [
    "__version__",
    "ChangeLogError",
    "ConfigurationError",
    "ConflictingFiltersError",
    "DataAccessError",
    "DestinationOpenError",
    "InternalError",
    "NoOutputTargetsError",
    "OpenError",
    "OutputError",
    "SerializationError",
    "UnknownFormatError",
    "UnsupportedEncodingError",
    "EmissionConfig",
    "LogConfig",
    "DEFAULT_CHANGESET_AUTHOR",
    "DEFAULT_OUTPUT_ENCODING",
    "EXTENSION_TO_FORMAT",
    "infer_format_from_path",
    "SEVERE",
    "DiagnosticSink",
    "LogLevel",
    "setup_logging",
]
