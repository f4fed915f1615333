"""Custom exceptions for db-changelog.

Configuration errors are fatal and raised before any changelog is written.
Output errors are scoped to a single output target and are recorded by the
emission driver instead of propagating.
"""


class ChangeLogError(Exception):
    """Base exception for all db-changelog errors."""

    def __init__(self, message: str, details: str | None = None):
        self.message = message
        self.details = details
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class ConfigurationError(ChangeLogError):
    """Exception raised for invalid pipeline configuration.

    Examples:
        - Both includeObjects and excludeObjects given
        - No output targets declared
        - Unknown changelog format
        - Malformed object filter pattern
    """

    def __init__(self, message: str, field: str | None = None, details: str | None = None):
        self.field = field
        super().__init__(message, details)


class ConflictingFiltersError(ConfigurationError):
    """Raised when include and exclude object filters are both set."""

    def __init__(self, include_objects: str, exclude_objects: str):
        self.include_objects = include_objects
        self.exclude_objects = exclude_objects
        super().__init__(
            "Cannot specify both excludeObjects and includeObjects",
            field="include_objects",
            details=f"include={include_objects!r}, exclude={exclude_objects!r}",
        )


class NoOutputTargetsError(ConfigurationError):
    """Raised when a pipeline is built without any output target."""

    def __init__(self, available: list[str] | None = None):
        self.available = available or []
        names = ", ".join(f"<{name}>" for name in self.available) if self.available else "an output"
        super().__init__(
            f"At least one output file element ({names}) must be defined",
            field="targets",
        )


class UnknownFormatError(ConfigurationError):
    """Raised when a format id has no registered serializer.

    Attributes:
        format_name: The format id that was requested
        available: Format ids known to the registry at lookup time
    """

    def __init__(self, format_name: str | None, available: list[str] | None = None):
        self.format_name = format_name
        self.available = available or []
        details = f"Available formats: {', '.join(self.available)}" if self.available else None
        super().__init__(f"Unknown changelog format '{format_name}'", field="format", details=details)


class OutputError(ChangeLogError):
    """Exception raised for failures writing a single changelog output.

    Examples:
        - Permission denied
        - Unsupported encoding
        - Invalid path
        - Serialization error
    """

    def __init__(
        self,
        message: str,
        output_path: str | None = None,
        output_format: str | None = None,
        details: str | None = None,
        original_error: Exception | None = None,
    ):
        self.output_path = output_path
        self.output_format = output_format
        self.original_error = original_error
        super().__init__(message, details)


class OpenError(OutputError):
    """The destination could not be opened for writing."""


class UnsupportedEncodingError(OpenError):
    """The requested character encoding is not known to the platform."""

    def __init__(
        self,
        encoding: str,
        output_path: str | None = None,
        output_format: str | None = None,
        original_error: Exception | None = None,
    ):
        self.encoding = encoding
        super().__init__(
            f"Unable to diff databases to change log file. Encoding [{encoding}] is not supported",
            output_path=output_path,
            output_format=output_format,
            original_error=original_error,
        )


class DestinationOpenError(OpenError):
    """The destination could not be created or opened."""


class SerializationError(OutputError):
    """A serializer failed while writing the changelog."""


class DataAccessError(ChangeLogError):
    """Raised by diff result providers when data cannot be read during rendering.

    Attributes:
        operation: What was being read when the failure happened
        original_error: Underlying driver or I/O exception, if any
    """

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: str | None = None,
        original_error: Exception | None = None,
    ):
        self.operation = operation
        self.original_error = original_error
        super().__init__(message, details)

    def __str__(self) -> str:
        parts = [self.message]
        if self.operation:
            parts.append(f"during {self.operation}")
        if self.details:
            parts.append(self.details)
        return " - ".join(parts)


class InternalError(ChangeLogError):
    """Programming defect, such as an unknown log level reaching the diagnostic sink."""
