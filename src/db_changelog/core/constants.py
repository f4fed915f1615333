"""Constants and default values for db-changelog.

This module centralizes default configurations, format mappings and
display constants used throughout the application.
"""

import os

from db_changelog.core.config import EmissionConfig, LogConfig

# ==================== DEFAULT CONFIG INSTANCES ====================

DEFAULT_EMISSION = EmissionConfig()
DEFAULT_LOG = LogConfig()

DEFAULT_OUTPUT_ENCODING: str = DEFAULT_EMISSION.default_encoding
DEFAULT_CHANGESET_AUTHOR: str = DEFAULT_EMISSION.changeset_author

# ==================== FORMATS ====================

# File extension to format mapping for auto-detection
EXTENSION_TO_FORMAT: dict[str, str] = {
    ".xml": "xml",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".json": "json",
    ".txt": "txt",
    ".csv": "csv",
}

# Destinations that mean "standard output"
STDOUT_DESTINATIONS: frozenset[str] = frozenset({"-", "stdout"})

DBCHANGELOG_XML_NAMESPACE: str = "http://www.liquibase.org/xml/ns/dbchangelog"
DBCHANGELOG_XSD_LOCATION: str = "http://www.liquibase.org/xml/ns/dbchangelog/dbchangelog-latest.xsd"

# ==================== DISPLAY CONSTANTS ====================

# Width of banner separator lines (txt changelogs and CLI output)
BANNER_WIDTH: int = 80

TQDM_BAR_FORMAT = "{l_bar}{bar}| {n_fmt}/{total_fmt} [{elapsed}]"

# ==================== ENVIRONMENT ====================

ENV_OUTPUT_ENCODING = "DB_CHANGELOG_OUTPUT_ENCODING"
ENV_CHANGESET_AUTHOR = "DB_CHANGELOG_AUTHOR"
ENV_LOG_LEVEL = "LOG_LEVEL"


def infer_format_from_path(output_path: str | os.PathLike | None) -> str | None:
    """
    Infer changelog format from file extension.

    Args:
        output_path: The output file path

    Returns:
        Format string if recognized extension, None otherwise
    """
    if output_path is None:
        return None
    output_path = os.fspath(output_path)
    if not output_path or output_path in STDOUT_DESTINATIONS:
        return None
    ext = os.path.splitext(output_path)[1].lower()
    return EXTENSION_TO_FORMAT.get(ext)
