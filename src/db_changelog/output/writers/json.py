"""JSON changelog serializer."""

from __future__ import annotations

import json
import logging
from typing import TextIO

from db_changelog.core.constants import DEFAULT_CHANGESET_AUTHOR
from db_changelog.core.exceptions import SerializationError
from db_changelog.diff.changelog import ChangeLogBuilder
from db_changelog.diff.filters import FilterPolicy
from db_changelog.diff.models import DiffResult

logger = logging.getLogger(__name__)


class JSONChangeLogSerializer:
    """Write the changelog as an indented JSON document."""

    format_name = "json"
    file_extension = ".json"

    def write(
        self,
        diff_result: DiffResult,
        policy: FilterPolicy,
        sink: TextIO,
        *,
        author: str = DEFAULT_CHANGESET_AUTHOR,
    ) -> None:
        logger.debug("Generating JSON changelog...")
        changelog = ChangeLogBuilder(diff_result, policy, author).to_dict()
        try:
            # Render fully before writing so a bad value leaves no partial document
            text = json.dumps(changelog, indent=2, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise SerializationError(
                "JSON serialization error: changelog contains non-serializable values",
                output_format=self.format_name,
                details=str(e),
                original_error=e,
            ) from e
        sink.write(text)
        sink.write("\n")
