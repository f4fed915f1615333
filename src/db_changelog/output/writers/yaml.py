"""YAML changelog serializer."""

from __future__ import annotations

import logging
from typing import TextIO

import yaml

from db_changelog.core.constants import DEFAULT_CHANGESET_AUTHOR
from db_changelog.core.exceptions import SerializationError
from db_changelog.diff.changelog import ChangeLogBuilder
from db_changelog.diff.filters import FilterPolicy
from db_changelog.diff.models import DiffResult

logger = logging.getLogger(__name__)


class YAMLChangeLogSerializer:
    """Write a ``databaseChangeLog:`` YAML document."""

    format_name = "yaml"
    file_extension = ".yaml"

    def write(
        self,
        diff_result: DiffResult,
        policy: FilterPolicy,
        sink: TextIO,
        *,
        author: str = DEFAULT_CHANGESET_AUTHOR,
    ) -> None:
        logger.debug("Generating YAML changelog...")
        changelog = ChangeLogBuilder(diff_result, policy, author).to_dict()
        try:
            yaml.safe_dump(changelog, sink, sort_keys=False, allow_unicode=True, default_flow_style=False)
        except yaml.YAMLError as e:
            raise SerializationError(
                "YAML serialization error", output_format=self.format_name, details=str(e), original_error=e
            ) from e
