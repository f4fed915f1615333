"""CSV changelog serializer: one row per change."""

from __future__ import annotations

import logging
from typing import TextIO

import pandas as pd

from db_changelog.core.constants import DEFAULT_CHANGESET_AUTHOR
from db_changelog.diff.changelog import ChangeLogBuilder
from db_changelog.diff.filters import FilterPolicy
from db_changelog.diff.models import DiffResult
from db_changelog.output.writers.rows import CHANGELOG_COLUMNS, changelog_rows

logger = logging.getLogger(__name__)


class CSVChangeLogSerializer:
    """Write change sets as CSV rows with a header line."""

    format_name = "csv"
    file_extension = ".csv"

    def write(
        self,
        diff_result: DiffResult,
        policy: FilterPolicy,
        sink: TextIO,
        *,
        author: str = DEFAULT_CHANGESET_AUTHOR,
    ) -> None:
        logger.debug("Generating CSV changelog...")
        rows = changelog_rows(ChangeLogBuilder(diff_result, policy, author).change_sets())
        pd.DataFrame(rows, columns=CHANGELOG_COLUMNS).to_csv(sink, index=False, lineterminator="\n")
