"""Plain-text changelog serializer: a banner header and a fixed-width table."""

from __future__ import annotations

import logging
from typing import TextIO

import pandas as pd

from db_changelog.core.constants import BANNER_WIDTH, DEFAULT_CHANGESET_AUTHOR
from db_changelog.diff.changelog import ChangeLogBuilder
from db_changelog.diff.filters import FilterPolicy
from db_changelog.diff.models import DiffResult
from db_changelog.output.writers.rows import CHANGELOG_COLUMNS, changelog_rows

logger = logging.getLogger(__name__)


def _describe(label: str, url: str) -> str:
    return f"{label} ({url})" if url else label


class TextChangeLogSerializer:
    """Write a human-readable changelog report."""

    format_name = "txt"
    file_extension = ".txt"

    def write(
        self,
        diff_result: DiffResult,
        policy: FilterPolicy,
        sink: TextIO,
        *,
        author: str = DEFAULT_CHANGESET_AUTHOR,
    ) -> None:
        logger.debug("Generating text changelog...")
        change_sets = ChangeLogBuilder(diff_result, policy, author).change_sets()
        rows = changelog_rows(change_sets)

        lines = [
            "=" * BANNER_WIDTH,
            "DATABASE CHANGELOG",
            "=" * BANNER_WIDTH,
            f"Reference: {_describe(diff_result.reference_label, diff_result.reference_url)}",
            f"Comparison: {_describe(diff_result.comparison_label, diff_result.comparison_url)}",
            f"Generated: {diff_result.generated_at}",
            f"Diff summary: {diff_result.summary.natural_language_summary}",
            f"Change sets: {len(change_sets)}",
            "=" * BANNER_WIDTH,
            "",
        ]
        if rows:
            lines.append(pd.DataFrame(rows, columns=CHANGELOG_COLUMNS).to_string(index=False))
        else:
            lines.append("No changes to write.")

        sink.write("\n".join(lines))
        sink.write("\n")
