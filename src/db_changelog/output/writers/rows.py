"""Flat row view of change sets, shared by the txt and csv serializers."""

from __future__ import annotations

from typing import Any

from db_changelog.diff.changelog import Change, ChangeSet

CHANGELOG_COLUMNS = ["Change Set", "Author", "Change", "Object", "Details"]

# Identifier attributes already shown in the Object column
_IDENTIFIER_KEYS = {
    "catalogName",
    "schemaName",
    "tableName",
    "viewName",
    "sequenceName",
    "indexName",
    "constraintName",
    "baseTableCatalogName",
    "baseTableSchemaName",
    "baseTableName",
}


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def format_change_details(change: Change) -> str:
    details = [
        f"{key}={_format_value(value)}" for key, value in change.attributes.items() if key not in _IDENTIFIER_KEYS
    ]
    if change.columns:
        column_names = ", ".join(str(column.get("name", "")) for column in change.columns)
        details.append(f"columns=[{column_names}]")
    return "; ".join(details)


def changelog_rows(change_sets: list[ChangeSet]) -> list[dict[str, str]]:
    """One row per change, in change set order."""
    rows = []
    for change_set in change_sets:
        for change in change_set.changes:
            rows.append(
                {
                    "Change Set": change_set.id,
                    "Author": change_set.author,
                    "Change": change.name,
                    "Object": change.object_name,
                    "Details": format_change_details(change),
                }
            )
    return rows
