"""Diff module - diff result model, filter policy and change set building."""

from db_changelog.diff.changelog import Change, ChangeLogBuilder, ChangeSet
from db_changelog.diff.filters import (
    FilterMode,
    FilterPolicy,
    ObjectChangeFilter,
    build_filter_policy,
)
from db_changelog.diff.models import (
    ChangeType,
    DiffResult,
    DiffSummary,
    ObjectDiff,
    ObjectType,
    load_diff_result,
)

__all__ = [
    "Change",
    "ChangeLogBuilder",
    "ChangeSet",
    "ChangeType",
    "DiffResult",
    "DiffSummary",
    "FilterMode",
    "FilterPolicy",
    "ObjectChangeFilter",
    "ObjectDiff",
    "ObjectType",
    "build_filter_policy",
    "load_diff_result",
]
