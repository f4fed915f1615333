"""Filter policy for changelog output.

A ``FilterPolicy`` decides which schema objects reach a changelog and how
their identifiers are qualified. It is built once per run by
``build_filter_policy`` and shared read-only by every output target.

Object filter patterns are a comma-separated list of entries. Each entry is
either ``regex`` (any object type) or ``type:regex``, e.g.
``table:audit_.*, column:.*_tmp``. Regexes must match the whole name and are
case-insensitive. Columns, indexes and constraints also match an entry whose
regex matches their containing table.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum

from db_changelog.core.exceptions import ConfigurationError, ConflictingFiltersError
from db_changelog.diff.models import ObjectDiff, ObjectType

# A leading identifier followed by ":" names an object type; "(?:...)" and
# "(?i:...)" groups stay part of the regex.
_TYPE_PREFIX = re.compile(r"^\s*([A-Za-z_]\w*)\s*:")


class FilterMode(Enum):
    """Whether matching objects are kept or dropped."""

    INCLUDE = "include"
    EXCLUDE = "exclude"


@dataclass(frozen=True)
class PatternEntry:
    """One parsed entry of an object filter pattern string."""

    regex: re.Pattern
    object_type: ObjectType | None = None

    def matches(self, diff: ObjectDiff) -> bool:
        if self.object_type is None or self.object_type == diff.object_type:
            if self.regex.fullmatch(diff.name):
                return True
        # Nested objects follow their table
        if diff.relation and self.object_type in (None, ObjectType.TABLE):
            return bool(self.regex.fullmatch(diff.relation))
        return False


def parse_patterns(patterns: str) -> tuple[PatternEntry, ...]:
    """Parse a pattern string into entries.

    Raises:
        ConfigurationError: On an unknown object type or an invalid regex
    """
    entries = []
    for raw in patterns.split(","):
        raw = raw.strip()
        if not raw:
            continue
        object_type = None
        expression = raw
        prefixed = _TYPE_PREFIX.match(raw)
        if prefixed:
            type_name, expression = prefixed.group(1), raw[prefixed.end():].strip()
            try:
                object_type = ObjectType.parse(type_name)
            except ValueError as e:
                raise ConfigurationError(
                    f"Unknown object type '{type_name}' in object filter",
                    field="objects",
                    details=f"Valid types: {', '.join(t.value for t in ObjectType)}",
                ) from e
        try:
            regex = re.compile(expression, re.IGNORECASE)
        except re.error as e:
            raise ConfigurationError(
                f"Invalid object filter pattern '{expression}'", field="objects", details=str(e)
            ) from e
        entries.append(PatternEntry(regex=regex, object_type=object_type))
    return tuple(entries)


@dataclass(frozen=True)
class ObjectChangeFilter:
    """Include or exclude schema objects by name pattern."""

    mode: FilterMode
    patterns: str
    entries: tuple[PatternEntry, ...] = field(default=(), compare=False, repr=False)

    @classmethod
    def create(cls, mode: FilterMode, patterns: str) -> ObjectChangeFilter:
        return cls(mode=mode, patterns=patterns, entries=parse_patterns(patterns))

    def matches(self, diff: ObjectDiff) -> bool:
        return any(entry.matches(diff) for entry in self.entries)

    def include(self, diff: ObjectDiff) -> bool:
        if self.mode is FilterMode.INCLUDE:
            return self.matches(diff)
        return not self.matches(diff)


@dataclass(frozen=True)
class FilterPolicy:
    """Which objects and identifier qualifiers appear in emitted changelogs.

    Attributes:
        include_catalog: Keep catalog names on emitted identifiers
        include_schema: Keep schema names on emitted identifiers
        include_tablespace: Keep tablespace names on emitted objects
        object_filter: Optional include/exclude rule; None lets every object through
    """

    include_catalog: bool = True
    include_schema: bool = True
    include_tablespace: bool = True
    object_filter: ObjectChangeFilter | None = None

    def include(self, diff: ObjectDiff) -> bool:
        """Return True if ``diff`` should appear in the changelog."""
        if self.object_filter is None:
            return True
        return self.object_filter.include(diff)

    def catalog_name(self, diff: ObjectDiff) -> str | None:
        return diff.catalog if self.include_catalog else None

    def schema_name(self, diff: ObjectDiff) -> str | None:
        return diff.schema if self.include_schema else None

    def tablespace_name(self, diff: ObjectDiff) -> str | None:
        return diff.tablespace if self.include_tablespace else None


def _present(value: str | None) -> bool:
    return value is not None and bool(value.strip())


def build_filter_policy(
    include_catalog: bool = True,
    include_schema: bool = True,
    include_tablespace: bool = True,
    include_objects: str | None = None,
    exclude_objects: str | None = None,
) -> FilterPolicy:
    """Build the filter policy for a run.

    Args:
        include_catalog: Keep catalog qualifiers
        include_schema: Keep schema qualifiers
        include_tablespace: Keep tablespace qualifiers
        include_objects: Pattern string of objects to keep (exclusive with exclude_objects)
        exclude_objects: Pattern string of objects to drop (exclusive with include_objects)

    Returns:
        Immutable FilterPolicy

    Raises:
        ConflictingFiltersError: If both include_objects and exclude_objects are given
        ConfigurationError: If the pattern string cannot be parsed
    """
    if _present(include_objects) and _present(exclude_objects):
        raise ConflictingFiltersError(include_objects, exclude_objects)

    object_filter = None
    if _present(include_objects):
        object_filter = ObjectChangeFilter.create(FilterMode.INCLUDE, include_objects)
    elif _present(exclude_objects):
        object_filter = ObjectChangeFilter.create(FilterMode.EXCLUDE, exclude_objects)

    return FilterPolicy(
        include_catalog=include_catalog,
        include_schema=include_schema,
        include_tablespace=include_tablespace,
        object_filter=object_filter,
    )
