from __future__ import annotations

import json
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from functools import cached_property
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Optional, Tuple

from db_changelog.core.exceptions import ConfigurationError
from db_changelog.core.version import __version__


class ChangeType(Enum):
    """Types of changes detected between two schema states."""
    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"
    UNCHANGED = "unchanged"


class ObjectType(Enum):
    """Kinds of schema objects a diff result can describe."""
    TABLE = "table"
    COLUMN = "column"
    VIEW = "view"
    INDEX = "index"
    SEQUENCE = "sequence"
    PRIMARY_KEY = "primary_key"
    FOREIGN_KEY = "foreign_key"
    UNIQUE_CONSTRAINT = "unique_constraint"

    @property
    def label(self) -> str:
        """Plural display label, e.g. 'Primary Keys'."""
        return self.value.replace("_", " ").title() + "s"

    @classmethod
    def parse(cls, value: str) -> 'ObjectType':
        """Resolve 'table', 'Table', 'primaryKey' or 'primary_key' to a member."""
        separated = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", value.strip())
        normalized = re.sub(r"[^a-z0-9]+", "_", separated.lower()).strip("_")
        try:
            return cls(normalized)
        except ValueError:
            raise ValueError(f"Unknown object type: {value!r}") from None


def _freeze(mapping: Optional[Mapping]) -> Mapping:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class ObjectDiff:
    """A single schema object that differs between reference and comparison."""
    object_type: ObjectType
    name: str
    change_type: ChangeType
    catalog: Optional[str] = None
    schema: Optional[str] = None
    tablespace: Optional[str] = None
    relation: Optional[str] = None  # Containing table for columns, indexes and constraints
    attributes: Mapping[str, Any] = field(default_factory=dict)  # Object definition (comparison side when present)
    changed_fields: Mapping[str, Tuple[Any, Any]] = field(default_factory=dict)  # field -> (reference, comparison)

    def __post_init__(self):
        object.__setattr__(self, "attributes", _freeze(self.attributes))
        object.__setattr__(self, "changed_fields", _freeze(self.changed_fields))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "object_type": self.object_type.value,
            "name": self.name,
            "change_type": self.change_type.value,
            "catalog": self.catalog,
            "schema": self.schema,
            "tablespace": self.tablespace,
            "relation": self.relation,
            "attributes": dict(self.attributes),
            "changed_fields": {
                k: {"reference": v[0], "comparison": v[1]} for k, v in self.changed_fields.items()
            },
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'ObjectDiff':
        changed = {}
        for key, value in (data.get("changed_fields") or {}).items():
            if isinstance(value, Mapping):
                changed[key] = (value.get("reference"), value.get("comparison"))
            else:
                changed[key] = tuple(value)
        return cls(
            object_type=ObjectType.parse(data["object_type"]),
            name=data["name"],
            change_type=ChangeType(data.get("change_type", "modified").lower()),
            catalog=data.get("catalog"),
            schema=data.get("schema"),
            tablespace=data.get("tablespace"),
            relation=data.get("relation"),
            attributes=data.get("attributes") or {},
            changed_fields=changed,
        )


@dataclass(frozen=True)
class DiffSummary:
    """Summary statistics for a diff result."""
    added: int = 0
    removed: int = 0
    modified: int = 0
    unchanged: int = 0
    by_object_type: Mapping[ObjectType, Mapping[ChangeType, int]] = field(default_factory=dict)

    @classmethod
    def from_diffs(cls, diffs: Tuple[ObjectDiff, ...]) -> 'DiffSummary':
        counts = {change_type: 0 for change_type in ChangeType}
        by_type: Dict[ObjectType, Dict[ChangeType, int]] = {}
        for diff in diffs:
            counts[diff.change_type] += 1
            per_type = by_type.setdefault(diff.object_type, {change_type: 0 for change_type in ChangeType})
            per_type[diff.change_type] += 1
        return cls(
            added=counts[ChangeType.ADDED],
            removed=counts[ChangeType.REMOVED],
            modified=counts[ChangeType.MODIFIED],
            unchanged=counts[ChangeType.UNCHANGED],
            by_object_type=MappingProxyType({k: MappingProxyType(v) for k, v in by_type.items()}),
        )

    @property
    def has_changes(self) -> bool:
        """Returns True if any changes were detected."""
        return self.total_changes > 0

    @property
    def total_changes(self) -> int:
        """Total number of changed objects."""
        return self.added + self.removed + self.modified

    @property
    def natural_language_summary(self) -> str:
        """Human-readable summary of changes, e.g. 'Tables: 1 added; Columns: 2 removed'."""
        parts = []
        for object_type in ObjectType:
            per_type = self.by_object_type.get(object_type)
            if not per_type:
                continue
            type_parts = []
            for change_type in (ChangeType.ADDED, ChangeType.REMOVED, ChangeType.MODIFIED):
                if per_type.get(change_type):
                    type_parts.append(f"{per_type[change_type]} {change_type.value}")
            if type_parts:
                parts.append(f"{object_type.label}: {', '.join(type_parts)}")

        if not parts:
            return "No changes detected"

        return "; ".join(parts)

    @property
    def total_summary(self) -> str:
        """One-line summary of total changes: '3 added, 2 removed, 5 modified'."""
        if not self.has_changes:
            return "No changes"

        parts = []
        if self.added:
            parts.append(f"{self.added} added")
        if self.removed:
            parts.append(f"{self.removed} removed")
        if self.modified:
            parts.append(f"{self.modified} modified")
        return ", ".join(parts)


@dataclass(frozen=True)
class DiffResult:
    """Immutable result of comparing a reference schema with a comparison schema.

    Produced by an external comparison step and only read by the emission
    pipeline, so one instance can be shared by every output target.
    """
    object_diffs: Tuple[ObjectDiff, ...] = ()
    reference_label: str = "Reference"
    comparison_label: str = "Comparison"
    reference_url: str = ""
    comparison_url: str = ""
    generated_at: str = ""
    tool_version: str = ""

    def __post_init__(self):
        object.__setattr__(self, "object_diffs", tuple(self.object_diffs))
        if not self.generated_at:
            object.__setattr__(self, "generated_at", datetime.now().strftime('%Y-%m-%d %H:%M:%S'))
        if not self.tool_version:
            object.__setattr__(self, "tool_version", __version__)

    @cached_property
    def summary(self) -> DiffSummary:
        return DiffSummary.from_diffs(self.object_diffs)

    @property
    def changes(self) -> List[ObjectDiff]:
        """Object diffs that represent an actual change."""
        return [d for d in self.object_diffs if d.change_type != ChangeType.UNCHANGED]

    @property
    def changeset_id_root(self) -> str:
        """Stable prefix for generated change set ids, derived from generated_at."""
        digits = re.sub(r"\D", "", self.generated_at)
        return digits or "changelog"

    def to_dict(self) -> Dict[str, Any]:
        """Convert diff result to dictionary for JSON serialization."""
        return {
            "generated_at": self.generated_at,
            "tool_version": self.tool_version,
            "reference": {"label": self.reference_label, "url": self.reference_url},
            "comparison": {"label": self.comparison_label, "url": self.comparison_url},
            "objects": [d.to_dict() for d in self.object_diffs],
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'DiffResult':
        """Create diff result from dictionary (loaded from JSON)."""
        reference = data.get("reference") or {}
        comparison = data.get("comparison") or {}
        return cls(
            object_diffs=tuple(ObjectDiff.from_dict(item) for item in data.get("objects", [])),
            reference_label=reference.get("label", "Reference"),
            comparison_label=comparison.get("label", "Comparison"),
            reference_url=reference.get("url", ""),
            comparison_url=comparison.get("url", ""),
            generated_at=data.get("generated_at", ""),
            tool_version=data.get("tool_version", ""),
        )


def load_diff_result(path: str | Path) -> DiffResult:
    """Load a diff result previously saved as JSON.

    Raises:
        ConfigurationError: If the file is missing, unreadable or malformed
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ConfigurationError(f"Diff file not found: {path}", field="diff_file") from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read diff file: {path}", field="diff_file", details=str(e)) from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in diff file: {path}", field="diff_file", details=str(e)) from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Diff file must contain a JSON object: {path}", field="diff_file")

    try:
        return DiffResult.from_dict(data)
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigurationError(f"Malformed diff file: {path}", field="diff_file", details=str(e)) from e
