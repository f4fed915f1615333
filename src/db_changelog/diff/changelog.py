"""Turn a diff result into ordered change sets.

``ChangeLogBuilder`` is the rendering context every serializer works from:
it applies the filter policy, qualifies identifiers, orders changes so that
dependencies are created before dependents (and dropped after them), and
numbers the resulting change sets.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from db_changelog.core.constants import DEFAULT_CHANGESET_AUTHOR
from db_changelog.diff.filters import FilterPolicy
from db_changelog.diff.models import ChangeType, DiffResult, ObjectDiff, ObjectType

logger = logging.getLogger(__name__)

# Creation order; drops run in the opposite direction
CREATE_ORDER = (
    ObjectType.SEQUENCE,
    ObjectType.TABLE,
    ObjectType.COLUMN,
    ObjectType.PRIMARY_KEY,
    ObjectType.UNIQUE_CONSTRAINT,
    ObjectType.INDEX,
    ObjectType.FOREIGN_KEY,
    ObjectType.VIEW,
)
DROP_ORDER = tuple(reversed(CREATE_ORDER))

_CHANGE_TYPE_ORDER = (ChangeType.ADDED, ChangeType.REMOVED, ChangeType.MODIFIED)


@dataclass
class Change:
    """A single changelog change, e.g. ``createTable`` with its attributes."""

    name: str
    attributes: dict[str, Any]
    columns: list[dict[str, Any]] = field(default_factory=list)
    object_name: str = ""

    def to_dict(self) -> dict[str, Any]:
        body = dict(self.attributes)
        if self.columns:
            body["columns"] = [{"column": column} for column in self.columns]
        return {self.name: body}


@dataclass
class ChangeSet:
    """An identified, authored group of changes."""

    id: str
    author: str
    changes: list[Change]
    source: ObjectDiff | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "changeSet": {
                "id": self.id,
                "author": self.author,
                "changes": [change.to_dict() for change in self.changes],
            }
        }


def _compact(**attributes: Any) -> dict[str, Any]:
    return {key: value for key, value in attributes.items() if value is not None}


def _column_names(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return ", ".join(str(v) for v in value)


def _column_definition(name: str, attributes: dict[str, Any]) -> dict[str, Any]:
    column = _compact(
        name=name,
        type=attributes.get("type"),
        defaultValue=attributes.get("default"),
        remarks=attributes.get("remarks"),
    )
    constraints = _compact(
        nullable=attributes.get("nullable"),
        primaryKey=attributes.get("primary_key"),
        unique=attributes.get("unique"),
    )
    if constraints:
        column["constraints"] = constraints
    return column


class ChangeLogBuilder:
    """Build change sets for one changelog output.

    A builder is created per written changelog and never shared, so the
    diff result and policy are only read.

    Args:
        diff_result: Diff to render
        policy: Filter policy for this run
        author: Author recorded on every change set
    """

    def __init__(self, diff_result: DiffResult, policy: FilterPolicy, author: str = DEFAULT_CHANGESET_AUTHOR):
        self.diff_result = diff_result
        self.policy = policy
        self.author = author

    # ---- identifiers ----

    def _qualifiers(self, diff: ObjectDiff, prefix: str = "") -> dict[str, Any]:
        if prefix:
            return _compact(
                **{
                    f"{prefix}CatalogName": self.policy.catalog_name(diff),
                    f"{prefix}SchemaName": self.policy.schema_name(diff),
                }
            )
        return _compact(catalogName=self.policy.catalog_name(diff), schemaName=self.policy.schema_name(diff))

    def qualified_name(self, diff: ObjectDiff) -> str:
        parts = [self.policy.catalog_name(diff), self.policy.schema_name(diff), diff.relation, diff.name]
        return ".".join(part for part in parts if part)

    # ---- per object type ----

    def _table_changes(self, diff: ObjectDiff) -> list[Change]:
        attrs = dict(diff.attributes)
        if diff.change_type == ChangeType.ADDED:
            columns = [
                _column_definition(column.get("name", ""), column)
                for column in attrs.get("columns", [])
            ]
            return [
                Change(
                    "createTable",
                    {
                        **self._qualifiers(diff),
                        "tableName": diff.name,
                        **_compact(tablespace=self.policy.tablespace_name(diff), remarks=attrs.get("remarks")),
                    },
                    columns,
                )
            ]
        if diff.change_type == ChangeType.REMOVED:
            return [Change("dropTable", {**self._qualifiers(diff), "tableName": diff.name})]
        if "remarks" in diff.changed_fields:
            new_remarks = diff.changed_fields["remarks"][1]
            return [
                Change("setTableRemarks", {**self._qualifiers(diff), "tableName": diff.name, "remarks": new_remarks})
            ]
        return []

    def _column_changes(self, diff: ObjectDiff) -> list[Change]:
        attrs = dict(diff.attributes)
        target = {**self._qualifiers(diff), "tableName": diff.relation}
        if diff.change_type == ChangeType.ADDED:
            return [Change("addColumn", target, [_column_definition(diff.name, attrs)])]
        if diff.change_type == ChangeType.REMOVED:
            return [Change("dropColumn", {**target, "columnName": diff.name})]

        changes = []
        column = {**target, "columnName": diff.name}
        data_type = attrs.get("type")
        if "type" in diff.changed_fields:
            data_type = diff.changed_fields["type"][1]
            changes.append(Change("modifyDataType", {**column, "newDataType": data_type}))
        if "nullable" in diff.changed_fields:
            nullable = diff.changed_fields["nullable"][1]
            name = "dropNotNullConstraint" if nullable else "addNotNullConstraint"
            changes.append(Change(name, {**column, **_compact(columnDataType=data_type)}))
        if "default" in diff.changed_fields:
            default = diff.changed_fields["default"][1]
            if default is None:
                changes.append(Change("dropDefaultValue", {**column, **_compact(columnDataType=data_type)}))
            else:
                changes.append(Change("addDefaultValue", {**column, "defaultValue": default}))
        return changes

    def _view_changes(self, diff: ObjectDiff) -> list[Change]:
        target = {**self._qualifiers(diff), "viewName": diff.name}
        if diff.change_type == ChangeType.REMOVED:
            return [Change("dropView", target)]
        attrs = dict(diff.attributes)
        create = {**target, **_compact(selectQuery=attrs.get("definition"))}
        if diff.change_type == ChangeType.MODIFIED:
            create["replaceIfExists"] = True
        return [Change("createView", create)]

    def _index_changes(self, diff: ObjectDiff) -> list[Change]:
        attrs = dict(diff.attributes)
        drop = Change("dropIndex", {**self._qualifiers(diff), "tableName": diff.relation, "indexName": diff.name})
        create = Change(
            "createIndex",
            {
                **self._qualifiers(diff),
                "tableName": diff.relation,
                "indexName": diff.name,
                **_compact(unique=attrs.get("unique"), tablespace=self.policy.tablespace_name(diff)),
            },
            [{"name": name} for name in attrs.get("columns", [])],
        )
        return self._replace(diff, drop, create)

    def _sequence_changes(self, diff: ObjectDiff) -> list[Change]:
        attrs = dict(diff.attributes)
        target = {**self._qualifiers(diff), "sequenceName": diff.name}
        if diff.change_type == ChangeType.ADDED:
            return [
                Change(
                    "createSequence",
                    {
                        **target,
                        **_compact(
                            startValue=attrs.get("start_value"),
                            incrementBy=attrs.get("increment_by"),
                            minValue=attrs.get("min_value"),
                            maxValue=attrs.get("max_value"),
                            cycle=attrs.get("cycle"),
                        ),
                    },
                )
            ]
        if diff.change_type == ChangeType.REMOVED:
            return [Change("dropSequence", target)]
        altered = _compact(
            incrementBy=diff.changed_fields.get("increment_by", (None, None))[1],
            minValue=diff.changed_fields.get("min_value", (None, None))[1],
            maxValue=diff.changed_fields.get("max_value", (None, None))[1],
            cycle=diff.changed_fields.get("cycle", (None, None))[1],
        )
        return [Change("alterSequence", {**target, **altered})] if altered else []

    def _primary_key_changes(self, diff: ObjectDiff) -> list[Change]:
        attrs = dict(diff.attributes)
        drop = Change(
            "dropPrimaryKey", {**self._qualifiers(diff), "tableName": diff.relation, "constraintName": diff.name}
        )
        add = Change(
            "addPrimaryKey",
            {
                **self._qualifiers(diff),
                "tableName": diff.relation,
                "constraintName": diff.name,
                **_compact(
                    columnNames=_column_names(attrs.get("columns")),
                    tablespace=self.policy.tablespace_name(diff),
                ),
            },
        )
        return self._replace(diff, drop, add)

    def _unique_constraint_changes(self, diff: ObjectDiff) -> list[Change]:
        attrs = dict(diff.attributes)
        drop = Change(
            "dropUniqueConstraint",
            {**self._qualifiers(diff), "tableName": diff.relation, "constraintName": diff.name},
        )
        add = Change(
            "addUniqueConstraint",
            {
                **self._qualifiers(diff),
                "tableName": diff.relation,
                "constraintName": diff.name,
                **_compact(
                    columnNames=_column_names(attrs.get("columns")),
                    tablespace=self.policy.tablespace_name(diff),
                ),
            },
        )
        return self._replace(diff, drop, add)

    def _foreign_key_changes(self, diff: ObjectDiff) -> list[Change]:
        attrs = dict(diff.attributes)
        base = {**self._qualifiers(diff, "baseTable"), "baseTableName": diff.relation, "constraintName": diff.name}
        referenced_schema = attrs.get("referenced_schema") if self.policy.include_schema else None
        drop = Change("dropForeignKeyConstraint", base)
        add = Change(
            "addForeignKeyConstraint",
            {
                **base,
                **_compact(
                    baseColumnNames=_column_names(attrs.get("columns")),
                    referencedTableSchemaName=referenced_schema,
                    referencedTableName=attrs.get("referenced_table"),
                    referencedColumnNames=_column_names(attrs.get("referenced_columns")),
                    onDelete=attrs.get("on_delete"),
                    onUpdate=attrs.get("on_update"),
                ),
            },
        )
        return self._replace(diff, drop, add)

    @staticmethod
    def _replace(diff: ObjectDiff, drop: Change, create: Change) -> list[Change]:
        if diff.change_type == ChangeType.ADDED:
            return [create]
        if diff.change_type == ChangeType.REMOVED:
            return [drop]
        return [drop, create]

    _HANDLERS = {
        ObjectType.TABLE: _table_changes,
        ObjectType.COLUMN: _column_changes,
        ObjectType.VIEW: _view_changes,
        ObjectType.INDEX: _index_changes,
        ObjectType.SEQUENCE: _sequence_changes,
        ObjectType.PRIMARY_KEY: _primary_key_changes,
        ObjectType.UNIQUE_CONSTRAINT: _unique_constraint_changes,
        ObjectType.FOREIGN_KEY: _foreign_key_changes,
    }

    # ---- assembly ----

    def included_diffs(self) -> list[ObjectDiff]:
        """Changed objects that pass the filter, in emission order."""
        changed = [d for d in self.diff_result.object_diffs if d.change_type != ChangeType.UNCHANGED]
        included = [d for d in changed if self.policy.include(d)]
        if len(included) != len(changed):
            logger.debug(f"Object filter skipped {len(changed) - len(included)} of {len(changed)} changed objects")

        ordered = []
        for change_type in _CHANGE_TYPE_ORDER:
            type_order = DROP_ORDER if change_type == ChangeType.REMOVED else CREATE_ORDER
            for object_type in type_order:
                ordered.extend(d for d in included if d.change_type == change_type and d.object_type == object_type)
        return ordered

    def changes_for(self, diff: ObjectDiff) -> list[Change]:
        changes = self._HANDLERS[diff.object_type](self, diff)
        object_name = self.qualified_name(diff)
        for change in changes:
            change.object_name = object_name
        return changes

    def change_sets(self) -> list[ChangeSet]:
        """Build the numbered change sets for this changelog."""
        change_sets = []
        id_root = self.diff_result.changeset_id_root
        for diff in self.included_diffs():
            changes = self.changes_for(diff)
            if not changes:
                logger.debug(f"No changelog change for {diff.change_type.value} {diff.object_type.value} {diff.name}")
                continue
            change_sets.append(
                ChangeSet(id=f"{id_root}-{len(change_sets) + 1}", author=self.author, changes=changes, source=diff)
            )
        return change_sets

    def to_dict(self) -> dict[str, Any]:
        """The changelog as nested dicts, as written by the yaml and json serializers."""
        return {"databaseChangeLog": [change_set.to_dict() for change_set in self.change_sets()]}
