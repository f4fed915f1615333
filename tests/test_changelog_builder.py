"""Tests for ChangeLogBuilder: ordering, qualification and per-type changes"""
import pytest

from db_changelog.diff.changelog import ChangeLogBuilder
from db_changelog.diff.filters import FilterPolicy, build_filter_policy
from db_changelog.diff.models import ChangeType, DiffResult, ObjectDiff, ObjectType


def _change_names(change_sets):
    return [[change.name for change in change_set.changes] for change_set in change_sets]


class TestChangeSetAssembly:
    """Tests for ordering and numbering"""

    def test_change_set_order(self, sample_diff_result, default_policy):
        change_sets = ChangeLogBuilder(sample_diff_result, default_policy).change_sets()
        assert _change_names(change_sets) == [
            ["createTable"],
            ["addColumn"],
            ["createIndex"],
            ["addForeignKeyConstraint"],
            ["dropTable"],
            ["modifyDataType", "addNotNullConstraint"],
            ["createView"],
        ]

    def test_ids_and_author(self, sample_diff_result, default_policy):
        change_sets = ChangeLogBuilder(sample_diff_result, default_policy, author="alice").change_sets()
        assert [cs.id for cs in change_sets][:3] == ["20240501123000-1", "20240501123000-2", "20240501123000-3"]
        assert {cs.author for cs in change_sets} == {"alice"}

    def test_ids_are_stable_across_builders(self, sample_diff_result, default_policy):
        first = ChangeLogBuilder(sample_diff_result, default_policy).change_sets()
        second = ChangeLogBuilder(sample_diff_result, default_policy).change_sets()
        assert [cs.id for cs in first] == [cs.id for cs in second]

    def test_unchanged_objects_skipped(self, sample_diff_result, default_policy):
        builder = ChangeLogBuilder(sample_diff_result, default_policy)
        assert all(d.change_type != ChangeType.UNCHANGED for d in builder.included_diffs())

    def test_exclude_filter(self, sample_diff_result):
        policy = build_filter_policy(exclude_objects="table1")
        change_sets = ChangeLogBuilder(sample_diff_result, policy).change_sets()
        assert len(change_sets) == 6
        assert "createTable" not in [name for names in _change_names(change_sets) for name in names]

    def test_include_filter_follows_relation(self, sample_diff_result):
        policy = build_filter_policy(include_objects="table:customers")
        change_sets = ChangeLogBuilder(sample_diff_result, policy).change_sets()
        assert _change_names(change_sets) == [
            ["addColumn"],
            ["createIndex"],
            ["modifyDataType", "addNotNullConstraint"],
        ]

    def test_empty_diff(self, empty_diff_result, default_policy):
        builder = ChangeLogBuilder(empty_diff_result, default_policy)
        assert builder.change_sets() == []
        assert builder.to_dict() == {"databaseChangeLog": []}

    def test_builder_does_not_mutate_diff(self, sample_diff_result, default_policy):
        before = sample_diff_result.to_dict()
        ChangeLogBuilder(sample_diff_result, default_policy).to_dict()
        assert sample_diff_result.to_dict() == before


class TestQualification:
    """Tests for identifier qualification"""

    def test_create_table_attributes(self, sample_diff_result, default_policy):
        change = ChangeLogBuilder(sample_diff_result, default_policy).change_sets()[0].changes[0]
        assert change.attributes == {
            "catalogName": "shop",
            "schemaName": "public",
            "tableName": "table1",
            "tablespace": "fast_ts",
            "remarks": "Created by migration",
        }
        assert change.columns[0] == {
            "name": "id",
            "type": "INT",
            "constraints": {"nullable": False, "primaryKey": True},
        }
        assert change.object_name == "shop.public.table1"

    def test_qualifiers_omitted(self, sample_diff_result):
        policy = FilterPolicy(include_catalog=False, include_schema=False, include_tablespace=False)
        change = ChangeLogBuilder(sample_diff_result, policy).change_sets()[0].changes[0]
        assert "catalogName" not in change.attributes
        assert "schemaName" not in change.attributes
        assert "tablespace" not in change.attributes
        assert change.object_name == "table1"

    def test_foreign_key_uses_base_table_qualifiers(self, sample_diff_result, default_policy):
        builder = ChangeLogBuilder(sample_diff_result, default_policy)
        change = builder.change_sets()[3].changes[0]
        assert change.attributes["baseTableSchemaName"] == "public"
        assert change.attributes["baseTableName"] == "orders"
        assert change.attributes["baseColumnNames"] == "customer_id"
        assert change.attributes["referencedTableName"] == "customers"
        assert change.attributes["onDelete"] == "CASCADE"


def _single(object_type, change_type, **kwargs):
    diff = ObjectDiff(object_type=object_type, change_type=change_type, **kwargs)
    result = DiffResult(object_diffs=(diff,), generated_at="2024-01-01 00:00:00")
    return ChangeLogBuilder(result, FilterPolicy()).change_sets()


class TestPerTypeChanges:
    """Tests for the change produced for each object type"""

    def test_modified_index_is_dropped_and_recreated(self):
        change_sets = _single(
            ObjectType.INDEX, ChangeType.MODIFIED, name="idx", relation="t", attributes={"columns": ["a", "b"]}
        )
        assert _change_names(change_sets) == [["dropIndex", "createIndex"]]
        assert change_sets[0].changes[1].columns == [{"name": "a"}, {"name": "b"}]

    def test_primary_key_added(self):
        change_sets = _single(
            ObjectType.PRIMARY_KEY, ChangeType.ADDED, name="pk_t", relation="t", attributes={"columns": ["id"]}
        )
        assert change_sets[0].changes[0].attributes["columnNames"] == "id"

    def test_unique_constraint_removed(self):
        change_sets = _single(ObjectType.UNIQUE_CONSTRAINT, ChangeType.REMOVED, name="uq_t", relation="t")
        assert _change_names(change_sets) == [["dropUniqueConstraint"]]

    def test_sequence_changes(self):
        assert _change_names(
            _single(ObjectType.SEQUENCE, ChangeType.ADDED, name="s", attributes={"start_value": 1})
        ) == [["createSequence"]]
        altered = _single(
            ObjectType.SEQUENCE, ChangeType.MODIFIED, name="s", changed_fields={"increment_by": (1, 5)}
        )
        assert altered[0].changes[0].name == "alterSequence"
        assert altered[0].changes[0].attributes["incrementBy"] == 5

    def test_table_remarks_changed(self):
        change_sets = _single(
            ObjectType.TABLE, ChangeType.MODIFIED, name="t", changed_fields={"remarks": ("old", "new")}
        )
        assert change_sets[0].changes[0].name == "setTableRemarks"
        assert change_sets[0].changes[0].attributes["remarks"] == "new"

    def test_modified_object_without_renderable_change_is_skipped(self):
        assert _single(ObjectType.TABLE, ChangeType.MODIFIED, name="t", changed_fields={"owner": ("a", "b")}) == []

    @pytest.mark.parametrize("default,expected", [
        ("0", "addDefaultValue"),
        (None, "dropDefaultValue"),
    ])
    def test_column_default_changes(self, default, expected):
        change_sets = _single(
            ObjectType.COLUMN,
            ChangeType.MODIFIED,
            name="c",
            relation="t",
            attributes={"type": "INT"},
            changed_fields={"default": ("1", default)},
        )
        assert change_sets[0].changes[0].name == expected

    def test_view_removed(self):
        assert _change_names(_single(ObjectType.VIEW, ChangeType.REMOVED, name="v")) == [["dropView"]]

    def test_modified_view_replaces(self):
        change = _single(
            ObjectType.VIEW, ChangeType.MODIFIED, name="v", attributes={"definition": "SELECT 1"}
        )[0].changes[0]
        assert change.attributes["replaceIfExists"] is True
        assert change.attributes["selectQuery"] == "SELECT 1"
