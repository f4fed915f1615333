"""Tests for the diff result model and its JSON loader"""
import json

import pytest

from db_changelog.core.exceptions import ConfigurationError
from db_changelog.diff.models import ChangeType, DiffResult, ObjectDiff, ObjectType, load_diff_result


class TestObjectType:
    """Tests for ObjectType parsing"""

    @pytest.mark.parametrize("value,expected", [
        ("table", ObjectType.TABLE),
        ("Table", ObjectType.TABLE),
        ("primaryKey", ObjectType.PRIMARY_KEY),
        ("foreign_key", ObjectType.FOREIGN_KEY),
        ("uniqueConstraint", ObjectType.UNIQUE_CONSTRAINT),
    ])
    def test_parse(self, value, expected):
        assert ObjectType.parse(value) is expected

    def test_parse_unknown(self):
        with pytest.raises(ValueError, match="Unknown object type"):
            ObjectType.parse("widget")

    def test_label(self):
        assert ObjectType.PRIMARY_KEY.label == "Primary Keys"


class TestDiffResult:
    """Tests for DiffResult and DiffSummary"""

    def test_summary_counts(self, sample_diff_result):
        summary = sample_diff_result.summary
        assert summary.added == 4
        assert summary.removed == 1
        assert summary.modified == 2
        assert summary.unchanged == 1
        assert summary.total_changes == 7
        assert summary.total_summary == "4 added, 1 removed, 2 modified"

    def test_natural_language_summary(self, sample_diff_result):
        text = sample_diff_result.summary.natural_language_summary
        assert "Tables: 1 added, 1 removed" in text
        assert "Columns: 1 added, 1 modified" in text
        assert "Sequences" not in text

    def test_no_changes(self, empty_diff_result):
        assert not empty_diff_result.summary.has_changes
        assert empty_diff_result.summary.natural_language_summary == "No changes detected"
        assert empty_diff_result.changes == []

    def test_changes_excludes_unchanged(self, sample_diff_result):
        assert len(sample_diff_result.changes) == 7

    def test_frozen(self, sample_diff_result):
        with pytest.raises(AttributeError):
            sample_diff_result.reference_label = "other"

    def test_attributes_are_read_only(self, sample_object_diffs):
        with pytest.raises(TypeError):
            sample_object_diffs[0].attributes["remarks"] = "changed"

    def test_changeset_id_root(self, sample_diff_result):
        assert sample_diff_result.changeset_id_root == "20240501123000"

    def test_generated_at_defaults_to_now(self):
        result = DiffResult()
        assert len(result.generated_at) == 19
        assert result.tool_version

    def test_dict_round_trip(self, sample_diff_result):
        restored = DiffResult.from_dict(json.loads(json.dumps(sample_diff_result.to_dict())))
        assert restored == sample_diff_result


class TestLoadDiffResult:
    """Tests for load_diff_result"""

    def test_load(self, diff_file, sample_diff_result):
        loaded = load_diff_result(diff_file)
        assert loaded.reference_label == "production"
        assert len(loaded.object_diffs) == len(sample_diff_result.object_diffs)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Diff file not found"):
            load_diff_result(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        with pytest.raises(ConfigurationError, match="Invalid JSON"):
            load_diff_result(path)

    def test_not_an_object(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[]")
        with pytest.raises(ConfigurationError, match="must contain a JSON object"):
            load_diff_result(path)

    def test_malformed_object(self, tmp_path):
        path = tmp_path / "malformed.json"
        path.write_text(json.dumps({"objects": [{"object_type": "widget", "name": "x"}]}))
        with pytest.raises(ConfigurationError, match="Malformed diff file"):
            load_diff_result(path)

    def test_changed_fields_accept_pairs(self):
        diff = ObjectDiff.from_dict({
            "object_type": "column",
            "name": "c",
            "change_type": "MODIFIED",
            "relation": "t",
            "changed_fields": {"type": ["INT", "BIGINT"]},
        })
        assert diff.change_type is ChangeType.MODIFIED
        assert diff.changed_fields["type"] == ("INT", "BIGINT")
