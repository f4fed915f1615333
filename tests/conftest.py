"""Pytest configuration and fixtures for db-changelog tests"""
import json

import pytest

from db_changelog.diff.filters import FilterPolicy
from db_changelog.diff.models import ChangeType, DiffResult, ObjectDiff, ObjectType


@pytest.fixture
def sample_object_diffs():
    """A mix of added, removed, modified and unchanged objects"""
    return (
        ObjectDiff(
            object_type=ObjectType.TABLE,
            name="table1",
            change_type=ChangeType.ADDED,
            catalog="shop",
            schema="public",
            tablespace="fast_ts",
            attributes={
                "remarks": "Created by migration",
                "columns": [
                    {"name": "id", "type": "INT", "nullable": False, "primary_key": True},
                    {"name": "label", "type": "VARCHAR(50)"},
                ],
            },
        ),
        ObjectDiff(
            object_type=ObjectType.COLUMN,
            name="email",
            change_type=ChangeType.ADDED,
            schema="public",
            relation="customers",
            attributes={"type": "VARCHAR(255)", "nullable": True},
        ),
        ObjectDiff(
            object_type=ObjectType.INDEX,
            name="idx_customers_email",
            change_type=ChangeType.ADDED,
            schema="public",
            relation="customers",
            attributes={"columns": ["email"], "unique": True},
        ),
        ObjectDiff(
            object_type=ObjectType.FOREIGN_KEY,
            name="fk_orders_customer",
            change_type=ChangeType.ADDED,
            schema="public",
            relation="orders",
            attributes={
                "columns": ["customer_id"],
                "referenced_schema": "public",
                "referenced_table": "customers",
                "referenced_columns": ["id"],
                "on_delete": "CASCADE",
            },
        ),
        ObjectDiff(
            object_type=ObjectType.TABLE,
            name="legacy",
            change_type=ChangeType.REMOVED,
            schema="public",
        ),
        ObjectDiff(
            object_type=ObjectType.COLUMN,
            name="name",
            change_type=ChangeType.MODIFIED,
            schema="public",
            relation="customers",
            attributes={"type": "VARCHAR(100)", "nullable": False},
            changed_fields={"type": ("VARCHAR(50)", "VARCHAR(100)"), "nullable": (True, False)},
        ),
        ObjectDiff(
            object_type=ObjectType.VIEW,
            name="active_customers",
            change_type=ChangeType.MODIFIED,
            schema="public",
            attributes={"definition": "SELECT * FROM customers WHERE active = 1"},
            changed_fields={"definition": ("SELECT * FROM customers", "SELECT * FROM customers WHERE active = 1")},
        ),
        ObjectDiff(
            object_type=ObjectType.SEQUENCE,
            name="order_seq",
            change_type=ChangeType.UNCHANGED,
            schema="public",
        ),
    )


@pytest.fixture
def sample_diff_result(sample_object_diffs):
    """Diff result with seven changed objects and one unchanged object"""
    return DiffResult(
        object_diffs=sample_object_diffs,
        reference_label="production",
        comparison_label="staging",
        reference_url="postgresql://prod/shop",
        comparison_url="postgresql://staging/shop",
        generated_at="2024-05-01 12:30:00",
        tool_version="1.0.0",
    )


@pytest.fixture
def empty_diff_result():
    """Diff result with no differences"""
    return DiffResult(generated_at="2024-05-01 12:30:00")


@pytest.fixture
def default_policy():
    """Policy that keeps every object and qualifier"""
    return FilterPolicy()


@pytest.fixture
def diff_file(tmp_path, sample_diff_result):
    """The sample diff result saved as JSON"""
    path = tmp_path / "diff.json"
    path.write_text(json.dumps(sample_diff_result.to_dict(), indent=2), encoding="utf-8")
    return path
