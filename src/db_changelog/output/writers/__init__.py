"""Built-in changelog serializers."""

from db_changelog.output.writers.csv import CSVChangeLogSerializer
from db_changelog.output.writers.json import JSONChangeLogSerializer
from db_changelog.output.writers.text import TextChangeLogSerializer
from db_changelog.output.writers.xml import XMLChangeLogSerializer
from db_changelog.output.writers.yaml import YAMLChangeLogSerializer

__all__ = [
    "CSVChangeLogSerializer",
    "JSONChangeLogSerializer",
    "TextChangeLogSerializer",
    "XMLChangeLogSerializer",
    "YAMLChangeLogSerializer",
]
