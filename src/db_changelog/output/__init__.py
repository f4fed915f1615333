"""Output module - changelog serializers and their registry."""

from db_changelog.output.protocols import ChangeLogSerializer
from db_changelog.output.registry import (
    SERIALIZER_REGISTRY,
    available_formats,
    register_serializer,
    resolve_serializer,
)
from db_changelog.output.writers import (
    CSVChangeLogSerializer,
    JSONChangeLogSerializer,
    TextChangeLogSerializer,
    XMLChangeLogSerializer,
    YAMLChangeLogSerializer,
)

__all__ = [
    "CSVChangeLogSerializer",
    "ChangeLogSerializer",
    "JSONChangeLogSerializer",
    "SERIALIZER_REGISTRY",
    "TextChangeLogSerializer",
    "XMLChangeLogSerializer",
    "YAMLChangeLogSerializer",
    "available_formats",
    "register_serializer",
    "resolve_serializer",
]
