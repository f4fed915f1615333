"""Changelog serializer registry.

Maps format ids to serializer classes. The built-in formats are registered at
import time; callers may register more before any pipeline runs.
"""

from __future__ import annotations

from db_changelog.core.exceptions import UnknownFormatError
from db_changelog.output.protocols import ChangeLogSerializer
from db_changelog.output.writers import (
    CSVChangeLogSerializer,
    JSONChangeLogSerializer,
    TextChangeLogSerializer,
    XMLChangeLogSerializer,
    YAMLChangeLogSerializer,
)

SERIALIZER_REGISTRY: dict[str, type] = {
    "xml": XMLChangeLogSerializer,
    "yaml": YAMLChangeLogSerializer,
    "yml": YAMLChangeLogSerializer,
    "json": JSONChangeLogSerializer,
    "txt": TextChangeLogSerializer,
    "text": TextChangeLogSerializer,
    "csv": CSVChangeLogSerializer,
}


def _normalize(format_id: str) -> str:
    return format_id.strip().lstrip(".").lower()


def available_formats() -> list[str]:
    """Canonical format names, one per registered serializer."""
    return sorted({serializer_cls.format_name for serializer_cls in SERIALIZER_REGISTRY.values()})


def register_serializer(format_id: str, serializer_cls: type, *aliases: str) -> None:
    """Register ``serializer_cls`` under ``format_id`` and any aliases.

    Raises:
        TypeError: If instances of ``serializer_cls`` do not satisfy ChangeLogSerializer
    """
    if not isinstance(serializer_cls(), ChangeLogSerializer):
        raise TypeError(f"{serializer_cls.__name__} does not implement the ChangeLogSerializer protocol")
    for name in (format_id, *aliases):
        SERIALIZER_REGISTRY[_normalize(name)] = serializer_cls


def resolve_serializer(format_id: str | None) -> ChangeLogSerializer:
    """Return a serializer instance for ``format_id``.

    Raises:
        UnknownFormatError: If no serializer is registered for the format
    """
    serializer_cls = SERIALIZER_REGISTRY.get(_normalize(format_id)) if format_id else None
    if serializer_cls is None:
        raise UnknownFormatError(format_id, available_formats())
    return serializer_cls()


__all__ = ["SERIALIZER_REGISTRY", "available_formats", "register_serializer", "resolve_serializer"]
