"""Changelog serializer protocol."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, TextIO, runtime_checkable

if TYPE_CHECKING:
    from db_changelog.diff.filters import FilterPolicy
    from db_changelog.diff.models import DiffResult

__all__ = ["ChangeLogSerializer"]


@runtime_checkable
class ChangeLogSerializer(Protocol):
    """Protocol defining the interface for changelog format serializers.

    New formats are added by registering a class that satisfies this
    protocol with ``db_changelog.output.registry.register_serializer``;
    no base class is required.

    Example implementation:
        class MarkdownSerializer:
            format_name = "markdown"
            file_extension = ".md"

            def write(self, diff_result, policy, sink, *, author=DEFAULT_CHANGESET_AUTHOR):
                for change_set in ChangeLogBuilder(diff_result, policy, author).change_sets():
                    sink.write(f"- {change_set.id}\\n")
    """

    format_name: str
    file_extension: str

    def write(
        self,
        diff_result: DiffResult,
        policy: FilterPolicy,
        sink: TextIO,
        *,
        author: str = ...,
    ) -> None:
        """Write the changelog for ``diff_result`` to ``sink``.

        The sink is already open with the target's encoding. Implementations
        must not close it and must not keep ``sink`` or ``diff_result``
        after returning.

        Raises:
            SerializationError: If the changelog cannot be rendered
            DataAccessError: If reading the diff result fails
        """
        ...
