"""XML changelog serializer."""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from typing import Any, TextIO

from db_changelog.core.constants import (
    DBCHANGELOG_XML_NAMESPACE,
    DBCHANGELOG_XSD_LOCATION,
    DEFAULT_CHANGESET_AUTHOR,
)
from db_changelog.core.exceptions import SerializationError
from db_changelog.diff.changelog import Change, ChangeLogBuilder
from db_changelog.diff.filters import FilterPolicy
from db_changelog.diff.models import DiffResult

logger = logging.getLogger(__name__)

XSI_NAMESPACE = "http://www.w3.org/2001/XMLSchema-instance"

# Attributes written as element text rather than XML attributes
_TEXT_ATTRIBUTES = {"selectQuery"}


def _xml_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _append_change(parent: ET.Element, change: Change) -> None:
    attributes = {k: _xml_value(v) for k, v in change.attributes.items() if k not in _TEXT_ATTRIBUTES}
    element = ET.SubElement(parent, change.name, attributes)
    for key in _TEXT_ATTRIBUTES & change.attributes.keys():
        element.text = str(change.attributes[key])
    for column in change.columns:
        column_attrs = {k: _xml_value(v) for k, v in column.items() if k != "constraints"}
        column_element = ET.SubElement(element, "column", column_attrs)
        if column.get("constraints"):
            ET.SubElement(
                column_element, "constraints", {k: _xml_value(v) for k, v in column["constraints"].items()}
            )


class XMLChangeLogSerializer:
    """Write a ``<databaseChangeLog>`` document."""

    format_name = "xml"
    file_extension = ".xml"

    def write(
        self,
        diff_result: DiffResult,
        policy: FilterPolicy,
        sink: TextIO,
        *,
        author: str = DEFAULT_CHANGESET_AUTHOR,
    ) -> None:
        logger.debug("Generating XML changelog...")
        change_sets = ChangeLogBuilder(diff_result, policy, author).change_sets()

        root = ET.Element(
            "databaseChangeLog",
            {
                "xmlns": DBCHANGELOG_XML_NAMESPACE,
                "xmlns:xsi": XSI_NAMESPACE,
                "xsi:schemaLocation": f"{DBCHANGELOG_XML_NAMESPACE} {DBCHANGELOG_XSD_LOCATION}",
            },
        )
        try:
            for change_set in change_sets:
                element = ET.SubElement(root, "changeSet", {"id": change_set.id, "author": change_set.author})
                for change in change_set.changes:
                    _append_change(element, change)
            ET.indent(root, space="    ")
            body = ET.tostring(root, encoding="unicode")
        except (TypeError, ValueError) as e:
            raise SerializationError(
                "XML serialization error", output_format=self.format_name, details=str(e), original_error=e
            ) from e

        encoding = getattr(sink, "encoding", None) or "UTF-8"
        sink.write(f'<?xml version="1.0" encoding="{encoding}"?>\n')
        sink.write(body)
        sink.write("\n")
        logger.debug(f"XML changelog written with {len(change_sets)} change sets")
