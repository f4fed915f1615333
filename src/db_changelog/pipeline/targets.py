"""Output target declaration."""

from __future__ import annotations

import logging
import os
from typing import BinaryIO

from db_changelog.core.constants import infer_format_from_path
from db_changelog.core.exceptions import UnknownFormatError
from db_changelog.output.registry import available_formats, resolve_serializer
from db_changelog.pipeline.destinations import Destination, FileDestination, as_destination
from db_changelog.pipeline.models import OutputTarget

logger = logging.getLogger(__name__)


def declare_target(
    destination: Destination | str | os.PathLike | BinaryIO,
    format_id: str | None = None,
    encoding: str | None = None,
) -> OutputTarget:
    """
    Declare an output target, binding its serializer immediately.

    Nothing is opened here; the destination is only opened when the
    emission driver writes the target.

    Args:
        destination: Path, '-' or 'stdout', binary stream, or Destination
        format_id: Format name (xml, yaml, json, txt, csv); inferred from the
                   file extension when omitted
        encoding: Encoding override; None or blank uses the run default

    Returns:
        OutputTarget ready for the emission driver

    Raises:
        UnknownFormatError: If the format is unknown or cannot be inferred
    """
    resolved_destination = as_destination(destination)

    if not format_id:
        if isinstance(resolved_destination, FileDestination):
            format_id = infer_format_from_path(resolved_destination.path)
        if not format_id:
            raise UnknownFormatError(format_id, available_formats())

    serializer = resolve_serializer(format_id)
    override = encoding.strip() if encoding and encoding.strip() else None

    target = OutputTarget(destination=resolved_destination, serializer=serializer, encoding=override)
    logger.debug(
        f"Declared {serializer.format_name} changelog target {target.describe()}"
        + (f" with encoding {override}" if override else "")
    )
    return target
