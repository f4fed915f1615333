"""Pipeline module - output targets, destinations and the emission driver."""

from db_changelog.pipeline.destinations import (
    Destination,
    FileDestination,
    StdoutDestination,
    StreamDestination,
    as_destination,
)
from db_changelog.pipeline.driver import ChangeLogPipeline, emit_target, run_emission
from db_changelog.pipeline.models import EmissionResult, FailureKind, OutputTarget
from db_changelog.pipeline.summary import (
    EmissionSummary,
    append_github_step_summary,
    build_emission_step_summary,
    summarize_results,
)
from db_changelog.pipeline.targets import declare_target

__all__ = [
    "ChangeLogPipeline",
    "Destination",
    "EmissionResult",
    "EmissionSummary",
    "FailureKind",
    "FileDestination",
    "OutputTarget",
    "StdoutDestination",
    "StreamDestination",
    "append_github_step_summary",
    "as_destination",
    "build_emission_step_summary",
    "declare_target",
    "emit_target",
    "run_emission",
    "summarize_results",
]
