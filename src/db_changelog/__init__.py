"""
db-changelog - Database schema diff to changelog emission

Renders an already computed schema diff into one or more changelog
documents (xml, yaml, json, txt, csv), each with its own destination and
character encoding, sharing one object filter policy.
"""

from db_changelog.core import (
    ChangeLogError,
    ConfigurationError,
    DiagnosticSink,
    LogLevel,
    __version__,
)
from db_changelog.diff import DiffResult, FilterPolicy, build_filter_policy, load_diff_result
from db_changelog.output import register_serializer, resolve_serializer
from db_changelog.pipeline import (
    ChangeLogPipeline,
    EmissionResult,
    FailureKind,
    OutputTarget,
    declare_target,
    run_emission,
    summarize_results,
)

__all__ = [
    "__version__",
    "ChangeLogError",
    "ChangeLogPipeline",
    "ConfigurationError",
    "DiagnosticSink",
    "DiffResult",
    "EmissionResult",
    "FailureKind",
    "FilterPolicy",
    "LogLevel",
    "OutputTarget",
    "build_filter_policy",
    "declare_target",
    "load_diff_result",
    "register_serializer",
    "resolve_serializer",
    "run_emission",
    "summarize_results",
]
