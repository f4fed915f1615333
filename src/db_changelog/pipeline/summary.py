"""Aggregate verdicts and reports over per-target emission results."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from db_changelog.pipeline.models import EmissionResult


@dataclass(frozen=True)
class EmissionSummary:
    """Aggregate outcome of one emission run"""

    total: int
    succeeded: int
    failed: int
    message: str

    @property
    def all_succeeded(self) -> bool:
        return self.failed == 0


def summarize_results(results: list[EmissionResult]) -> EmissionSummary:
    """Summarize a run, e.g. '3 of 4 changelog outputs written; target #2 failed: <reason>'."""
    total = len(results)
    failures = [r for r in results if not r.success]
    succeeded = total - len(failures)

    message = f"{succeeded} of {total} changelog outputs written"
    if failures:
        reasons = "; ".join(f"target #{r.index} failed: {r.error_message}" for r in failures)
        message = f"{message}; {reasons}"

    return EmissionSummary(total=total, succeeded=succeeded, failed=len(failures), message=message)


def build_emission_step_summary(results: list[EmissionResult]) -> str:
    """Build markdown summary table for changelog outputs."""
    summary = summarize_results(results)
    lines = [
        "### Changelog Summary",
        "",
        f"- Outputs written: {summary.succeeded}/{summary.total}",
        "",
        "| # | Destination | Format | Encoding | Status | Size |",
        "|---:|---|---|---|---|---:|",
    ]
    for result in results:
        status = "OK" if result.success else f"FAILED ({result.failure.value if result.failure else 'unknown'})"
        size = result.file_size_formatted if result.file_size_bytes else "-"
        lines.append(
            f"| {result.index} | `{result.destination}` | {result.format_name} | {result.encoding} | {status} | {size} |"
        )
    return "\n".join(lines)


def append_github_step_summary(markdown: str, logger: logging.Logger | None = None) -> bool:
    """Append markdown to GitHub Actions job summary when available."""
    summary_path = os.environ.get("GITHUB_STEP_SUMMARY")
    if not summary_path:
        return False

    try:
        with open(summary_path, "a", encoding="utf-8") as f:
            f.write(markdown.rstrip() + "\n\n")
        return True
    except OSError as e:
        if logger is not None:
            logger.warning(f"Failed to write GitHub step summary: {e}")
        return False
