"""Console and JSON rendering of a checker run."""

from __future__ import annotations

from typing import Dict, List

from .checker import CheckReport
from .checks import CheckOutcome
from .context import JobContext


def _status(outcome: CheckOutcome | None) -> str:
    if outcome is None:
        return "SKIPPED"
    if outcome.error:
        return "ERROR"
    return "PASS" if outcome.compatible else "FAIL"


def format_summary(report: CheckReport, context: JobContext) -> str:
    """Create a human-readable summary table for console output."""

    lines: List[str] = []
    lines.append("Compatibility Summary")
    lines.append("=" * 40)
    header = f"{'Check':<16} | {'Status':>8}"
    lines.append(header)
    lines.append("-" * len(header))
    lines.append(f"{'file_patterns':<16} | {_status(report.file_scan):>8}")
    lines.append(f"{'runtime_probe':<16} | {_status(report.probe):>8}")
    lines.append("-" * len(header))
    lines.append(f"Variant   : {report.variant.value}")
    if report.cancelled:
        lines.append("Status    : CANCELLED")
    elif report.compatible is None:
        lines.append("Status    : UNKNOWN")
    else:
        lines.append(f"Status    : {'COMPATIBLE' if report.compatible else 'INCOMPATIBLE'}")
    lines.append(f"Warnings  : {len(context.warnings)}")
    lines.append(f"Telemetry : {len(context.telemetry)}")

    if context.warnings:
        lines.append("")
        lines.append("Warnings")
        lines.append("-" * 40)
        for warning in context.warnings:
            lines.append(f"  {warning}")
    return "\n".join(lines)


def to_dict(report: CheckReport, context: JobContext) -> Dict[str, object]:
    data = report.to_dict()
    data["warnings"] = list(context.warnings)
    data["telemetry"] = context.telemetry.to_list()
    return data
