"""Cycle report formatting functions.

Provides human-readable and machine-readable output for a sync cycle:

- ``format_cycle_report`` -- multi-line summary grouped by operation.
- ``report_to_json`` -- structured dict for ``--json`` output.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .models import CycleReport, OperationRecord

# ------------------------------------------------------------------
# Human-readable report
# ------------------------------------------------------------------


def format_cycle_report(report: CycleReport) -> str:
    """Format a cycle report as human-readable text.

    Sections are only included when they contain at least one record.

    Args:
        report: The completed cycle report.

    Returns:
        Multi-line formatted string.
    """
    lines: list[str] = []

    header = f"Sync report: {report.source} -> {report.replica}"
    if report.dry_run:
        header += " (DRY RUN)"
    lines.append(header)
    lines.append(f"Started: {report.started_at}")
    if report.completed_at:
        lines.append(f"Completed: {report.completed_at}")
    lines.append("")

    if not report.changed:
        lines.append("Replica already up to date.")
        return "\n".join(lines)

    lines.append(f"Operations: {report.summary()}")
    lines.append("")

    _section(lines, "Directories created:", report.created_directories)
    _section(lines, "Files copied:", report.copied, with_reason=True)
    _section(lines, "Files deleted:", report.deleted)
    _section(lines, "Directories deleted:", report.deleted_directories)

    return "\n".join(lines).rstrip()


def _section(
    lines: list[str],
    title: str,
    records: list[OperationRecord],
    with_reason: bool = False,
) -> None:
    if not records:
        return
    lines.append(title)
    for record in records:
        if with_reason and record.reason is not None:
            lines.append(f"  {record.path} ({record.reason.label})")
        else:
            lines.append(f"  {record.path}")
    lines.append("")


# ------------------------------------------------------------------
# JSON output
# ------------------------------------------------------------------


def report_to_json(report: CycleReport) -> dict[str, Any]:
    """Convert a cycle report to a JSON-serialisable dict.

    Returns:
        Dict with roots, timestamps, per-kind counts and the ordered list
        of operations.
    """
    return {
        "source": report.source,
        "replica": report.replica,
        "dry_run": report.dry_run,
        "started_at": report.started_at,
        "completed_at": report.completed_at,
        "summary": {
            "copied": len(report.copied),
            "deleted": len(report.deleted),
            "created_directories": len(report.created_directories),
            "deleted_directories": len(report.deleted_directories),
            "total": len(report.operations),
        },
        "operations": [
            {
                "kind": op.kind.value,
                "path": op.path,
                "reason": op.reason.value if op.reason else None,
            }
            for op in report.operations
        ],
    }
