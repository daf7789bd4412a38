"""One-way directory sync engine.

Public API for making a replica directory tree mirror a source tree.

Architecture
------------
Each cycle re-derives everything from the live trees; there is no
manifest or archived state between cycles.  A cycle is a propagate pass
(copy/create) followed by an independent prune pass (delete).

Modules:

- ``reconciler`` -- ``TreeReconciler``: ``initialize()`` once, then
  ``synchronize()`` per cycle.
- ``detector``   -- ``ChangeDetector``: existence, size, then content
  digest comparison for a file pair.
- ``models``     -- ``CopyReason``, ``CopyDecision``, ``OperationKind``,
  ``OperationRecord``, ``CycleReport``: core data contracts.
- ``reporter``   -- Human-readable and JSON report formatting.
- ``errors``     -- ``SourceNotFoundError``.

Usage example
-------------
::

    from folder_sync.logger import SyncLog, setup_logging
    from folder_sync.sync import TreeReconciler, format_cycle_report

    setup_logging("/var/log/folder-sync.log")
    reconciler = TreeReconciler(recorder=SyncLog())

    reconciler.initialize("/data/source", "/backup/replica")
    report = reconciler.synchronize("/data/source", "/backup/replica")
    print(format_cycle_report(report))
"""

from .detector import ChangeDetector, file_digest
from .errors import SourceNotFoundError
from .models import (
    CopyDecision,
    CopyReason,
    CycleReport,
    OperationKind,
    OperationRecord,
)
from .reconciler import OperationRecorder, TreeReconciler
from .reporter import format_cycle_report, report_to_json

__all__ = [
    "ChangeDetector",
    "CopyDecision",
    "CopyReason",
    "CycleReport",
    "OperationKind",
    "OperationRecord",
    "OperationRecorder",
    "SourceNotFoundError",
    "TreeReconciler",
    "file_digest",
    "format_cycle_report",
    "report_to_json",
]
