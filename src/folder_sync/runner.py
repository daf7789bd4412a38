"""Periodic scheduling loop around the tree reconciler.

``initialize()`` failures are fatal and propagate to the caller.
``synchronize()`` failures are logged and retried after a short cooldown,
forever: the replica is expected to heal once the transient condition
(locked file, full disk, unplugged drive) clears.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from folder_sync.config import SyncOptions
from folder_sync.sync.models import CycleReport
from folder_sync.sync.reconciler import OperationRecorder, TreeReconciler

logger = logging.getLogger(__name__)


class SyncRunner:
    """Run sync cycles on a fixed interval.

    Args:
        reconciler: Reconciler that performs each cycle.
        options: Source/replica roots and timing settings.
        recorder: Receives cycle start/finish/error messages.
        sleep: Blocking sleep function, replaceable in tests.
        dry_run: Compute operations without applying them.
    """

    def __init__(
        self,
        reconciler: TreeReconciler,
        options: SyncOptions,
        recorder: OperationRecorder,
        sleep: Callable[[float], None] = time.sleep,
        dry_run: bool = False,
    ) -> None:
        self.reconciler = reconciler
        self.options = options
        self.recorder = recorder
        self.sleep = sleep
        self.dry_run = dry_run

    def initialize(self) -> None:
        """Validate roots once before the first cycle.

        Raises:
            SourceNotFoundError: If the source directory is missing.
            ValueError: If source and replica overlap.
            OSError: If the replica root cannot be created.
        """
        self.reconciler.initialize(
            self.options.source, self.options.replica, dry_run=self.dry_run
        )

    def run_cycle(self) -> CycleReport | None:
        """Run one cycle, returning its report or ``None`` if it failed."""
        self.recorder.record("Starting synchronization cycle")
        try:
            report = self.reconciler.synchronize(
                self.options.source,
                self.options.replica,
                dry_run=self.dry_run,
            )
        except Exception as exc:
            self.recorder.record(f"Error during synchronization: {exc}")
            logger.debug("Cycle failed", exc_info=True)
            return None

        self.recorder.record(
            f"Synchronization cycle completed: {report.summary()}"
        )
        return report

    def run_forever(self, max_cycles: int | None = None) -> None:
        """Run cycles until the process is stopped.

        Sleeps ``interval_seconds`` after a successful cycle and
        ``retry_delay_seconds`` after a failed one.  A bounded run returns
        right after its last cycle without sleeping.

        Args:
            max_cycles: Stop after this many cycles; ``None`` runs forever.
        """
        cycles = 0
        while max_cycles is None or cycles < max_cycles:
            report = self.run_cycle()
            cycles += 1
            if max_cycles is not None and cycles >= max_cycles:
                break
            if report is None:
                delay = self.options.retry_delay_seconds
                self.recorder.record(f"Retrying in {delay} seconds")
            else:
                delay = self.options.interval_seconds
                self.recorder.record(f"Next sync in {delay} seconds")
            self.sleep(delay)
