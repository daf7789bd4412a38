"""Tree reconciler: makes a replica directory tree mirror a source tree.

A sync cycle is two independent depth-first passes over the same
directory pair:

1. **Propagate** (source -> replica): create missing directories and copy
   files whose ``CopyDecision`` says the replica is stale.
2. **Prune** (replica only): delete files and directories that have no
   same-named counterpart in the source.

Propagate only ever adds and prune only ever removes, so each pass stays
simple.  Siblings are visited in name order so a cycle's records are
reproducible.

Error handling is "let it fail": any ``OSError`` raised by a filesystem
call escapes ``synchronize()`` untouched.  A cycle that fails part-way
leaves the replica partially updated; the next cycle corrects it.
"""

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

from folder_sync.sync.detector import ChangeDetector
from folder_sync.sync.errors import SourceNotFoundError
from folder_sync.sync.models import (
    CopyDecision,
    CopyReason,
    CycleReport,
    OperationKind,
    OperationRecord,
)

logger = logging.getLogger(__name__)


class OperationRecorder(Protocol):
    """Sink for status messages and replica operation records."""

    def record(self, message: str) -> None: ...

    def record_operation(
        self,
        kind: OperationKind,
        path: str,
        reason: CopyReason | None = None,
    ) -> None: ...


@dataclass
class _Cycle:
    """Mutable bookkeeping for one ``synchronize`` call."""

    dry_run: bool
    operations: list[OperationRecord] = field(default_factory=list)
    removed: set[Path] = field(default_factory=set)


class TreeReconciler:
    """Reconcile a replica directory tree against a source tree.

    Args:
        recorder: Receives one record per mutating operation.
        detector: Change detector for file pairs.  Defaults to a
            SHA-256 ``ChangeDetector``.
    """

    def __init__(
        self,
        recorder: OperationRecorder,
        detector: ChangeDetector | None = None,
    ) -> None:
        self.recorder = recorder
        self.detector = detector or ChangeDetector()

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def initialize(
        self,
        source: str | Path,
        replica: str | Path,
        dry_run: bool = False,
    ) -> None:
        """Validate the source root and make sure the replica root exists.

        Call once before the first ``synchronize()``.  With *dry_run* a
        missing replica root is reported but not created.

        Raises:
            SourceNotFoundError: If *source* is not an existing directory.
            ValueError: If the roots are the same directory or nested
                inside one another.
            OSError: If the replica root cannot be created.
        """
        source = Path(source)
        replica = Path(replica)

        if not source.is_dir():
            raise SourceNotFoundError(source)
        _check_disjoint(source, replica)

        if not replica.is_dir():
            if not dry_run:
                replica.mkdir(parents=True)
            self.recorder.record_operation(
                OperationKind.CREATED_DIRECTORY, str(replica)
            )

        self.recorder.record("Initialization completed successfully")

    def synchronize(
        self,
        source: str | Path,
        replica: str | Path,
        dry_run: bool = False,
    ) -> CycleReport:
        """Run one full propagate-then-prune cycle.

        Args:
            source: Source root.
            replica: Replica root.  Recreated if it was deleted since the
                previous cycle.
            dry_run: If ``True``, record the operations without applying
                them.

        Returns:
            A ``CycleReport`` listing the operations in the order applied.

        Raises:
            OSError: On the first filesystem failure.
        """
        source = Path(source)
        replica = Path(replica)
        started_at = datetime.now(timezone.utc).isoformat()
        cycle = _Cycle(dry_run=dry_run)

        self._propagate(source, replica, cycle, frozenset())
        self._prune(source, replica, cycle)

        return CycleReport(
            source=str(source),
            replica=str(replica),
            dry_run=dry_run,
            operations=cycle.operations,
            started_at=started_at,
            completed_at=datetime.now(timezone.utc).isoformat(),
        )

    # ------------------------------------------------------------------
    # Propagate pass
    # ------------------------------------------------------------------

    def _propagate(
        self,
        source_dir: Path,
        replica_dir: Path,
        cycle: _Cycle,
        ancestors: frozenset[Path],
    ) -> None:
        real_source = source_dir.resolve()
        if real_source in ancestors:
            logger.warning(
                "Skipping %s: it loops back to %s", source_dir, real_source
            )
            return
        ancestors = ancestors | {real_source}

        if not _is_real_dir(replica_dir):
            if os.path.lexists(replica_dir):
                self._remove(replica_dir, cycle)
            if not cycle.dry_run:
                replica_dir.mkdir(parents=True)
            self._emit(cycle, OperationKind.CREATED_DIRECTORY, replica_dir)

        files, subdirs = _scan(source_dir, follow_symlinks=True)

        for name in files:
            source_file = source_dir / name
            replica_file = replica_dir / name

            if os.path.lexists(replica_file) and not _is_regular_file(
                replica_file
            ):
                self._remove(replica_file, cycle)
                decision = CopyDecision(
                    should_copy=True, reason=CopyReason.NEW_FILE
                )
            else:
                decision = self.detector.decide(source_file, replica_file)

            if decision.should_copy:
                if not cycle.dry_run:
                    shutil.copyfile(source_file, replica_file)
                self._emit(
                    cycle, OperationKind.COPIED, replica_file, decision.reason
                )

        for name in subdirs:
            self._propagate(
                source_dir / name, replica_dir / name, cycle, ancestors
            )

    # ------------------------------------------------------------------
    # Prune pass
    # ------------------------------------------------------------------

    def _prune(self, source_dir: Path, replica_dir: Path, cycle: _Cycle) -> None:
        if not _is_real_dir(replica_dir):
            return

        files, subdirs = _scan(replica_dir, follow_symlinks=False)

        for name in files:
            replica_file = replica_dir / name
            if replica_file in cycle.removed:
                continue
            if not (source_dir / name).is_file():
                self._remove(replica_file, cycle)

        for name in subdirs:
            replica_sub = replica_dir / name
            if replica_sub in cycle.removed:
                continue
            source_sub = source_dir / name
            if not source_sub.is_dir():
                self._remove(replica_sub, cycle)
            else:
                self._prune(source_sub, replica_sub, cycle)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _remove(self, path: Path, cycle: _Cycle) -> None:
        """Delete a replica entry; directories are removed recursively."""
        if _is_real_dir(path):
            if not cycle.dry_run:
                shutil.rmtree(path)
            kind = OperationKind.DELETED_DIRECTORY
        else:
            if not cycle.dry_run:
                path.unlink()
            kind = OperationKind.DELETED
        cycle.removed.add(path)
        self._emit(cycle, kind, path)

    def _emit(
        self,
        cycle: _Cycle,
        kind: OperationKind,
        path: Path,
        reason: CopyReason | None = None,
    ) -> None:
        cycle.operations.append(
            OperationRecord(kind=kind, path=str(path), reason=reason)
        )
        self.recorder.record_operation(kind, str(path), reason)


def _scan(directory: Path, follow_symlinks: bool) -> tuple[list[str], list[str]]:
    """List the file and subdirectory names directly inside *directory*.

    With ``follow_symlinks=True`` (source side) links are classified by
    their target and entries that are neither files nor directories
    (broken links, sockets, FIFOs) are skipped.  With
    ``follow_symlinks=False`` (replica side) anything that is not a real
    directory counts as a file, so it can be unlinked.
    """
    files: list[str] = []
    subdirs: list[str] = []
    with os.scandir(directory) as it:
        for entry in it:
            if entry.is_dir(follow_symlinks=follow_symlinks):
                subdirs.append(entry.name)
            elif not follow_symlinks or entry.is_file():
                files.append(entry.name)
            else:
                logger.debug("Ignoring special entry %s", entry.path)
    files.sort()
    subdirs.sort()
    return files, subdirs


def _is_real_dir(path: Path) -> bool:
    return path.is_dir() and not path.is_symlink()


def _is_regular_file(path: Path) -> bool:
    return path.is_file() and not path.is_symlink()


def _check_disjoint(source: Path, replica: Path) -> None:
    """Reject replica/source roots that overlap.

    Pruning a replica that contains the source would delete the source;
    propagating into a replica inside the source would copy it into itself.
    """
    real_source = source.resolve()
    real_replica = replica.resolve()
    if real_source == real_replica:
        raise ValueError(
            f"Source and replica point to the same directory: {real_source}"
        )
    if real_replica.is_relative_to(real_source):
        raise ValueError(
            f"Replica directory {real_replica} is inside the source directory {real_source}"
        )
    if real_source.is_relative_to(real_replica):
        raise ValueError(
            f"Source directory {real_source} is inside the replica directory {real_replica}"
        )
