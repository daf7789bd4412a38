"""Pydantic models for the one-way sync engine.

Defines the data contracts shared by the reconciler, the change detector,
the runner and the reporter:

- ``CopyReason``: Why a file was (or was not) copied.
- ``CopyDecision``: Outcome of comparing one source/replica file pair.
- ``OperationKind``: Enum of mutating operations applied to the replica.
- ``OperationRecord``: One mutating operation on one path.
- ``CycleReport``: Aggregate of all operations in one sync cycle.

Nothing here is persisted: every model is rebuilt from the live trees on
each cycle.  All models are frozen.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class CopyReason(str, Enum):
    """Result of the change-detection policy for a file pair."""

    NEW_FILE = "new_file"
    SIZE_DIFFERENCE = "size_difference"
    HASH_DIFFERENCE = "hash_difference"
    IDENTICAL = "identical"

    @property
    def label(self) -> str:
        """Upper-case label used in log lines, e.g. ``NEW FILE``."""
        return self.value.replace("_", " ").upper()


class OperationKind(str, Enum):
    """Mutating operations the reconciler applies to the replica."""

    CREATED_DIRECTORY = "created_directory"
    COPIED = "copied"
    DELETED = "deleted"
    DELETED_DIRECTORY = "deleted_directory"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").upper()


class CopyDecision(BaseModel):
    """Whether a replica file must be refreshed from its source file.

    Attributes:
        should_copy: True if the replica copy is missing or stale.
        reason: The check that produced the decision.
    """

    should_copy: bool
    reason: CopyReason

    model_config = {"frozen": True}


class OperationRecord(BaseModel):
    """A single mutating operation applied to the replica tree.

    Attributes:
        kind: Operation performed.
        path: Replica path the operation targeted.
        reason: Copy reason, only set for ``COPIED`` records.
    """

    kind: OperationKind
    path: str
    reason: CopyReason | None = None

    model_config = {"frozen": True}

    @property
    def label(self) -> str:
        """Log label, e.g. ``COPIED (SIZE DIFFERENCE)``."""
        if self.reason is not None:
            return f"{self.kind.label} ({self.reason.label})"
        return self.kind.label

    def describe(self) -> str:
        return f"{self.label}: {self.path}"


class CycleReport(BaseModel):
    """Aggregate report for one ``synchronize`` call.

    Attributes:
        source: Source root of the cycle.
        replica: Replica root of the cycle.
        dry_run: Whether operations were only computed, not applied.
        operations: Records in the order they were applied.
        started_at: ISO 8601 timestamp when the cycle started.
        completed_at: ISO 8601 timestamp when the cycle completed.
    """

    source: str
    replica: str
    dry_run: bool = False
    operations: list[OperationRecord] = []
    started_at: str
    completed_at: str | None = None

    model_config = {"frozen": True}

    def _of_kind(self, kind: OperationKind) -> list[OperationRecord]:
        return [op for op in self.operations if op.kind == kind]

    @property
    def created_directories(self) -> list[OperationRecord]:
        """Records where kind is CREATED_DIRECTORY."""
        return self._of_kind(OperationKind.CREATED_DIRECTORY)

    @property
    def copied(self) -> list[OperationRecord]:
        """Records where kind is COPIED."""
        return self._of_kind(OperationKind.COPIED)

    @property
    def deleted(self) -> list[OperationRecord]:
        """Records where kind is DELETED."""
        return self._of_kind(OperationKind.DELETED)

    @property
    def deleted_directories(self) -> list[OperationRecord]:
        """Records where kind is DELETED_DIRECTORY."""
        return self._of_kind(OperationKind.DELETED_DIRECTORY)

    @property
    def changed(self) -> bool:
        return bool(self.operations)

    def summary(self) -> str:
        """One-line summary with counts by operation kind."""
        text = (
            f"{len(self.copied)} copied, "
            f"{len(self.deleted)} deleted, "
            f"{len(self.created_directories)} directories created, "
            f"{len(self.deleted_directories)} directories deleted"
        )
        if self.dry_run:
            text += " (dry run)"
        return text
