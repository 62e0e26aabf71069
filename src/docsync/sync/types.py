"""Types shared by the sync orchestrator and its callers.

This module defines:
- DocumentEditor: the editor collaborator (serialize / load)
- BatchOperation, PendingBatch, BatchResult: batch move bookkeeping
- OperationResult: outcome of single-file operations
- ConflictResolutionRequired: a conflicting batch was run without a decision
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from docsync.core.errors import DocsyncError
from docsync.core.types import Backend
from docsync.sync.conflicts import ConflictRecord

# Consulted between batch items; returning True stops the batch
CancelCheck = Callable[[], bool]


class DocumentEditor(Protocol):
    """The editing engine, consumed only through these two calls."""

    def serialize_current(self) -> str:
        """Serialize the document currently open in the editor."""
        ...

    def load_document(self, name: str, content: str, bill_type: int) -> None:
        """Load plaintext content into the editor."""
        ...


class BatchOperation(Enum):
    """Direction of a batch move."""

    TO_LOCAL = "to_local"  # remote -> local store
    TO_SERVER = "to_server"  # local store -> remote
    MIGRATE = "migrate"  # remote A -> remote B

    @property
    def verb(self) -> str:
        """Past participle used in summaries."""
        return {
            BatchOperation.TO_LOCAL: "downloaded",
            BatchOperation.TO_SERVER: "uploaded",
            BatchOperation.MIGRATE: "migrated",
        }[self]


class ConflictResolutionRequired(DocsyncError):
    """A batch with conflicts was run without choosing a resolution."""

    def __init__(self, conflicts: ConflictRecord) -> None:
        super().__init__(conflicts.message)
        self.conflicts = conflicts


@dataclass
class PendingBatch:
    """A prepared batch waiting for commit (and for a resolution if needed).

    Attributes:
        operation: Direction of the move.
        names: Files selected for the move, in selection order.
        conflicts: Names already present at the destination.
        source: Remote backend files come from (None for local).
        target: Remote backend files go to (None for local).
        protection: Protection flag reported by the source, per name.
        consumed: Set once run; a batch is resolved exactly once.
    """

    operation: BatchOperation
    names: list[str]
    conflicts: ConflictRecord
    source: Backend | None = None
    target: Backend | None = None
    protection: dict[str, bool] = field(default_factory=dict)
    consumed: bool = False

    @property
    def needs_resolution(self) -> bool:
        """True when the batch collides with the destination."""
        return bool(self.conflicts)

    @property
    def direction(self) -> str:
        """Where files go to or come from, for messages."""
        if self.operation is BatchOperation.TO_LOCAL and self.source is not None:
            return f"from {self.source.display_name}"
        if self.target is not None:
            return f"to {self.target.display_name}"
        return ""


@dataclass
class BatchResult:
    """Aggregate outcome of a batch; partial failure is a result, not an error.

    Attributes:
        operation: Direction of the move.
        succeeded: Names moved.
        failed: Names that could not be moved.
        skipped: Names left out by the resolution or by cancellation.
        errors: User message per failed name.
        message: Summary line.
    """

    operation: BatchOperation
    succeeded: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    errors: dict[str, str] = field(default_factory=dict)
    message: str = ""

    @property
    def succeeded_count(self) -> int:
        return len(self.succeeded)

    @property
    def failed_count(self) -> int:
        return len(self.failed)

    @property
    def ok(self) -> bool:
        """True when nothing failed."""
        return not self.failed


@dataclass(frozen=True)
class OperationResult:
    """Outcome of a single-file operation, with its user message."""

    success: bool
    message: str
