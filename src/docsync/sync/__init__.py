"""Sync module - Explicit moves between the local store and remote backends.

Architecture:
- session.py: cloud session state machine and selection sets
- conflicts.py: conflict detection and resolution policies
- orchestrator.py: listing, single-file and batch operations
- opener.py: decrypt-on-open flow for protected documents
- messages.py: user-facing messages for errors and batch results
"""

from docsync.sync.conflicts import (
    ConflictRecord,
    Resolution,
    apply_resolution,
    detect_conflicts,
)
from docsync.sync.messages import describe_error, summarize_batch
from docsync.sync.opener import (
    OpenResult,
    OpenStatus,
    PendingProtectedFile,
    ProtectedFileOpener,
)
from docsync.sync.orchestrator import SyncOrchestrator
from docsync.sync.session import (
    InvalidTransitionError,
    SessionState,
    SyncSession,
)
from docsync.sync.types import (
    BatchOperation,
    BatchResult,
    ConflictResolutionRequired,
    DocumentEditor,
    OperationResult,
    PendingBatch,
)

__all__ = [
    # Conflicts
    "ConflictRecord",
    "Resolution",
    "apply_resolution",
    "detect_conflicts",
    # Messages
    "describe_error",
    "summarize_batch",
    # Opener
    "OpenResult",
    "OpenStatus",
    "PendingProtectedFile",
    "ProtectedFileOpener",
    # Orchestrator
    "SyncOrchestrator",
    # Session
    "InvalidTransitionError",
    "SessionState",
    "SyncSession",
    # Types
    "BatchOperation",
    "BatchResult",
    "ConflictResolutionRequired",
    "DocumentEditor",
    "OperationResult",
    "PendingBatch",
]
