"""Naming conflicts for batch moves and migrations.

A conflict is a name present both in the batch being moved and in the
destination namespace. Detection is exact and case-sensitive; resolution is
one of three policies:

| Resolution      | Batch executed                    |
|-----------------|-----------------------------------|
| SKIP_CONFLICTS  | selection minus conflicting names |
| OVERWRITE_ALL   | the full original selection       |
| CANCEL          | nothing                           |
"""

from __future__ import annotations

from collections.abc import Collection, Iterable, Iterator, Sequence
from dataclasses import dataclass
from enum import Enum


class Resolution(Enum):
    """User decision for a batch with conflicts."""

    SKIP_CONFLICTS = "skip"
    OVERWRITE_ALL = "overwrite"
    CANCEL = "cancel"


@dataclass(frozen=True)
class ConflictRecord:
    """Names colliding between a batch and its destination.

    Computed immediately before commit and never persisted.
    """

    names: tuple[str, ...] = ()
    destination: str = ""

    def __bool__(self) -> bool:
        return bool(self.names)

    def __len__(self) -> int:
        return len(self.names)

    def __iter__(self) -> Iterator[str]:
        return iter(self.names)

    def __contains__(self, name: object) -> bool:
        return name in self.names

    @property
    def message(self) -> str:
        """Prompt text shown before asking for a resolution."""
        where = f" in {self.destination}" if self.destination else ""
        return f"{len(self.names)} file(s) already exist{where}. Overwrite existing files?"


def detect_conflicts(
    selection: Iterable[str],
    destination: Collection[str],
    destination_name: str = "",
) -> ConflictRecord:
    """Compute selection ∩ destination, preserving selection order.

    Args:
        selection: Names about to be moved.
        destination: Names already present at the destination.
        destination_name: Label used in the prompt message.
    """
    existing = destination if isinstance(destination, (set, frozenset)) else set(destination)
    return ConflictRecord(
        names=tuple(name for name in selection if name in existing),
        destination=destination_name,
    )


def apply_resolution(
    batch: Sequence[str],
    conflicts: ConflictRecord,
    resolution: Resolution,
) -> list[str] | None:
    """Return the names to execute for a resolution.

    Returns:
        The batch to run (possibly empty), or None when cancelled.
    """
    if resolution is Resolution.CANCEL:
        return None
    if resolution is Resolution.SKIP_CONFLICTS:
        return [name for name in batch if name not in conflicts]
    return list(batch)
