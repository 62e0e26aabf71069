"""Cloud session state machine.

States:
    IDLE -> LOADING -> LOADED -> UPLOADING   -> LOADED
                              -> DOWNLOADING -> LOADED
                              -> MIGRATING   -> LOADED
                              -> DELETING    -> LOADING (re-list)
    LOADED(X) -> LOADING(Y) -> LOADED(Y)   (tab switch clears selection)
    any -> IDLE                            (close)

All state transitions are validated. The session also owns the selection
sets, which only explicit transitions clear.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum, auto

from docsync.core.types import Backend
from docsync.local.store import DEFAULT_DOCUMENT
from docsync.remote.base import RemoteFile, RemoteListing


class SessionState(Enum):
    """State of the cloud session."""

    IDLE = auto()
    LOADING = auto()
    LOADED = auto()
    UPLOADING = auto()
    DOWNLOADING = auto()
    MIGRATING = auto()
    DELETING = auto()


BUSY_STATES = frozenset(
    {
        SessionState.UPLOADING,
        SessionState.DOWNLOADING,
        SessionState.MIGRATING,
        SessionState.DELETING,
    }
)

# Valid state transitions (IDLE is always reachable through close())
VALID_TRANSITIONS: dict[SessionState, set[SessionState]] = {
    SessionState.IDLE: {SessionState.LOADING},
    SessionState.LOADING: {SessionState.LOADED, SessionState.IDLE},
    SessionState.LOADED: {SessionState.LOADING, *BUSY_STATES},
    SessionState.UPLOADING: {SessionState.LOADED, SessionState.LOADING},
    SessionState.DOWNLOADING: {SessionState.LOADED, SessionState.LOADING},
    SessionState.MIGRATING: {SessionState.LOADED, SessionState.LOADING},
    SessionState.DELETING: {SessionState.LOADED, SessionState.LOADING},
}


class InvalidTransitionError(Exception):
    """Raised when attempting invalid state transition."""


def _selected(selection: dict[str, bool]) -> list[str]:
    return [name for name, flag in selection.items() if flag and name != DEFAULT_DOCUMENT]


@dataclass
class SyncSession:
    """State of one cloud session: active backend, listing and selections.

    Attributes:
        state: Current state.
        backend: Backend whose listing is shown (the active tab).
        listing: Last listing of the active backend.
        selection: Remote names checked for a batch action.
        local_selection: Local names checked for a batch action.
    """

    state: SessionState = SessionState.IDLE
    backend: Backend | None = None
    listing: RemoteListing | None = None
    selection: dict[str, bool] = field(default_factory=dict)
    local_selection: dict[str, bool] = field(default_factory=dict)

    # Resting point restored when a listing fails
    _previous: tuple[SessionState, Backend | None, RemoteListing | None] = field(
        default=(SessionState.IDLE, None, None), repr=False
    )

    def transition_to(self, new_state: SessionState) -> None:
        """Transition to a new state with validation."""
        if new_state not in VALID_TRANSITIONS[self.state]:
            raise InvalidTransitionError(
                f"Cannot transition from {self.state.name} to {new_state.name}"
            )
        self.state = new_state

    @property
    def is_busy(self) -> bool:
        """True while an upload, download, migration or delete runs."""
        return self.state in BUSY_STATES

    @property
    def files(self) -> dict[str, RemoteFile]:
        """Merged listing of the active backend."""
        return self.listing.merged() if self.listing else {}

    # === Loading ===

    def begin_loading(self, backend: Backend) -> None:
        """Start listing a backend; switching backend clears the selection."""
        resting = self.state
        if resting not in (SessionState.IDLE, SessionState.LOADED):
            resting = SessionState.LOADED
        self._previous = (resting, self.backend, self.listing)
        self.transition_to(SessionState.LOADING)
        if backend != self.backend:
            self.selection.clear()
            self.listing = None
        self.backend = backend

    def loaded(self, listing: RemoteListing) -> None:
        """Record a successful listing."""
        self.transition_to(SessionState.LOADED)
        self.listing = listing

    def loading_failed(self) -> None:
        """Return to the resting state held before loading started."""
        state, backend, listing = self._previous
        if state is SessionState.LOADED and listing is not None:
            self.transition_to(SessionState.LOADED)
            self.backend, self.listing = backend, listing
        else:
            self.transition_to(SessionState.IDLE)
            self.backend, self.listing = None, None

    # === Operations ===

    def begin(self, state: SessionState) -> None:
        """Enter one of the busy states."""
        if state not in BUSY_STATES:
            raise InvalidTransitionError(f"{state.name} is not an operation state")
        self.transition_to(state)

    def finish(self) -> None:
        """Leave a busy state without re-listing."""
        if self.is_busy:
            self.transition_to(SessionState.LOADED)

    def close(self) -> None:
        """Go back to IDLE, dropping listing and selections."""
        self.state = SessionState.IDLE
        self.backend = None
        self.listing = None
        self.clear_selection()

    # === Selection ===

    def toggle(self, name: str) -> bool:
        """Toggle a remote name; returns the new flag."""
        self.selection[name] = not self.selection.get(name, False)
        return self.selection[name]

    def select_all(self, names: Iterable[str], selected: bool = True) -> None:
        """Set every remote name to one flag ("default" excluded)."""
        self.selection = {name: selected for name in names if name != DEFAULT_DOCUMENT}

    def selected(self) -> list[str]:
        """Remote names currently selected."""
        return _selected(self.selection)

    def toggle_local(self, name: str) -> bool:
        """Toggle a local name; returns the new flag."""
        self.local_selection[name] = not self.local_selection.get(name, False)
        return self.local_selection[name]

    def select_all_local(self, names: Iterable[str], selected: bool = True) -> None:
        """Set every local name to one flag ("default" excluded)."""
        self.local_selection = {
            name: selected for name in names if name != DEFAULT_DOCUMENT
        }

    def selected_local(self) -> list[str]:
        """Local names currently selected."""
        return _selected(self.local_selection)

    def clear_selection(self) -> None:
        """Clear both selection sets."""
        self.selection.clear()
        self.local_selection.clear()
