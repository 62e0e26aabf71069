"""Tests for the cloud session state machine."""

from __future__ import annotations

import pytest

from docsync.core.types import Backend
from docsync.remote.base import RemoteListing
from docsync.sync.session import (
    BUSY_STATES,
    InvalidTransitionError,
    SessionState,
    SyncSession,
)


def loaded_session(backend: Backend = Backend.S3) -> SyncSession:
    """Session with a loaded listing of two files."""
    session = SyncSession()
    session.begin_loading(backend)
    session.loaded(RemoteListing(files={"a": 1}, password_protected_files={"b": 2}))
    return session


class TestTransitions:
    """Tests for state transitions."""

    def test_initial_state(self) -> None:
        session = SyncSession()
        assert session.state is SessionState.IDLE
        assert session.files == {}

    def test_load(self) -> None:
        session = loaded_session()
        assert session.state is SessionState.LOADED
        assert session.backend is Backend.S3
        assert set(session.files) == {"a", "b"}

    def test_idle_cannot_start_operation(self) -> None:
        """Operations need a loaded listing."""
        with pytest.raises(InvalidTransitionError):
            SyncSession().begin(SessionState.UPLOADING)

    @pytest.mark.parametrize("state", sorted(BUSY_STATES, key=lambda s: s.value))
    def test_operation_round_trip(self, state: SessionState) -> None:
        session = loaded_session()
        session.begin(state)
        assert session.is_busy
        session.finish()
        assert session.state is SessionState.LOADED

    def test_no_nested_operations(self) -> None:
        session = loaded_session()
        session.begin(SessionState.DOWNLOADING)
        with pytest.raises(InvalidTransitionError):
            session.begin(SessionState.MIGRATING)

    def test_begin_rejects_resting_states(self) -> None:
        with pytest.raises(InvalidTransitionError):
            loaded_session().begin(SessionState.LOADED)

    def test_delete_then_relist(self) -> None:
        """Deleting goes back through LOADING."""
        session = loaded_session()
        session.begin(SessionState.DELETING)
        session.begin_loading(Backend.S3)
        assert session.state is SessionState.LOADING

    def test_close_from_any_state(self) -> None:
        session = loaded_session()
        session.begin(SessionState.UPLOADING)
        session.toggle("a")
        session.close()
        assert session.state is SessionState.IDLE
        assert session.backend is None
        assert session.listing is None
        assert session.selected() == []


class TestLoading:
    """Tests for listing, tab switches and failures."""

    def test_tab_switch_clears_selection(self) -> None:
        session = loaded_session(Backend.S3)
        session.toggle("a")
        session.begin_loading(Backend.POSTGRES)
        assert session.selected() == []
        assert session.listing is None

    def test_refresh_keeps_selection(self) -> None:
        session = loaded_session(Backend.S3)
        session.toggle("a")
        session.begin_loading(Backend.S3)
        session.loaded(RemoteListing(files={"a": 5}))
        assert session.selected() == ["a"]

    def test_failed_first_listing_returns_to_idle(self) -> None:
        session = SyncSession()
        session.begin_loading(Backend.S3)
        session.loading_failed()
        assert session.state is SessionState.IDLE
        assert session.backend is None

    def test_failed_tab_switch_restores_previous(self) -> None:
        """A failed listing should return to the previous resting state."""
        session = loaded_session(Backend.S3)
        previous = session.listing
        session.begin_loading(Backend.POSTGRES)
        session.loading_failed()
        assert session.state is SessionState.LOADED
        assert session.backend is Backend.S3
        assert session.listing is previous

    def test_failed_relist_after_operation(self) -> None:
        session = loaded_session(Backend.S3)
        session.begin(SessionState.DELETING)
        session.begin_loading(Backend.S3)
        session.loading_failed()
        assert session.state is SessionState.LOADED


class TestSelection:
    """Tests for the selection sets."""

    def test_toggle(self) -> None:
        session = loaded_session()
        assert session.toggle("a") is True
        assert session.selected() == ["a"]
        assert session.toggle("a") is False
        assert session.selected() == []

    def test_select_all_excludes_default(self) -> None:
        session = SyncSession()
        session.select_all(["a", "default", "b"])
        assert session.selected() == ["a", "b"]

    def test_toggled_default_is_never_selected(self) -> None:
        session = SyncSession()
        session.toggle("default")
        assert session.selected() == []

    def test_deselect_all(self) -> None:
        session = SyncSession()
        session.select_all(["a", "b"])
        session.select_all(["a", "b"], selected=False)
        assert session.selected() == []

    def test_local_selection_is_separate(self) -> None:
        session = SyncSession()
        session.toggle_local("x")
        session.select_all_local(["y", "default"])
        assert session.selected_local() == ["y"]
        assert session.selected() == []

    def test_clear_selection(self) -> None:
        session = SyncSession()
        session.toggle("a")
        session.toggle_local("b")
        session.clear_selection()
        assert session.selected() == []
        assert session.selected_local() == []
