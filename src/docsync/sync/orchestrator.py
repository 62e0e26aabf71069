"""Sync orchestrator: explicit moves between the local store and backends.

This module provides SyncOrchestrator, which owns one cloud session and
runs every user-initiated action:

    open_backend / refresh          list a backend and cache the listing
    upload_current                  save the editor's document to a backend
    prepare_* + run                 batch move with conflict resolution
    delete                          confirmed remote delete, then re-list

Batches are two-phase. prepare_* computes the Conflict Record against the
destination and returns a PendingBatch; run() executes it once, after a
resolution is chosen when conflicts exist. Items run strictly one after
another and a failing item never aborts the batch.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from docsync.core.crypto import encrypt_content
from docsync.core.errors import BackendError, CryptoError, ValidationError
from docsync.core.types import Backend
from docsync.local.store import (
    DEFAULT_BILL_TYPE,
    DEFAULT_DOCUMENT,
    Document,
    LocalStore,
    now_iso,
)
from docsync.remote.base import RemoteFile, RemoteListing
from docsync.remote.repository import RemoteRepository
from docsync.sync.conflicts import (
    ConflictRecord,
    Resolution,
    apply_resolution,
    detect_conflicts,
)
from docsync.sync.messages import describe_error, summarize_batch
from docsync.sync.session import InvalidTransitionError, SessionState, SyncSession
from docsync.sync.types import (
    BatchOperation,
    BatchResult,
    CancelCheck,
    ConflictResolutionRequired,
    DocumentEditor,
    OperationResult,
    PendingBatch,
)

logger = logging.getLogger(__name__)

_OPERATION_STATES = {
    BatchOperation.TO_LOCAL: SessionState.DOWNLOADING,
    BatchOperation.TO_SERVER: SessionState.UPLOADING,
    BatchOperation.MIGRATE: SessionState.MIGRATING,
}

_OPERATION_ACTIONS = {
    BatchOperation.TO_LOCAL: "download file from",
    BatchOperation.TO_SERVER: "save file to",
    BatchOperation.MIGRATE: "migrate file to",
}


def _unique(names: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(names))


class SyncOrchestrator:
    """Coordinates the local store, the remote repository and the editor."""

    def __init__(
        self,
        local: LocalStore,
        repository: RemoteRepository,
        editor: DocumentEditor | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            local: Local document store.
            repository: Remote repository over all backends.
            editor: Editing engine, needed only by upload_current.
        """
        self._local = local
        self._repository = repository
        self._editor = editor
        self._session = SyncSession()
        self._pending: PendingBatch | None = None

    @property
    def session(self) -> SyncSession:
        """Current cloud session."""
        return self._session

    @property
    def local(self) -> LocalStore:
        return self._local

    @property
    def repository(self) -> RemoteRepository:
        return self._repository

    def _require_loaded(self) -> Backend:
        """Return the active backend, requiring a loaded listing."""
        if self._session.state is not SessionState.LOADED or self._session.backend is None:
            raise InvalidTransitionError(
                f"No backend listing loaded (state {self._session.state.name})"
            )
        return self._session.backend

    # === Listing ===

    async def open_backend(self, backend: Backend) -> RemoteListing:
        """List a backend and make it the active tab.

        Switching to another backend clears the selection. If listing fails
        the session returns to where it was and the error propagates.
        """
        backend = Backend(backend)
        if backend != self._session.backend:
            self._pending = None
        self._session.begin_loading(backend)
        try:
            listing = await self._repository.list_all(backend)
        except Exception:
            self._session.loading_failed()
            raise
        self._session.loaded(listing)
        logger.info(f"Loaded {len(listing.merged())} files from {backend.display_name}")
        return listing

    async def refresh(self) -> RemoteListing:
        """Re-list the active backend."""
        if self._session.backend is None:
            raise InvalidTransitionError("No backend selected")
        return await self.open_backend(self._session.backend)

    async def _relist(self, backend: Backend) -> None:
        """Re-list after a mutation; a failure keeps the previous listing."""
        try:
            await self.open_backend(backend)
        except Exception as e:
            logger.warning(f"Failed to refresh {backend.display_name} listing: {e}")

    def filter_files(self, term: str) -> dict[str, RemoteFile]:
        """Case-insensitive substring filter over the cached listing."""
        needle = term.strip().lower()
        files = self._session.files
        if not needle:
            return files
        return {name: ref for name, ref in files.items() if needle in name.lower()}

    # === Selection ===

    def toggle(self, name: str) -> bool:
        return self._session.toggle(name)

    def select_all(self, selected: bool = True) -> None:
        self._session.select_all(self._session.files, selected)

    def selected(self) -> list[str]:
        return self._session.selected()

    def toggle_local(self, name: str) -> bool:
        return self._session.toggle_local(name)

    def select_all_local(self, selected: bool = True) -> None:
        self._session.select_all_local(self._local.list_all(), selected)

    def selected_local(self) -> list[str]:
        return self._session.selected_local()

    def clear_selection(self) -> None:
        self._session.clear_selection()

    # === Single file ===

    async def upload_current(
        self,
        target_name: str,
        current_file: str | None = None,
        password: str | None = None,
    ) -> OperationResult:
        """Save the document open in the editor to the active backend.

        Args:
            target_name: Remote file name.
            current_file: Local name of the open document, used to look up
                its protection flag and password. Defaults to target_name.
            password: Password of a protected document, used when the store
                does not keep one.

        Returns:
            OperationResult with a user message.
        """
        name = (target_name or "").strip()
        if not name:
            return OperationResult(False, "Please enter a file name")
        editor = self._editor
        if editor is None:
            raise InvalidTransitionError("No editor attached")
        backend = self._require_loaded()
        source = current_file if current_file is not None else name

        self._session.begin(SessionState.UPLOADING)
        try:
            content, protected = self._prepare_upload(editor, source, password)
            await self._repository.upload_file(backend, name, content, protected)
        except Exception as e:
            logger.error(f"Failed to save {name} to {backend.display_name}: {e}")
            self._session.finish()
            return OperationResult(False, describe_error(e, backend, "save file to"))

        await self._relist(backend)
        return OperationResult(True, f"File saved to {backend.display_name} successfully")

    def _prepare_upload(
        self, editor: DocumentEditor, source: str, password: str | None
    ) -> tuple[str, bool]:
        """Serialize the editor content, encrypting it when protected."""
        content = editor.serialize_current()
        if source == DEFAULT_DOCUMENT or not self._local.is_file_protected(source):
            return content, False
        password = password or self._local.get(source).password
        if not password:
            raise CryptoError("Password required to upload a protected document")
        return encrypt_content(content, password), True

    async def delete(self, name: str, confirmed: bool = False) -> OperationResult:
        """Delete a remote file from the active backend, then re-list.

        Raises:
            ValidationError: If the deletion was not confirmed.
        """
        backend = self._require_loaded()
        if not confirmed:
            raise ValidationError("Deletion must be confirmed")
        listing = self._session.listing
        protected = listing.is_protected(name) if listing else False

        self._session.begin(SessionState.DELETING)
        try:
            await self._repository.delete_file(backend, name, protected)
        except Exception as e:
            logger.error(f"Failed to delete {name} from {backend.display_name}: {e}")
            self._session.finish()
            return OperationResult(False, describe_error(e, backend, "delete file from"))

        logger.info(f"Deleted {name} from {backend.display_name}")
        await self._relist(backend)
        return OperationResult(True, f"{name} deleted from {backend.display_name}")

    # === Batches ===

    def _batch(self, names: Iterable[str] | None, selection: list[str]) -> list[str]:
        batch = _unique(names) if names is not None else selection
        if not batch:
            raise ValidationError("No files selected")
        return batch

    def _track(self, pending: PendingBatch) -> PendingBatch:
        self._pending = pending
        if pending.conflicts:
            logger.info(pending.conflicts.message)
        return pending

    def _listed_protection(self, names: list[str]) -> dict[str, bool]:
        files = self._session.files
        return {name: files[name].password_protected if name in files else False for name in names}

    def prepare_move_to_local(self, names: Iterable[str] | None = None) -> PendingBatch:
        """Prepare downloading remote files into the local store.

        Args:
            names: Files to move; defaults to the remote selection.
        """
        backend = self._require_loaded()
        batch = self._batch(names, self._session.selected())
        conflicts = detect_conflicts(batch, set(self._local.list_all()), "local storage")
        return self._track(
            PendingBatch(
                operation=BatchOperation.TO_LOCAL,
                names=batch,
                conflicts=conflicts,
                source=backend,
                protection=self._listed_protection(batch),
            )
        )

    def prepare_move_to_server(self, names: Iterable[str] | None = None) -> PendingBatch:
        """Prepare uploading local documents to the active backend.

        Args:
            names: Documents to move; defaults to the local selection.
        """
        backend = self._require_loaded()
        batch = self._batch(names, self._session.selected_local())
        conflicts = detect_conflicts(batch, set(self._session.files), backend.display_name)
        return self._track(
            PendingBatch(
                operation=BatchOperation.TO_SERVER,
                names=batch,
                conflicts=conflicts,
                target=backend,
            )
        )

    async def prepare_migration(
        self, target: Backend, names: Iterable[str] | None = None
    ) -> PendingBatch:
        """Prepare copying remote files from the active backend to another.

        The target is listed first; a failure there propagates.
        """
        source = self._require_loaded()
        target = Backend(target)
        if target == source:
            raise ValidationError("Source and target backends must differ")
        batch = self._batch(names, self._session.selected())
        target_listing = await self._repository.list_all(target)
        conflicts = detect_conflicts(
            batch, set(target_listing.names()), target.display_name
        )
        return self._track(
            PendingBatch(
                operation=BatchOperation.MIGRATE,
                names=batch,
                conflicts=conflicts,
                source=source,
                target=target,
                protection=self._listed_protection(batch),
            )
        )

    async def run(
        self,
        pending: PendingBatch,
        resolution: Resolution | None = None,
        cancel_check: CancelCheck | None = None,
    ) -> BatchResult | None:
        """Execute a prepared batch.

        Args:
            pending: Batch returned by one of the prepare_* methods.
            resolution: Required when the batch has conflicts.
            cancel_check: Consulted between items; True stops the batch.

        Returns:
            BatchResult, or None when the resolution is CANCEL.

        Raises:
            ConflictResolutionRequired: Conflicts exist and no resolution.
            InvalidTransitionError: The batch was already run or discarded.
        """
        if pending.consumed or pending is not self._pending:
            raise InvalidTransitionError("Batch is no longer pending")
        if pending.needs_resolution and resolution is None:
            raise ConflictResolutionRequired(pending.conflicts)

        pending.consumed = True
        self._pending = None
        names = apply_resolution(
            pending.names, pending.conflicts, resolution or Resolution.OVERWRITE_ALL
        )
        if names is None:
            logger.info(f"Cancelled {pending.operation.value} of {len(pending.names)} file(s)")
            return None

        self._session.begin(_OPERATION_STATES[pending.operation])
        try:
            result = await self._execute(pending, names, cancel_check)
        finally:
            self._session.finish()
        if resolution is Resolution.SKIP_CONFLICTS:
            result.skipped[:0] = list(pending.conflicts)

        self._session.clear_selection()
        logger.info(result.message)
        if pending.operation is BatchOperation.TO_SERVER and result.succeeded:
            await self._relist(self._session.backend or pending.target)
        return result

    async def _execute(
        self,
        pending: PendingBatch,
        names: list[str],
        cancel_check: CancelCheck | None,
    ) -> BatchResult:
        result = BatchResult(pending.operation)
        backend = pending.target or pending.source
        action = _OPERATION_ACTIONS[pending.operation]

        for index, name in enumerate(names):
            if cancel_check is not None and cancel_check():
                result.skipped.extend(names[index:])
                logger.info(f"Batch stopped, {len(names) - index} file(s) not processed")
                break
            try:
                await self._move_one(pending, name)
            except Exception as e:
                logger.warning(f"Failed to {action} {backend.display_name}: {name}: {e}")
                result.failed.append(name)
                result.errors[name] = describe_error(e, backend, action)
            else:
                result.succeeded.append(name)

        result.message = summarize_batch(
            result.succeeded_count,
            result.failed_count,
            pending.operation.verb,
            pending.direction,
        )
        return result

    async def _move_one(self, pending: PendingBatch, name: str) -> None:
        """Move one file; it either fully arrives or is not written."""
        protected = pending.protection.get(name, False)

        if pending.operation is BatchOperation.TO_LOCAL:
            remote = await self._repository.get_file(pending.source, name, protected)
            if not remote.content:
                raise BackendError(f"No content received for {name}")
            timestamp = now_iso()
            document = Document(
                name=name,
                created=timestamp,
                modified=timestamp,
                content=remote.content,
                bill_type=DEFAULT_BILL_TYPE,
                is_password_protected=protected,
            )
            self._local.save(document, encrypt_on_write=False)

        elif pending.operation is BatchOperation.TO_SERVER:
            document = self._local.get(name)
            await self._repository.upload_file(
                pending.target, name, document.content, document.is_protected
            )

        else:
            remote = await self._repository.get_file(pending.source, name, protected)
            await self._repository.upload_file(pending.target, name, remote.content, protected)

        logger.debug(f"{pending.operation.value}: {name} done")

    async def move_to_local(
        self,
        names: Iterable[str] | None = None,
        resolution: Resolution | None = None,
        cancel_check: CancelCheck | None = None,
    ) -> BatchResult | None:
        """Prepare and run a download batch in one call."""
        return await self.run(self.prepare_move_to_local(names), resolution, cancel_check)

    async def move_to_server(
        self,
        names: Iterable[str] | None = None,
        resolution: Resolution | None = None,
        cancel_check: CancelCheck | None = None,
    ) -> BatchResult | None:
        """Prepare and run an upload batch in one call."""
        return await self.run(self.prepare_move_to_server(names), resolution, cancel_check)

    async def migrate(
        self,
        target: Backend,
        names: Iterable[str] | None = None,
        resolution: Resolution | None = None,
        cancel_check: CancelCheck | None = None,
    ) -> BatchResult | None:
        """Prepare and run a migration in one call."""
        pending = await self.prepare_migration(target, names)
        return await self.run(pending, resolution, cancel_check)

    @property
    def pending(self) -> PendingBatch | None:
        """Batch prepared but not yet run."""
        return self._pending

    def discard_pending(self) -> ConflictRecord | None:
        """Drop the pending batch, returning its conflicts."""
        pending, self._pending = self._pending, None
        return pending.conflicts if pending else None

    def close(self) -> None:
        """End the session: back to IDLE, selections and pending batch dropped."""
        self._pending = None
        self._session.close()
