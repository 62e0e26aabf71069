"""Decrypt-on-open flow for protected documents.

Opening a document classifies its content. Unprotected content goes straight
to the editor; protected content is parked until a password is submitted:

    open_local / open_remote -> OPENED
                             -> PASSWORD_REQUIRED -> submit_password -> OPENED
                                                                     -> INVALID_PASSWORD (retry)
                                                  -> cancel
"""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass, field, replace
from enum import Enum, auto

from docsync.core.crypto import decrypt_content
from docsync.core.errors import CryptoError, DocsyncError, ValidationError
from docsync.core.protection import classify
from docsync.core.types import Backend
from docsync.local.store import DEFAULT_BILL_TYPE, LocalStore
from docsync.remote.repository import RemoteRepository
from docsync.sync.messages import INVALID_PASSWORD
from docsync.sync.types import DocumentEditor

logger = logging.getLogger(__name__)


class OpenStatus(Enum):
    """Outcome of an open or password attempt."""

    OPENED = auto()
    PASSWORD_REQUIRED = auto()
    INVALID_PASSWORD = auto()


@dataclass(frozen=True)
class OpenResult:
    """Outcome of an open attempt.

    Attributes:
        status: What happened.
        name: Document name.
        message: User-facing text, empty when opened.
        password: Password that decrypted the document, if one was needed.
    """

    status: OpenStatus
    name: str
    message: str = ""
    password: str | None = field(default=None, repr=False)

    @property
    def opened(self) -> bool:
        return self.status is OpenStatus.OPENED


@dataclass(frozen=True)
class PendingProtectedFile:
    """A protected document waiting for its password.

    Attributes:
        name: Document name.
        ciphertext: Content as stored (either format).
        source: "local" or "remote".
        backend: Backend the file came from, for remote files.
        bill_type: Editor tag to load the plaintext with.
    """

    name: str
    ciphertext: str
    source: str
    backend: Backend | None = None
    bill_type: int = DEFAULT_BILL_TYPE

    @property
    def is_local(self) -> bool:
        return self.source == "local"


class ProtectedFileOpener:
    """Opens documents into the editor, prompting for protected ones."""

    def __init__(
        self,
        local: LocalStore,
        editor: DocumentEditor,
        repository: RemoteRepository | None = None,
    ) -> None:
        self._local = local
        self._editor = editor
        self._repository = repository
        self._pending: PendingProtectedFile | None = None

    @property
    def pending(self) -> PendingProtectedFile | None:
        """File waiting for a password, if any."""
        return self._pending

    def _load(self, name: str, content: str, bill_type: int, local: bool) -> OpenResult:
        self._editor.load_document(name, content, bill_type)
        if local:
            self._local.save_last_opened(name)
        logger.info(f"Opened {name}")
        return OpenResult(OpenStatus.OPENED, name)

    def _park(self, pending: PendingProtectedFile) -> OpenResult:
        self._pending = pending
        logger.debug(f"{pending.name} is protected, waiting for password")
        return OpenResult(
            OpenStatus.PASSWORD_REQUIRED,
            pending.name,
            f"{pending.name} is password protected. Enter the password to open it.",
        )

    def open_local(self, name: str) -> OpenResult:
        """Open a document from the local store.

        Raises:
            DocumentNotFoundError: If the document is absent or unreadable.
        """
        document = self._local.get(name)
        if not document.is_protected:
            return self._load(name, document.content, document.bill_type, local=True)
        return self._park(
            PendingProtectedFile(
                name=name,
                ciphertext=document.content,
                source="local",
                bill_type=document.bill_type,
            )
        )

    async def open_remote(
        self, backend: Backend, name: str, is_password_protected: bool = False
    ) -> OpenResult:
        """Fetch a remote file and open it without storing it locally.

        Raises:
            ValueError: If the opener has no repository.
        """
        if self._repository is None:
            raise ValueError("Opening remote files requires a repository")
        remote = await self._repository.get_file(backend, name, is_password_protected)
        if not classify(remote.content, is_password_protected).is_protected:
            return self._load(name, remote.content, DEFAULT_BILL_TYPE, local=False)
        return self._park(
            PendingProtectedFile(
                name=name,
                ciphertext=remote.content,
                source="remote",
                backend=Backend(backend),
            )
        )

    def submit_password(self, password: str) -> OpenResult:
        """Try to decrypt the pending file; it stays pending on failure.

        Raises:
            ValidationError: If no file is waiting for a password.
        """
        pending = self._pending
        if pending is None:
            raise ValidationError("No protected file is waiting for a password")
        if not password:
            return OpenResult(OpenStatus.INVALID_PASSWORD, pending.name, "Please enter a password")

        try:
            plaintext = decrypt_content(pending.ciphertext, password)
        except CryptoError as e:
            logger.warning(f"Failed to decrypt {pending.name}: {e}")
            return OpenResult(OpenStatus.INVALID_PASSWORD, pending.name, INVALID_PASSWORD)

        self._pending = None
        if pending.is_local:
            try:
                self._local.remember_password(pending.name, password)
            except (DocsyncError, sqlite3.Error) as e:
                logger.warning(f"Failed to remember password for {pending.name}: {e}")
        result = self._load(pending.name, plaintext, pending.bill_type, local=pending.is_local)
        return replace(result, password=password)

    def cancel(self) -> None:
        """Discard the pending file."""
        if self._pending is not None:
            logger.debug(f"Cancelled opening {self._pending.name}")
        self._pending = None
