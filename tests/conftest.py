"""Shared pytest fixtures.

This module provides an in-memory storage backend with failure injection,
plus fixtures wiring it into a repository and an orchestrator.
"""

from __future__ import annotations

from collections.abc import Callable, Generator
from pathlib import Path

import pytest
from keyring.errors import PasswordDeleteError

from docsync.core.credentials import StaticCredentials
from docsync.core.errors import NotFoundError
from docsync.core.types import Backend
from docsync.local.store import LocalStore
from docsync.remote.base import Ack, RemoteContent, RemoteListing, StorageBackend
from docsync.remote.repository import RemoteRepository
from docsync.sync.orchestrator import SyncOrchestrator

LISTED_AT = 1_700_000_000_000


class FakeBackend(StorageBackend):
    """In-memory backend recording every call.

    Attributes:
        files: name -> (content, is_password_protected).
        failures: name -> exception raised by get/upload/delete of that name.
        list_error: Exception raised by list_all when set.
        calls: (operation, name) in call order.
        tokens: Token received by each call.
    """

    def __init__(self, backend: Backend, requires_credential: bool = True) -> None:
        self._backend = backend
        self.requires_credential = requires_credential
        self.files: dict[str, tuple[str, bool]] = {}
        self.failures: dict[str, Exception] = {}
        self.list_error: Exception | None = None
        self.calls: list[tuple[str, str | None]] = []
        self.tokens: list[str | None] = []
        self.closed = False

    @property
    def backend(self) -> Backend:
        return self._backend

    @property
    def location(self) -> str:
        return f"memory://{self._backend.value}"

    def add(self, name: str, content: str, protected: bool = False) -> None:
        self.files[name] = (content, protected)

    def _record(self, operation: str, name: str | None, token: str | None) -> None:
        self.calls.append((operation, name))
        self.tokens.append(token)
        if name is not None and name in self.failures:
            raise self.failures[name]

    async def list_all(self, token: str | None) -> RemoteListing:
        self._record("listAll", None, token)
        if self.list_error is not None:
            raise self.list_error
        listing = RemoteListing()
        for name, (_, protected) in self.files.items():
            if protected:
                listing.password_protected_files[name] = LISTED_AT
            else:
                listing.files[name] = LISTED_AT
        return listing

    async def get_file(
        self, name: str, is_password_protected: bool, token: str | None
    ) -> RemoteContent:
        self._record("getFile", name, token)
        if name not in self.files:
            raise NotFoundError(f"File not found: {name}", 404)
        return RemoteContent(content=self.files[name][0], file_name=name)

    async def upload_file(
        self, name: str, content: str, is_password_protected: bool, token: str | None
    ) -> Ack:
        self._record("uploadFile", name, token)
        self.files[name] = (content, is_password_protected)
        return Ack(success=True, message="File uploaded")

    async def delete_file(
        self, name: str, is_password_protected: bool, token: str | None
    ) -> Ack:
        self._record("deleteFile", name, token)
        self.files.pop(name, None)
        return Ack(success=True, message="File deleted")

    async def aclose(self) -> None:
        self.closed = True


class FakeEditor:
    """Editor recording loaded documents."""

    def __init__(self, content: str = "") -> None:
        self.content = content
        self.loaded: list[tuple[str, str, int]] = []

    def serialize_current(self) -> str:
        return self.content

    def load_document(self, name: str, content: str, bill_type: int) -> None:
        self.content = content
        self.loaded.append((name, content, bill_type))


@pytest.fixture
def fake_keyring(monkeypatch: pytest.MonkeyPatch) -> dict[tuple[str, str], str]:
    """Replace the keyring functions with an in-memory dictionary."""
    secrets: dict[tuple[str, str], str] = {}

    def get_password(service: str, username: str) -> str | None:
        return secrets.get((service, username))

    def set_password(service: str, username: str, password: str) -> None:
        secrets[(service, username)] = password

    def delete_password(service: str, username: str) -> None:
        if (service, username) not in secrets:
            raise PasswordDeleteError("not found")
        del secrets[(service, username)]

    monkeypatch.setattr("keyring.get_password", get_password)
    monkeypatch.setattr("keyring.set_password", set_password)
    monkeypatch.setattr("keyring.delete_password", delete_password)
    return secrets


@pytest.fixture
def store(tmp_path: Path) -> Generator[LocalStore, None, None]:
    """Create a LocalStore instance."""
    s = LocalStore(tmp_path / "documents.db")
    yield s
    s.close()


@pytest.fixture
def make_backend() -> Callable[..., FakeBackend]:
    """Factory for in-memory backends."""
    return FakeBackend


@pytest.fixture
def s3() -> FakeBackend:
    """In-memory S3 backend."""
    return FakeBackend(Backend.S3)


@pytest.fixture
def postgres() -> FakeBackend:
    """In-memory PostgreSQL backend."""
    return FakeBackend(Backend.POSTGRES)


@pytest.fixture
def repository(s3: FakeBackend, postgres: FakeBackend) -> RemoteRepository:
    """Repository over the in-memory S3 and PostgreSQL backends, signed in."""
    return RemoteRepository(
        {Backend.S3: s3, Backend.POSTGRES: postgres},
        StaticCredentials("token123"),
    )


@pytest.fixture
def editor() -> FakeEditor:
    """Editor stand-in."""
    return FakeEditor("editor content")


@pytest.fixture
def orchestrator(
    store: LocalStore, repository: RemoteRepository, editor: FakeEditor
) -> SyncOrchestrator:
    """Orchestrator over the temporary store and in-memory backends."""
    return SyncOrchestrator(store, repository, editor)
