"""Storage backend abstraction for remote documents.

This module provides:
- RemoteFile, RemoteListing, RemoteContent, Ack: transport result types
- StorageBackend: the four-operation contract every backend adapter satisfies
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from docsync.core.types import Backend


@dataclass(frozen=True)
class RemoteFile:
    """One entry of a merged remote listing."""

    file_name: str
    last_modified: int  # epoch milliseconds
    password_protected: bool = False


def _timestamps(data: Any) -> dict[str, int]:
    if not isinstance(data, Mapping):
        return {}
    result: dict[str, int] = {}
    for name, value in data.items():
        try:
            result[str(name)] = int(value)
        except (TypeError, ValueError):
            result[str(name)] = 0
    return result


@dataclass
class RemoteListing:
    """Listing returned by a backend: regular and password-protected files."""

    files: dict[str, int] = field(default_factory=dict)
    password_protected_files: dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RemoteListing:
        """Create from an API response dictionary (missing keys are empty)."""
        return cls(
            files=_timestamps(data.get("files")),
            password_protected_files=_timestamps(data.get("passwordProtectedFiles")),
        )

    def merged(self) -> dict[str, RemoteFile]:
        """Merge both listings; the protected flag wins on overlap."""
        result = {
            name: RemoteFile(name, timestamp, False)
            for name, timestamp in self.files.items()
        }
        for name, timestamp in self.password_protected_files.items():
            result[name] = RemoteFile(name, timestamp, True)
        return result

    def names(self) -> set[str]:
        """All file names present in either listing."""
        return set(self.files) | set(self.password_protected_files)

    def is_protected(self, name: str) -> bool:
        """Protection flag reported by the backend for a file."""
        return name in self.password_protected_files


@dataclass(frozen=True)
class RemoteContent:
    """File content as stored on the backend (ciphertext if protected)."""

    content: str
    file_name: str


@dataclass(frozen=True)
class Ack:
    """Acknowledgement of an upload or delete."""

    success: bool = True
    message: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> Ack:
        """Create from an API response (anything not a dict is a bare success)."""
        if not isinstance(data, Mapping):
            return cls()
        return cls(
            success=bool(data.get("success", True)),
            message=str(data.get("message") or ""),
        )


class StorageBackend(ABC):
    """Contract implemented by every backend adapter.

    Adapters are transport only: content goes out and comes back exactly as
    given, the protection flag being caller-supplied interpretation.
    """

    #: Whether calls need a bearer token
    requires_credential: bool = True

    @property
    @abstractmethod
    def backend(self) -> Backend:
        """Identifier of the backend this adapter serves."""

    @property
    @abstractmethod
    def location(self) -> str:
        """Return a human-readable description of where files are stored."""

    @abstractmethod
    async def list_all(self, token: str | None) -> RemoteListing:
        """List regular and password-protected files.

        Args:
            token: Bearer token (None for backends without credentials).
        """

    @abstractmethod
    async def get_file(
        self, name: str, is_password_protected: bool, token: str | None
    ) -> RemoteContent:
        """Fetch a file's stored content.

        Raises:
            NotFoundError: If the file doesn't exist.
        """

    @abstractmethod
    async def upload_file(
        self,
        name: str,
        content: str,
        is_password_protected: bool,
        token: str | None,
    ) -> Ack:
        """Create or overwrite a file."""

    @abstractmethod
    async def delete_file(
        self, name: str, is_password_protected: bool, token: str | None
    ) -> Ack:
        """Delete a file."""

    async def aclose(self) -> None:
        """Release adapter resources (nothing by default)."""
