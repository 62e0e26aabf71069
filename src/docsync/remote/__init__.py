"""Remote module - Backend-agnostic repository and its adapters."""

from docsync.remote.base import (
    Ack,
    RemoteContent,
    RemoteFile,
    RemoteListing,
    StorageBackend,
)
from docsync.remote.embedded import EmbeddedBackend
from docsync.remote.http import HTTPBackend
from docsync.remote.repository import RemoteRepository, create_repository

__all__ = [
    # Types
    "Ack",
    "RemoteContent",
    "RemoteFile",
    "RemoteListing",
    # Adapters
    "EmbeddedBackend",
    "HTTPBackend",
    "StorageBackend",
    # Repository
    "RemoteRepository",
    "create_repository",
]
