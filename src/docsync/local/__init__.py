"""Local module - Encrypted key/value document store."""

from docsync.local.store import (
    DEFAULT_DOCUMENT,
    LAST_OPENED_KEY,
    RESERVED_NAMES,
    Document,
    LocalStore,
)

__all__ = [
    "DEFAULT_DOCUMENT",
    "Document",
    "LAST_OPENED_KEY",
    "LocalStore",
    "RESERVED_NAMES",
]
