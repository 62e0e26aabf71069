"""Encrypted local document store.

This module provides:
- Document: a named document with metadata and protection flag
- LocalStore: SQLite-backed key/value store of documents

Architecture:
    Every document lives under its name in one global key/value table, the
    value being the JSON persistence record. The reserved key
    "__last_opened_file__" holds a plain string instead. Protected documents
    are stored as ciphertext; the store only decrypts on request.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import threading
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from docsync.core.crypto import decrypt_content, encrypt_content, is_protected_content
from docsync.core.errors import CryptoError, DocumentNotFoundError, ValidationError
from docsync.core.protection import classify

logger = logging.getLogger(__name__)

LAST_OPENED_KEY = "__last_opened_file__"
DEFAULT_DOCUMENT = "default"
RESERVED_NAMES = frozenset({DEFAULT_DOCUMENT, LAST_OPENED_KEY})
DEFAULT_BILL_TYPE = 1


def now_iso() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(UTC).isoformat()


@dataclass
class Document:
    """A stored document.

    Attributes:
        name: Unique key in the store.
        created: Creation time (ISO-8601).
        modified: Last save time (ISO-8601).
        content: Plaintext, or ciphertext when protected and read raw.
        bill_type: Small integer tag used by the editor.
        is_password_protected: Current-format protection flag.
        password: Passphrase, only known after it was supplied.
    """

    name: str
    created: str
    modified: str
    content: str
    bill_type: int = DEFAULT_BILL_TYPE
    is_password_protected: bool = False
    password: str | None = None

    @classmethod
    def new(
        cls,
        name: str,
        content: str,
        bill_type: int = DEFAULT_BILL_TYPE,
        password: str | None = None,
    ) -> Document:
        """Create a document stamped with the current time.

        Passing a password marks the document as protected.
        """
        timestamp = now_iso()
        return cls(
            name=name,
            created=timestamp,
            modified=timestamp,
            content=content,
            bill_type=bill_type,
            is_password_protected=password is not None,
            password=password,
        )

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Document:
        """Create from a persistence record.

        Raises:
            KeyError: If the name or content is missing.
            TypeError: If content is not a string.
        """
        content = record["content"]
        if not isinstance(content, str):
            raise TypeError(f"content must be a string, got {type(content).__name__}")
        return cls(
            name=record["name"],
            created=str(record.get("created", "")),
            modified=str(record.get("modified", "")),
            content=content,
            bill_type=int(record.get("billType", DEFAULT_BILL_TYPE)),
            is_password_protected=record.get("isPasswordProtected") is True,
            password=record.get("password"),
        )

    def to_record(self, persist_password: bool = True) -> dict[str, Any]:
        """Convert to the persistence record layout."""
        return {
            "created": self.created,
            "modified": self.modified,
            "content": self.content,
            "name": self.name,
            "billType": self.bill_type,
            "isPasswordProtected": self.is_password_protected,
            "password": self.password if persist_password else None,
        }

    @property
    def is_protected(self) -> bool:
        """Protected under either storage format."""
        return classify(self.content, self.is_password_protected).is_protected


class LocalStore:
    """SQLite key/value store for documents.

    Concurrent writes to one key are last-write-wins; the engine is a
    single writer by construction.
    """

    def __init__(self, db_path: Path, persist_passwords: bool = True) -> None:
        """Open (or create) the store.

        Args:
            db_path: Path to the SQLite database file.
            persist_passwords: Keep document passwords inside their records.
        """
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._persist_passwords = persist_passwords

        self._lock = threading.RLock()
        self._conn = sqlite3.connect(
            str(self._db_path),
            check_same_thread=False,
            isolation_level=None,  # Autocommit mode
        )
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute(
            "CREATE TABLE IF NOT EXISTS preferences (key TEXT PRIMARY KEY, value TEXT)"
        )

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    def __enter__(self) -> LocalStore:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    # === Raw key/value access ===

    def _get_value(self, key: str) -> str | None:
        with self._lock:
            row = self._conn.execute(
                "SELECT value FROM preferences WHERE key = ?", (key,)
            ).fetchone()
        return row["value"] if row else None

    def _set_value(self, key: str, value: str) -> None:
        with self._lock:
            self._conn.execute(
                "INSERT OR REPLACE INTO preferences (key, value) VALUES (?, ?)",
                (key, value),
            )

    def _remove_value(self, key: str) -> None:
        with self._lock:
            self._conn.execute("DELETE FROM preferences WHERE key = ?", (key,))

    def _keys(self) -> list[str]:
        with self._lock:
            rows = self._conn.execute("SELECT key FROM preferences ORDER BY key").fetchall()
        return [row["key"] for row in rows]

    def _read_record(self, name: str) -> dict[str, Any]:
        raw = self._get_value(name)
        if raw is None:
            raise DocumentNotFoundError(f"Document not found: {name}")
        try:
            record = json.loads(raw)
        except json.JSONDecodeError as e:
            raise DocumentNotFoundError(f"Unreadable document: {name}") from e
        if not isinstance(record, dict):
            raise DocumentNotFoundError(f"Unreadable document: {name}")
        return record

    # === Documents ===

    def save(self, document: Document, encrypt_on_write: bool = True) -> None:
        """Persist a document under its name.

        Args:
            document: Document to store. Its content is plaintext unless
                encrypt_on_write is False.
            encrypt_on_write: Encrypt protected content with its password
                before writing. Pass False when content is already ciphertext.

        Raises:
            ValidationError: If the name is empty or reserved, or the content
                is empty.
            sqlite3.Error: If the underlying write fails.
        """
        if not document.name or not document.name.strip():
            raise ValidationError("Invalid fileName provided")
        if document.name in RESERVED_NAMES:
            raise ValidationError(f"'{document.name}' is a reserved name")
        if not isinstance(document.content, str) or not document.content:
            raise ValidationError("Invalid content provided")

        stored = document
        if document.is_password_protected and document.password and encrypt_on_write:
            stored = replace(
                document, content=encrypt_content(document.content, document.password)
            )

        record = stored.to_record(persist_password=self._persist_passwords)
        self._set_value(document.name, json.dumps(record))
        logger.debug(
            f"Saved {document.name} (protected={document.is_password_protected})"
        )

    def get(self, name: str) -> Document:
        """Get a document exactly as stored (ciphertext if protected).

        Raises:
            DocumentNotFoundError: If the key is absent or unparseable.
        """
        record = self._read_record(name)
        try:
            return Document.from_record(record)
        except (KeyError, TypeError, ValueError) as e:
            raise DocumentNotFoundError(f"Unreadable document: {name}") from e

    def get_with_password(self, name: str, password: str | None = None) -> Document:
        """Get a document with plaintext content.

        Protection is detected under both formats. Unprotected documents are
        returned as stored and the password is ignored.

        Args:
            name: Document name.
            password: Passphrase, required when the document is protected.

        Returns:
            Document whose content is plaintext.

        Raises:
            DocumentNotFoundError: If the key is absent or unparseable.
            CryptoError: If a password is required but missing, or wrong.
        """
        document = self.get(name)
        if not document.is_protected:
            return document
        if not password:
            raise CryptoError("Password required to open this file")

        try:
            plaintext = decrypt_content(document.content, password)
        except CryptoError as e:
            raise CryptoError(
                "Failed to decrypt file. Invalid password or corrupted file."
            ) from e
        return replace(document, content=plaintext, password=password)

    def get_protected(self, name: str, password: str) -> Document:
        """Get a protected document, a password being mandatory."""
        if not password:
            raise CryptoError("Password required to open this file")
        return self.get_with_password(name, password)

    def list_all(self) -> dict[str, str]:
        """List stored documents.

        Entries that fail to parse are skipped, never aborting enumeration.

        Returns:
            Mapping of document name to its modified timestamp.
        """
        files: dict[str, str] = {}
        for key in self._keys():
            if key == LAST_OPENED_KEY:
                continue
            try:
                record = self._read_record(key)
                files[key] = str(record.get("modified", ""))
            except DocumentNotFoundError as e:
                logger.warning(f"Skipping invalid file entry {key}: {e}")
        return files

    def delete(self, name: str) -> None:
        """Delete a document (no-op if absent)."""
        self._remove_value(name)

    def check_exists(self, name: str) -> bool:
        """Check if a key exists in the store."""
        return name in self._keys()

    def remember_password(self, name: str, password: str) -> None:
        """Record the password of a protected document without re-encrypting.

        Called after a successful protected open so later saves can
        re-encrypt without prompting. No-op when passwords are not persisted.
        """
        if not self._persist_passwords:
            return
        document = self.get(name)
        document.password = password
        self.save(document, encrypt_on_write=False)

    # === Protection ===

    @staticmethod
    def is_protected_content(content: object) -> bool:
        """True iff content starts with the legacy protection marker."""
        return is_protected_content(content)

    def is_file_protected(self, name: str) -> bool:
        """Check protection of a stored document without decrypting.

        Returns:
            True if the flag or the legacy prefix says so; False if the
            document cannot be read.
        """
        try:
            return self.get(name).is_protected
        except DocumentNotFoundError:
            return False

    # === Last opened pointer ===

    def save_last_opened(self, name: str) -> None:
        """Remember the last opened document name."""
        self._set_value(LAST_OPENED_KEY, name)

    def get_last_opened(self) -> str | None:
        """Get the last opened document name, if any."""
        return self._get_value(LAST_OPENED_KEY) or None

    def clear_last_opened(self) -> None:
        """Forget the last opened document name."""
        self._remove_value(LAST_OPENED_KEY)
