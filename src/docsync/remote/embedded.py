"""Embedded OrbitDB backend.

A local indexed database standing in for a decentralized store. It satisfies
the same contract as the HTTP adapters but is reached through direct calls
and needs no credential.

This module provides:
- FileRecord: SQLAlchemy model of one stored file
- EmbeddedBackend: StorageBackend over a SQLite database
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, Index, String, Text, create_engine, select
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column

from docsync.core.errors import NotFoundError
from docsync.core.types import Backend
from docsync.remote.base import Ack, RemoteContent, RemoteListing, StorageBackend

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for embedded backend models."""


class FileRecord(Base):
    """One file in the embedded store, keyed by file name."""

    __tablename__ = "files"

    file_name: Mapped[str] = mapped_column(String(1024), primary_key=True)
    file_content: Mapped[str] = mapped_column(Text, nullable=False)
    is_password_protected: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
    modified_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    __table_args__ = (
        Index("idx_files_created_at", "created_at"),
        Index("idx_files_modified_at", "modified_at"),
        Index("idx_files_password_protected", "is_password_protected"),
    )


def to_millis(value: datetime) -> int:
    """Epoch milliseconds of a datetime (naive values are UTC)."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return int(value.timestamp() * 1000)


class EmbeddedBackend(StorageBackend):
    """OrbitDB stand-in backed by SQLite through SQLAlchemy."""

    requires_credential = False

    def __init__(self, db_path: Path) -> None:
        """Open (or create) the embedded database.

        Args:
            db_path: Path to the SQLite database file.
        """
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._engine: Engine = create_engine(
            f"sqlite:///{self._db_path}",
            connect_args={"check_same_thread": False},
            echo=False,
        )
        Base.metadata.create_all(self._engine)

    @property
    def backend(self) -> Backend:
        """Return the backend identifier."""
        return Backend.ORBITDB

    @property
    def location(self) -> str:
        """Return the database path."""
        return f"Embedded database: {self._db_path}"

    def _session(self) -> Session:
        return Session(self._engine)

    async def list_all(self, token: str | None = None) -> RemoteListing:
        """Split stored files by protection flag."""
        listing = RemoteListing()
        with self._session() as session:
            for record in session.scalars(select(FileRecord)):
                timestamp = to_millis(record.modified_at)
                if record.is_password_protected:
                    listing.password_protected_files[record.file_name] = timestamp
                else:
                    listing.files[record.file_name] = timestamp
        return listing

    async def get_file(
        self, name: str, is_password_protected: bool = False, token: str | None = None
    ) -> RemoteContent:
        """Fetch stored content.

        Raises:
            NotFoundError: If the file doesn't exist.
        """
        with self._session() as session:
            record = session.get(FileRecord, name)
            if record is None:
                raise NotFoundError(f"File not found: {name}", 404)
            return RemoteContent(content=record.file_content, file_name=record.file_name)

    async def upload_file(
        self,
        name: str,
        content: str,
        is_password_protected: bool = False,
        token: str | None = None,
    ) -> Ack:
        """Store a file, replacing any previous record under the same name."""
        now = datetime.now(UTC)
        with self._session() as session:
            session.merge(
                FileRecord(
                    file_name=name,
                    file_content=content,
                    is_password_protected=is_password_protected,
                    created_at=now,
                    modified_at=now,
                )
            )
            session.commit()
        logger.debug(f"Stored {name} in embedded backend")
        return Ack(success=True, message="File uploaded")

    async def delete_file(
        self, name: str, is_password_protected: bool = False, token: str | None = None
    ) -> Ack:
        """Delete a file (no-op if absent)."""
        with self._session() as session:
            record = session.get(FileRecord, name)
            if record is not None:
                session.delete(record)
                session.commit()
        return Ack(success=True, message="File deleted")

    async def aclose(self) -> None:
        """Dispose of the database engine."""
        self._engine.dispose()
