"""Shared types for docsync.

This module defines the backend identifiers used by the remote repository,
the orchestrator and the CLI.
"""

from __future__ import annotations

from enum import Enum


class Backend(str, Enum):
    """Remote storage backend identifier.

    Five backends are reached over HTTP, ORBITDB is an embedded local
    database standing in for a decentralized store.
    """

    S3 = "s3"
    POSTGRES = "postgres"
    FIREBASE = "firebase"
    MONGO = "mongo"
    NEO4J = "neo4j"
    ORBITDB = "orbitdb"

    @property
    def display_name(self) -> str:
        """Human-readable backend name for messages."""
        return _DISPLAY_NAMES[self]

    @property
    def endpoint_suffix(self) -> str:
        """Suffix appended to RPC operation names (e.g. "listAllS3")."""
        return _ENDPOINT_SUFFIXES[self]

    @property
    def is_embedded(self) -> bool:
        """True for the backend that needs no network and no credential."""
        return self is Backend.ORBITDB


_DISPLAY_NAMES: dict[Backend, str] = {
    Backend.S3: "S3",
    Backend.POSTGRES: "PostgreSQL",
    Backend.FIREBASE: "Firebase",
    Backend.MONGO: "MongoDB",
    Backend.NEO4J: "Neo4j",
    Backend.ORBITDB: "OrbitDB",
}

_ENDPOINT_SUFFIXES: dict[Backend, str] = {
    Backend.S3: "S3",
    Backend.POSTGRES: "Postgres",
    Backend.FIREBASE: "Firebase",
    Backend.MONGO: "Mongo",
    Backend.NEO4J: "Neo4j",
    Backend.ORBITDB: "OrbitDB",
}
