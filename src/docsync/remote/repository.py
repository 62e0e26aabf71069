"""Remote repository: one interface over every storage backend.

This module provides:
- RemoteRepository: dispatches the four operations to the adapter of a
  backend, validating input and threading the bearer credential
- create_repository: factory wiring the default adapters from configuration
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

import httpx

from docsync.core.config import ServiceConfig
from docsync.core.credentials import CredentialProvider
from docsync.core.errors import AuthRequired, ValidationError
from docsync.core.types import Backend
from docsync.remote.base import Ack, RemoteContent, RemoteListing, StorageBackend
from docsync.remote.embedded import EmbeddedBackend
from docsync.remote.http import HTTPBackend

logger = logging.getLogger(__name__)


def _validate_name(name: object) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Invalid fileName provided")
    return name


class RemoteRepository:
    """Uniform {list, get, put, delete} access to the configured backends.

    Errors from the adapters propagate unmodified; classifying them for the
    user is the orchestrator's job.
    """

    def __init__(
        self,
        backends: Mapping[Backend, StorageBackend],
        credentials: CredentialProvider,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the repository.

        Args:
            backends: Adapter for each available backend.
            credentials: Source of the bearer token for networked backends.
            http_client: Shared HTTP client to close with the repository.
        """
        self._backends = dict(backends)
        self._credentials = credentials
        self._http_client = http_client

    @property
    def backends(self) -> list[Backend]:
        """Backends this repository can reach."""
        return list(self._backends)

    @property
    def is_signed_in(self) -> bool:
        """Whether a credential is currently available."""
        return self._credentials.is_signed_in

    def adapter(self, backend: Backend) -> StorageBackend:
        """Return the adapter serving a backend.

        Raises:
            ValueError: If the backend is not configured.
        """
        try:
            return self._backends[Backend(backend)]
        except (KeyError, ValueError) as e:
            raise ValueError(f"Backend not configured: {backend}") from e

    def _token_for(self, adapter: StorageBackend) -> str | None:
        """Get the token for a call, before any network I/O.

        Raises:
            AuthRequired: If the adapter needs a credential and none is cached.
        """
        if not adapter.requires_credential:
            return None
        token = self._credentials.get_token()
        if not token:
            raise AuthRequired()
        return token

    async def list_all(self, backend: Backend) -> RemoteListing:
        """List regular and password-protected files of a backend."""
        adapter = self.adapter(backend)
        token = self._token_for(adapter)
        listing = await adapter.list_all(token)
        logger.debug(
            f"{adapter.backend.display_name}: {len(listing.files)} files, "
            f"{len(listing.password_protected_files)} protected"
        )
        return listing

    async def get_file(
        self, backend: Backend, name: str, is_password_protected: bool = False
    ) -> RemoteContent:
        """Fetch a file's content exactly as stored."""
        _validate_name(name)
        adapter = self.adapter(backend)
        token = self._token_for(adapter)
        return await adapter.get_file(name, is_password_protected, token)

    async def upload_file(
        self,
        backend: Backend,
        name: str,
        content: str,
        is_password_protected: bool = False,
    ) -> Ack:
        """Upload content unchanged (encrypt beforehand if needed)."""
        _validate_name(name)
        if not isinstance(content, str) or not content:
            raise ValidationError("Invalid content provided")
        adapter = self.adapter(backend)
        token = self._token_for(adapter)
        return await adapter.upload_file(name, content, is_password_protected, token)

    async def delete_file(
        self, backend: Backend, name: str, is_password_protected: bool = False
    ) -> Ack:
        """Delete a file from a backend."""
        _validate_name(name)
        adapter = self.adapter(backend)
        token = self._token_for(adapter)
        return await adapter.delete_file(name, is_password_protected, token)

    async def aclose(self) -> None:
        """Close adapters and the shared HTTP client."""
        for adapter in self._backends.values():
            await adapter.aclose()
        if self._http_client is not None:
            await self._http_client.aclose()

    async def __aenter__(self) -> RemoteRepository:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()


def create_repository(
    config: ServiceConfig,
    credentials: CredentialProvider,
    http_client: httpx.AsyncClient | None = None,
) -> RemoteRepository:
    """Build a repository with an adapter for every backend.

    Args:
        config: Service configuration (API URL, timeout, data directory).
        credentials: Bearer token provider.
        http_client: Optional preconfigured client (tests inject one).

    Returns:
        RemoteRepository owning the HTTP client and embedded database.
    """
    client = http_client or httpx.AsyncClient(
        base_url=config.api_base_url,
        timeout=config.timeout,
        verify=config.verify_ssl,
        headers={"Content-Type": "application/json"},
    )
    backends: dict[Backend, StorageBackend] = {}
    for backend in Backend:
        if backend.is_embedded:
            backends[backend] = EmbeddedBackend(config.embedded_db_path)
        else:
            backends[backend] = HTTPBackend(backend, client)
    return RemoteRepository(backends, credentials, http_client=client)
