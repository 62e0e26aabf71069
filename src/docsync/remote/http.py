"""HTTP adapters for the networked storage backends.

This module provides:
- HTTPBackend: one adapter per backend, each operation being a single
  authenticated POST to /api/v1/{operation}{Suffix}
- Normalization of the getFile response shapes
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from docsync.core.errors import BackendError, error_for_status
from docsync.core.types import Backend
from docsync.remote.base import Ack, RemoteContent, RemoteListing, StorageBackend

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


def normalize_content(data: Any, name: str) -> RemoteContent:
    """Normalize a getFile payload into RemoteContent.

    Backends answer either with a bare string or with an object carrying
    the content in a "content" field.

    Raises:
        BackendError: If no content can be found in the payload.
    """
    if isinstance(data, str):
        return RemoteContent(content=data, file_name=name)
    if isinstance(data, dict) and isinstance(data.get("content"), str):
        return RemoteContent(
            content=data["content"],
            file_name=str(data.get("fileName") or name),
        )
    raise BackendError(f"Unexpected response format for {name}")


def _json_or_none(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except json.JSONDecodeError:
        return None


class HTTPBackend(StorageBackend):
    """Adapter for a backend behind the storage API."""

    def __init__(self, backend: Backend, client: httpx.AsyncClient) -> None:
        """Initialize the adapter.

        Args:
            backend: Networked backend identifier.
            client: Shared async HTTP client configured with the API base URL.
        """
        if backend.is_embedded:
            raise ValueError(f"{backend.value} is not reachable over HTTP")
        self._backend = backend
        self._client = client

    @property
    def backend(self) -> Backend:
        """Return the backend identifier."""
        return self._backend

    @property
    def location(self) -> str:
        """Return the API base URL and backend."""
        return f"{self._backend.display_name} via {self._client.base_url}"

    def _endpoint(self, operation: str) -> str:
        return f"{API_PREFIX}/{operation}{self._backend.endpoint_suffix}"

    def _handle_response(self, response: httpx.Response) -> httpx.Response:
        """Handle API response and raise the error matching its status."""
        if response.status_code >= 400:
            body = _json_or_none(response)
            detail = None
            if isinstance(body, dict):
                detail = body.get("message") or body.get("detail")
            raise error_for_status(
                response.status_code,
                str(detail or response.reason_phrase or "Unknown error"),
            )
        return response

    async def _call(self, operation: str, payload: dict[str, Any]) -> httpx.Response:
        endpoint = self._endpoint(operation)
        logger.debug(f"POST {endpoint}")
        response = await self._client.post(endpoint, json=payload)
        return self._handle_response(response)

    async def list_all(self, token: str | None) -> RemoteListing:
        """List files on the backend."""
        response = await self._call("listAll", {"token": token})
        data = _json_or_none(response)
        if not isinstance(data, dict):
            raise BackendError(f"Unexpected listing from {self._backend.display_name}")
        return RemoteListing.from_dict(data)

    async def get_file(
        self, name: str, is_password_protected: bool, token: str | None
    ) -> RemoteContent:
        """Fetch a file's content as stored."""
        response = await self._call(
            "getFile",
            {
                "token": token,
                "fileName": name,
                "isPasswordProtected": is_password_protected,
            },
        )
        try:
            data: Any = response.json()
        except json.JSONDecodeError:
            data = response.text
        return normalize_content(data, name)

    async def upload_file(
        self,
        name: str,
        content: str,
        is_password_protected: bool,
        token: str | None,
    ) -> Ack:
        """Upload content unchanged."""
        response = await self._call(
            "uploadFile",
            {
                "token": token,
                "fileName": name,
                "fileContent": content,
                "isPasswordProtected": is_password_protected,
            },
        )
        return Ack.from_dict(_json_or_none(response))

    async def delete_file(
        self, name: str, is_password_protected: bool, token: str | None
    ) -> Ack:
        """Delete a file."""
        response = await self._call(
            "deleteFile",
            {
                "token": token,
                "fileName": name,
                "isPasswordProtected": is_password_protected,
            },
        )
        return Ack.from_dict(_json_or_none(response))
