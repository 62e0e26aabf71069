"""Exception hierarchy shared by the local store, remote adapters and sync.

This module provides:
- ValidationError: rejected input, raised before any I/O
- AuthRequired: no bearer credential for a networked backend
- BackendError and its per-status subclasses
- CryptoError: wrong password or corrupted ciphertext
- DocumentNotFoundError: missing or unparseable local record
"""

from __future__ import annotations


class DocsyncError(Exception):
    """Base exception for docsync errors."""


class ValidationError(DocsyncError):
    """Input rejected before any storage or network call."""


class AuthRequired(DocsyncError):
    """No credential is cached for a backend that needs one."""

    def __init__(self, message: str = "Please login to continue") -> None:
        super().__init__(message)


class CryptoError(DocsyncError):
    """Decryption failed or a required password is missing."""


class DocumentNotFoundError(DocsyncError):
    """Local document key is absent or its value cannot be parsed."""


class BackendError(DocsyncError):
    """Base exception for remote backend errors."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class BadRequestError(BackendError):
    """Backend rejected the request (400)."""


class AuthenticationError(BackendError):
    """Token invalid or expired (401)."""


class PermissionDeniedError(BackendError):
    """Token valid but not allowed to perform the operation (403)."""


class NotFoundError(BackendError):
    """File not found on the backend (404)."""


class ServerError(BackendError):
    """Backend failed internally (5xx)."""


def error_for_status(status_code: int, message: str) -> BackendError:
    """Build the BackendError subclass matching an HTTP status code.

    Args:
        status_code: HTTP status of the failed response.
        message: Detail message reported by the backend.

    Returns:
        An exception instance (not raised).
    """
    if status_code == 400:
        return BadRequestError(message, status_code)
    if status_code == 401:
        return AuthenticationError(message, status_code)
    if status_code == 403:
        return PermissionDeniedError(message, status_code)
    if status_code == 404:
        return NotFoundError(message, status_code)
    if status_code >= 500:
        return ServerError(message, status_code)
    return BackendError(message, status_code)
