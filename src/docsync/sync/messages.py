"""User-facing messages for sync failures and batch results.

The orchestrator is the only place where errors coming from the local store
or the remote repository are classified; this module holds the mapping.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from docsync.core.errors import (
    AuthenticationError,
    AuthRequired,
    BadRequestError,
    CryptoError,
    DocumentNotFoundError,
    NotFoundError,
    PermissionDeniedError,
    ServerError,
    ValidationError,
)

if TYPE_CHECKING:
    from docsync.core.types import Backend

SIGN_IN_REQUIRED = "Please sign in first to access cloud storage"
AUTH_FAILED = "Authentication failed. Please login and try again."
PERMISSION_DENIED = "Permission denied. Your app may not have sufficient permissions."
BAD_REQUEST = "Bad request. Please check the file name and content."
INVALID_PASSWORD = "Incorrect password or corrupted file. Please try again."


def describe_error(error: BaseException, backend: Backend | None, action: str) -> str:
    """Map an exception to a categorized user message.

    Args:
        error: Exception raised by the store, the repository or the cipher.
        backend: Backend involved, if any.
        action: Verb phrase for the generic fallback (e.g. "save file to").

    Returns:
        Message suitable for a toast or a CLI line.
    """
    where = backend.display_name if backend is not None else "local storage"
    if isinstance(error, AuthRequired):
        return SIGN_IN_REQUIRED
    if isinstance(error, AuthenticationError):
        return AUTH_FAILED
    if isinstance(error, PermissionDeniedError):
        return PERMISSION_DENIED
    if isinstance(error, BadRequestError):
        return BAD_REQUEST
    if isinstance(error, NotFoundError):
        return f"File not found in {where}."
    if isinstance(error, ServerError):
        return f"{where} is unavailable right now. Please try again later."
    if isinstance(error, DocumentNotFoundError):
        return "File not found in local storage."
    if isinstance(error, (CryptoError, ValidationError)):
        return str(error)
    return f"Failed to {action} {where}. Please try again."


def summarize_batch(
    succeeded: int, failed: int, verb: str, direction: str
) -> str:
    """Summary line for a batch result.

    Args:
        succeeded: Number of files moved.
        failed: Number of files that could not be moved.
        verb: Past participle of the operation (e.g. "downloaded").
        direction: Where the files went or came from (e.g. "from S3").
    """
    if succeeded and not failed:
        return f"Successfully {verb} {succeeded} file(s) {direction}"
    if succeeded and failed:
        return f"{verb.capitalize()} {succeeded} file(s), {failed} failed"
    if not succeeded and not failed:
        return "No files to process"
    return f"Failed to {_infinitive(verb)} files {direction}"


def _infinitive(verb: str) -> str:
    return {
        "downloaded": "download",
        "uploaded": "upload",
        "migrated": "migrate",
    }.get(verb, verb)
