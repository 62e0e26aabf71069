"""Tests for user-facing error and summary messages."""

from __future__ import annotations

import httpx
import pytest

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
from docsync.core.types import Backend
from docsync.sync.messages import (
    AUTH_FAILED,
    BAD_REQUEST,
    PERMISSION_DENIED,
    SIGN_IN_REQUIRED,
    describe_error,
    summarize_batch,
)


class TestDescribeError:
    """Tests for describe_error()."""

    @pytest.mark.parametrize(
        ("error", "expected"),
        [
            (AuthRequired(), SIGN_IN_REQUIRED),
            (AuthenticationError("x", 401), AUTH_FAILED),
            (PermissionDeniedError("x", 403), PERMISSION_DENIED),
            (BadRequestError("x", 400), BAD_REQUEST),
            (NotFoundError("x", 404), "File not found in S3."),
            (ServerError("x", 500), "S3 is unavailable right now. Please try again later."),
            (CryptoError("Password required"), "Password required"),
            (ValidationError("Invalid fileName provided"), "Invalid fileName provided"),
            (DocumentNotFoundError("x"), "File not found in local storage."),
        ],
    )
    def test_categories(self, error: Exception, expected: str) -> None:
        assert describe_error(error, Backend.S3, "save file to") == expected

    def test_generic_fallback(self) -> None:
        """Unknown failures should use the action and the backend name."""
        error = httpx.ConnectError("refused")
        assert (
            describe_error(error, Backend.POSTGRES, "save file to")
            == "Failed to save file to PostgreSQL. Please try again."
        )

    def test_no_backend(self) -> None:
        assert describe_error(RuntimeError(), None, "read") == (
            "Failed to read local storage. Please try again."
        )


class TestSummarizeBatch:
    """Tests for summarize_batch()."""

    def test_all_succeeded(self) -> None:
        assert summarize_batch(3, 0, "downloaded", "from S3") == (
            "Successfully downloaded 3 file(s) from S3"
        )

    def test_partial(self) -> None:
        assert summarize_batch(2, 1, "uploaded", "to S3") == "Uploaded 2 file(s), 1 failed"

    def test_all_failed(self) -> None:
        assert summarize_batch(0, 2, "migrated", "to OrbitDB") == (
            "Failed to migrate files to OrbitDB"
        )

    def test_empty(self) -> None:
        assert summarize_batch(0, 0, "downloaded", "from S3") == "No files to process"
