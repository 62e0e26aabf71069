"""Tests for bearer credential providers."""

from __future__ import annotations

import pytest
from keyring.errors import KeyringError

from docsync.core.credentials import (
    KEYRING_SERVICE,
    KEYRING_USERNAME,
    KeyringCredentials,
    StaticCredentials,
)


class TestKeyringCredentials:
    """Tests for KeyringCredentials."""

    def test_signed_out_by_default(self, fake_keyring: dict) -> None:
        """No stored token means signed out."""
        credentials = KeyringCredentials()
        assert credentials.get_token() is None
        assert credentials.is_signed_in is False

    def test_store_and_get(self, fake_keyring: dict) -> None:
        """Stored token should be returned and kept under the docsync service."""
        credentials = KeyringCredentials()
        credentials.store_token("abc")
        assert credentials.get_token() == "abc"
        assert credentials.is_signed_in is True
        assert fake_keyring[(KEYRING_SERVICE, KEYRING_USERNAME)] == "abc"

    def test_clear(self, fake_keyring: dict) -> None:
        """Clearing should sign out."""
        credentials = KeyringCredentials()
        credentials.store_token("abc")
        credentials.clear()
        assert credentials.get_token() is None

    def test_clear_when_empty(self, fake_keyring: dict) -> None:
        """Clearing without a token should not raise."""
        KeyringCredentials().clear()

    def test_empty_token_is_signed_out(self, fake_keyring: dict) -> None:
        """An empty stored string should count as no token."""
        fake_keyring[(KEYRING_SERVICE, KEYRING_USERNAME)] = ""
        assert KeyringCredentials().get_token() is None

    def test_unavailable_keyring(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """A broken keyring backend should be treated as signed out."""

        def broken(service: str, username: str) -> str | None:
            raise KeyringError("no backend")

        monkeypatch.setattr("keyring.get_password", broken)
        assert KeyringCredentials().is_signed_in is False

    def test_custom_service(self, fake_keyring: dict) -> None:
        """Service and username should be configurable."""
        KeyringCredentials(service="other", username="me").store_token("t")
        assert fake_keyring[("other", "me")] == "t"


class TestStaticCredentials:
    """Tests for StaticCredentials."""

    def test_with_token(self) -> None:
        credentials = StaticCredentials("abc")
        assert credentials.get_token() == "abc"
        assert credentials.is_signed_in is True

    def test_without_token(self) -> None:
        credentials = StaticCredentials()
        assert credentials.get_token() is None
        assert credentials.is_signed_in is False
