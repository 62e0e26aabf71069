"""Bearer credential providers.

The remote repository never looks a token up by itself: it receives a
provider at construction and asks it before every networked call.

This module provides:
- CredentialProvider: protocol consumed by the repository
- KeyringCredentials: token cached in the OS keyring
- StaticCredentials: fixed token (tests, embedding)
"""

from __future__ import annotations

import contextlib
import logging
from typing import Protocol

import keyring
from keyring.errors import KeyringError

logger = logging.getLogger(__name__)

KEYRING_SERVICE = "docsync"
KEYRING_USERNAME = "bearer-token"


class CredentialProvider(Protocol):
    """Source of the opaque bearer token."""

    def get_token(self) -> str | None:
        """Return the cached token, or None when signed out."""
        ...

    @property
    def is_signed_in(self) -> bool:
        """True when a token is available."""
        ...


class KeyringCredentials:
    """Bearer token stored in the OS keyring."""

    def __init__(
        self,
        service: str = KEYRING_SERVICE,
        username: str = KEYRING_USERNAME,
    ) -> None:
        self._service = service
        self._username = username

    def get_token(self) -> str | None:
        """Read the token from the keyring.

        An unavailable keyring backend is treated as signed out.
        """
        try:
            return keyring.get_password(self._service, self._username) or None
        except KeyringError as e:
            logger.debug(f"Keyring unavailable, treating as signed out: {e}")
            return None

    @property
    def is_signed_in(self) -> bool:
        """True when the keyring holds a token."""
        return self.get_token() is not None

    def store_token(self, token: str) -> None:
        """Cache a token after sign-in.

        Raises:
            keyring.errors.KeyringError: If no keyring backend can store it.
        """
        keyring.set_password(self._service, self._username, token)

    def clear(self) -> None:
        """Forget the token (silently ignore if nothing is stored)."""
        with contextlib.suppress(KeyringError):
            keyring.delete_password(self._service, self._username)


class StaticCredentials:
    """Fixed token, or permanently signed out when token is None."""

    def __init__(self, token: str | None = None) -> None:
        self._token = token

    def get_token(self) -> str | None:
        """Return the configured token."""
        return self._token

    @property
    def is_signed_in(self) -> bool:
        """True when a token was given."""
        return self._token is not None
