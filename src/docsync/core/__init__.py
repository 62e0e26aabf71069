"""Core module - Shared crypto, errors, configuration and types."""

from docsync.core.config import ServiceConfig
from docsync.core.credentials import (
    CredentialProvider,
    KeyringCredentials,
    StaticCredentials,
)
from docsync.core.crypto import (
    LEGACY_PREFIX,
    decrypt_content,
    encrypt_content,
    is_protected_content,
)
from docsync.core.errors import (
    AuthenticationError,
    AuthRequired,
    BackendError,
    BadRequestError,
    CryptoError,
    DocsyncError,
    DocumentNotFoundError,
    NotFoundError,
    PermissionDeniedError,
    ServerError,
    ValidationError,
)
from docsync.core.protection import Protection, classify
from docsync.core.types import Backend

__all__ = [
    # Config
    "ServiceConfig",
    # Credentials
    "CredentialProvider",
    "KeyringCredentials",
    "StaticCredentials",
    # Crypto
    "LEGACY_PREFIX",
    "decrypt_content",
    "encrypt_content",
    "is_protected_content",
    # Errors
    "AuthRequired",
    "AuthenticationError",
    "BackendError",
    "BadRequestError",
    "CryptoError",
    "DocsyncError",
    "DocumentNotFoundError",
    "NotFoundError",
    "PermissionDeniedError",
    "ServerError",
    "ValidationError",
    # Protection
    "Protection",
    "classify",
    # Types
    "Backend",
]
