"""Passphrase encryption for protected documents.

This module provides:
- Key/IV derivation from a passphrase (OpenSSL EVP_BytesToKey, MD5)
- AES-256-CBC encryption in the OpenSSL "Salted__" envelope, base64 encoded
- Decryption of both ciphertext formats (current and "Protected_" legacy)

The envelope is the one produced by passphrase-mode AES in browser crypto
libraries, so documents written by the web client decrypt here unchanged.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import os

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from docsync.core.errors import CryptoError

# Marker that prefixed ciphertext in the legacy storage format
LEGACY_PREFIX = "Protected_"

# OpenSSL envelope constants
SALTED_MAGIC = b"Salted__"
SALT_SIZE = 8
KEY_SIZE = 32  # AES-256
IV_SIZE = 16
BLOCK_SIZE = 128  # bits, for PKCS7


def is_protected_content(content: object) -> bool:
    """Check whether content carries the legacy protection marker.

    Pure textual test, no decryption is attempted.

    Args:
        content: Stored content (anything that is not a string is unprotected).

    Returns:
        True iff content is a string starting with LEGACY_PREFIX.
    """
    return isinstance(content, str) and content.startswith(LEGACY_PREFIX)


def derive_key_iv(password: str, salt: bytes) -> tuple[bytes, bytes]:
    """Derive an AES key and IV from a passphrase and salt.

    Implements OpenSSL's EVP_BytesToKey with MD5 and a single iteration.

    Args:
        password: The document passphrase.
        salt: 8-byte salt taken from the envelope.

    Returns:
        (key, iv) tuple of 32 and 16 bytes.
    """
    secret = password.encode("utf-8")
    derived = b""
    block = b""
    while len(derived) < KEY_SIZE + IV_SIZE:
        block = hashlib.md5(block + secret + salt).digest()
        derived += block
    return derived[:KEY_SIZE], derived[KEY_SIZE : KEY_SIZE + IV_SIZE]


def encrypt_content(content: str, password: str) -> str:
    """Encrypt document content with a passphrase.

    Args:
        content: Plaintext document content.
        password: Passphrase used directly as key material.

    Returns:
        Base64 text of "Salted__" || salt || ciphertext (current format, no prefix).
    """
    salt = os.urandom(SALT_SIZE)
    key, iv = derive_key_iv(password, salt)

    padder = padding.PKCS7(BLOCK_SIZE).padder()
    padded = padder.update(content.encode("utf-8")) + padder.finalize()

    encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    ciphertext = encryptor.update(padded) + encryptor.finalize()
    return base64.b64encode(SALTED_MAGIC + salt + ciphertext).decode("ascii")


def decrypt_content(encrypted: str, password: str) -> str:
    """Decrypt content produced by encrypt_content.

    Accepts both formats: the legacy prefix is stripped when present.

    Args:
        encrypted: Ciphertext text, optionally prefixed with LEGACY_PREFIX.
        password: Passphrase.

    Returns:
        Plaintext content.

    Raises:
        CryptoError: If the password is wrong or the ciphertext is corrupted.
    """
    if is_protected_content(encrypted):
        encrypted = encrypted[len(LEGACY_PREFIX) :]

    try:
        raw = base64.b64decode(encrypted, validate=True)
    except (binascii.Error, ValueError) as e:
        raise CryptoError("Invalid password or corrupted file") from e

    header = len(SALTED_MAGIC) + SALT_SIZE
    body = raw[header:]
    if not raw.startswith(SALTED_MAGIC) or not body or len(body) % IV_SIZE:
        raise CryptoError("Invalid password or corrupted file")

    key, iv = derive_key_iv(password, raw[len(SALTED_MAGIC) : header])
    decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
    padded = decryptor.update(body) + decryptor.finalize()

    try:
        unpadder = padding.PKCS7(BLOCK_SIZE).unpadder()
        plaintext = unpadder.update(padded) + unpadder.finalize()
        return plaintext.decode("utf-8")
    except (ValueError, UnicodeDecodeError) as e:
        # Wrong key shows up as bad padding or non-UTF-8 garbage
        raise CryptoError("Invalid password or corrupted file") from e
