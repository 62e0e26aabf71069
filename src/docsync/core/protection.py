"""Password-protection detection shared by local and remote paths.

A document is protected when either format says so: the current format
carries an explicit flag, the legacy format prefixes the content with a
textual marker. Every call site classifies through classify() instead of
re-deriving the rule.
"""

from __future__ import annotations

from enum import Enum

from docsync.core.crypto import is_protected_content


class Protection(Enum):
    """Protection classification of a stored document."""

    PROTECTED = "protected"
    UNPROTECTED = "unprotected"

    @property
    def is_protected(self) -> bool:
        return self is Protection.PROTECTED


def classify(content: object, flag: bool | None = None) -> Protection:
    """Classify content plus an optional out-of-band flag.

    Args:
        content: Stored content (ciphertext or plaintext).
        flag: isPasswordProtected value when the record has one.

    Returns:
        PROTECTED if the flag is true or the content has the legacy prefix.
    """
    if flag is True or is_protected_content(content):
        return Protection.PROTECTED
    return Protection.UNPROTECTED

