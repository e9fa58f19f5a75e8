"""
Cryptographic helpers - passcode hashing and subject normalization.

Uses SHA-256 for passcode hashing: the plaintext is never persisted and
verification always compares digests.
"""

from __future__ import annotations

import hashlib
import hmac
from typing import Optional

from errors import MissingInputError


def hash_token(token: str) -> str:
    """Return the hex-encoded SHA-256 digest of *token*.

    Used to hash OTP codes before storing them so the plaintext is never
    persisted.

    Args:
        token: The plaintext token string to hash.

    Returns:
        64-character lowercase hex string.
    """
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def verify_token(candidate: str, token_hash: str) -> bool:
    """Digest *candidate* and compare it to *token_hash* in constant time."""
    return hmac.compare_digest(hash_token(candidate), token_hash)


def normalize_subject(raw: Optional[str]) -> str:
    """Normalize an email address or phone number into a subject key.

    Lowercases and removes every whitespace character, so
    ``" A@X.com "`` and ``"a@x.com"`` address the same subject. The
    function is idempotent.

    Raises:
        MissingInputError: *raw* is ``None`` or contains only whitespace.
    """
    if raw is None:
        raise MissingInputError("A destination is required.", field="destination")
    normalized = "".join(raw.split()).lower()
    if not normalized:
        raise MissingInputError("A destination is required.", field="destination")
    return normalized
