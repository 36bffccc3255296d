"""
fingerprint.py - Short content hash for compiled prompt change detection.

The fingerprint is the first 16 hex characters of the SHA-256 digest of the
UTF-8 encoded text. It drives "unsaved changes" indicators and on-screen
content hashes; it is not a security boundary.
"""

from __future__ import annotations

import hashlib

FINGERPRINT_LENGTH = 16


def fingerprint(text: str) -> str:
    """Compute the fingerprint of text.

    Raises:
        TypeError: If text is not a str.
    """
    if not isinstance(text, str):
        raise TypeError(f"fingerprint expects str, got {type(text).__name__}")
    digest = hashlib.sha256(text.encode("utf-8", "surrogatepass")).hexdigest()
    return digest[:FINGERPRINT_LENGTH]


# Fingerprint of "no content"
EMPTY_FINGERPRINT = fingerprint("")
