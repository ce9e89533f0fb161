"""Hashing helpers for image identity and idempotence checks."""

from __future__ import annotations

import hashlib


def sha256_hex(data: bytes) -> str:
    """Return the SHA-256 hex digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


def image_digest(image: bytes) -> str:
    """Content-address a compiled image.

    Returns "sha256:<hex>".  Two compilations of an unchanged source tree
    against unchanged references produce the same digest.
    """
    return f"sha256:{sha256_hex(image)}"
