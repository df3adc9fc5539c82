from __future__ import annotations

import hashlib


def calculate_hash(data: bytes) -> str:
    """SHA-256 hex digest of a document."""
    return hashlib.sha256(data).hexdigest()
