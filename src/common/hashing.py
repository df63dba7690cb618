"""Hashing utilities."""

import hashlib


def generate_record_id(url: str) -> str:
    """Generate a stable record ID from a normalized URL."""
    return hashlib.sha256(url.encode()).hexdigest()[:16]
