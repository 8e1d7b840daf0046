"""Hashing helpers for institutional identifiers."""

import hashlib


def hash_microsoft_id(microsoft_id: str) -> str:
    """
    Hash a Microsoft account ID with SHA-256.
    
    Args:
        microsoft_id: Raw Microsoft account identifier
        
    Returns:
        SHA-256 hex digest used as the lookup key for links and bans
    """
    return hashlib.sha256(microsoft_id.encode("utf-8")).hexdigest()
