# src/typestep/core/canonical.py
"""
Canonical JSON serialization for deterministic hashing.

Compiled definitions are plain JSON-safe structures, so serialization goes
straight to RFC 8785/JCS (rfc8785 package). NaN and Infinity are rejected.
"""

from __future__ import annotations

import hashlib
import math
from typing import Any

import rfc8785


def _check_finite(data: Any) -> None:
    """Reject non-finite floats anywhere in a nested structure.

    Raises:
        ValueError: If data contains NaN or Infinity
    """
    if isinstance(data, float):
        if math.isnan(data) or math.isinf(data):
            raise ValueError(f"Cannot canonicalize non-finite float: {data}")
    elif isinstance(data, dict):
        for value in data.values():
            _check_finite(value)
    elif isinstance(data, list | tuple):
        for value in data:
            _check_finite(value)


def canonical_json(obj: Any) -> str:
    """Produce canonical JSON for hashing.

    Args:
        obj: Data structure to serialize

    Returns:
        Canonical JSON string (no whitespace, sorted keys)

    Raises:
        ValueError: If data contains NaN or Infinity
        TypeError: If data contains types that cannot be serialized
    """
    _check_finite(obj)
    result: bytes = rfc8785.dumps(obj)
    return result.decode("utf-8")


def stable_hash(obj: Any) -> str:
    """Compute stable hash of object.

    Args:
        obj: Data structure to hash

    Returns:
        SHA-256 hex digest of canonical JSON
    """
    canonical = canonical_json(obj)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def short_digest(text: str, length: int = 8) -> str:
    """First `length` hex characters of the SHA-256 digest of text."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()[:length]
