"""Hashing utilities for cache key generation."""

import hashlib
import json
from typing import Any


def canonical_json(value: Any) -> str:
    """Serialize a value to canonical JSON.

    Mapping keys are sorted and separators are fixed, so two mappings
    holding the same items produce the same string regardless of
    insertion order.

    Args:
        value: Any JSON-serializable value.

    Returns:
        The canonical JSON string.
    """
    return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)


def hash_value(value: Any) -> str:
    """Create a deterministic hash of a value.

    Args:
        value: Any JSON-serializable value.

    Returns:
        A hexadecimal hash string (first 16 chars of SHA-256).
    """
    if value is None:
        return "none"

    return hashlib.sha256(canonical_json(value).encode()).hexdigest()[:16]


def normalize_endpoint(endpoint: str) -> str:
    """Normalize an endpoint path for consistent keys.

    Surrounding whitespace and slashes are not significant, so
    ``coins/markets`` and ``/coins/markets/`` normalize the same way.

    Args:
        endpoint: The logical resource path.

    Returns:
        The endpoint with exactly one leading slash.
    """
    return "/" + endpoint.strip().strip("/")
