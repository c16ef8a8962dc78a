"""Stable digests used as cache keys.

A generation request is reduced to a JSON-compatible payload and hashed with
:func:`calculate_payload_hash`, so equal requests always land on the same
result-cache entry::

    key = calculate_payload_hash({"mode": "concise", "voice": "first-person"})
"""

import hashlib
import json
from typing import Any


SUPPORTED_ALGORITHMS = frozenset({"sha256", "sha512", "blake2b", "sha1", "md5"})


def calculate_bytes_hash(data: bytes, algorithm: str = "sha256") -> str:
    """Hex digest of ``data``.

    >>> calculate_bytes_hash(b"hello")
    '2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824'

    Raises:
        ValueError: ``algorithm`` is not in SUPPORTED_ALGORITHMS.
    """
    if algorithm not in SUPPORTED_ALGORITHMS:
        supported = ", ".join(sorted(SUPPORTED_ALGORITHMS))
        raise ValueError(f"Unsupported hash algorithm {algorithm!r} (choose from {supported})")
    return hashlib.new(algorithm, data).hexdigest()


def calculate_payload_hash(payload: Any, algorithm: str = "sha256") -> str:
    """Hash a JSON-compatible payload independent of key order.

    Raises:
        TypeError: If the payload is not JSON serialisable.
    """
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return calculate_bytes_hash(canonical.encode("utf-8"), algorithm=algorithm)
