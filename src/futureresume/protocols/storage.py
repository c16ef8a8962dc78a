"""Persistent key-value store protocol.

This module defines the KeyValueStoreProtocol interface backing the Cache's
persistent tier. Uses `typing.Protocol` for structural subtyping.

The shape mirrors a browser-style local storage: synchronous string
get/set/remove plus index-based key enumeration.

Usage:
    from futureresume.protocols import KeyValueStoreProtocol

    store = JsonFileKeyValueStore(path)
    assert isinstance(store, KeyValueStoreProtocol)
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class KeyValueStoreProtocol(Protocol):
    """Protocol for the Cache's persistent tier.

    Methods:
        get_item: Return the stored string or None.
        set_item: Store a string; may raise (e.g. quota exceeded).
        remove_item: Remove a key; no-op if absent.
        key: Return the key at an index, or None if out of range.

    Attributes:
        length: Number of stored keys.

    Note:
        Implementations do NOT need to inherit from this class. Failures are
        allowed to raise; the Cache treats them as soft failures.
    """

    @property
    def length(self) -> int:
        """Number of stored keys."""
        ...

    def get_item(self, key: str) -> Optional[str]:
        """Return the value stored under key, or None."""
        ...

    def set_item(self, key: str, value: str) -> None:
        """Store value under key, overwriting any existing value."""
        ...

    def remove_item(self, key: str) -> None:
        """Remove key if present."""
        ...

    def key(self, index: int) -> Optional[str]:
        """Return the key at index, or None when out of range."""
        ...
