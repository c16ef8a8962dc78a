"""Protocol abstractions for futureresume.

Protocols use `typing.Protocol` for structural subtyping with
`@runtime_checkable` for isinstance() support.

Protocols:
    KeyValueStoreProtocol: Interface for the Cache's persistent tier.
    RemoteGeneratorProtocol: Interface for remote document generators.
"""

from __future__ import annotations

from futureresume.protocols.storage import KeyValueStoreProtocol
from futureresume.protocols.generator import RemoteGeneratorProtocol

__all__ = [
    "KeyValueStoreProtocol",
    "RemoteGeneratorProtocol",
]
