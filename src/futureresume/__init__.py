"""
futureresume - Resilient resume generation pipeline

Circuit breaking, retry with backoff, a priority background task queue and a
TTL cache around a slow, unreliable remote document generator, with a local
fallback when the remote service is unavailable.
"""

from futureresume.protocols import (
    KeyValueStoreProtocol,
    RemoteGeneratorProtocol,
)

__version__ = "1.0.0"

__all__ = [
    "KeyValueStoreProtocol",
    "RemoteGeneratorProtocol",
]
