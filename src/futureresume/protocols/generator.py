"""Remote generator protocol.

The orchestrator's only external dependency: an async operation that turns a
GenerationRequest into a GenerationResult or raises.

Usage:
    from futureresume.protocols import RemoteGeneratorProtocol

    client = HostedGenerationClient(url, api_key)
    assert isinstance(client, RemoteGeneratorProtocol)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from futureresume.generation.models import GenerationRequest, GenerationResult


@runtime_checkable
class RemoteGeneratorProtocol(Protocol):
    """Protocol for remote document generators.

    Implementations resolve with a result whose primary document is
    non-empty, or raise. Raised errors are classified by type first and by
    message (network / timeout / 5xx / "not configured" / "API key") second.
    """

    async def generate(self, request: "GenerationRequest") -> "GenerationResult":
        """Run the full multi-phase generation for request.

        Raises:
            TransientError: Network, timeout or 5xx failures.
            ServiceNotConfiguredError: Service URL or credentials missing.
            ContractViolationError: Malformed response.
        """
        ...
