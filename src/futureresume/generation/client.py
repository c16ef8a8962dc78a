"""HTTP client for the hosted resume generation function.

Maps transport and HTTP failures onto the exception hierarchy so the retry
executor and the orchestrator can classify them by type:

    missing URL / API key   -> ServiceNotConfiguredError
    timeout                 -> GenerationTimeoutError
    connect / network error -> TransientError
    5xx                     -> TransientError (status kept)
    401 / 403               -> AuthenticationError
    400 / 422               -> ValidationError
    {"success": false, ...} -> classified from its error message
    non-JSON / no resume    -> ContractViolationError
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx
import structlog

from futureresume.core.exceptions import (
    AuthenticationError,
    ContractViolationError,
    GenerationError,
    GenerationTimeoutError,
    ServiceNotConfiguredError,
    TransientError,
    ValidationError,
)
from futureresume.generation.models import GenerationRequest, GenerationResult

log = structlog.get_logger()

SERVICE_NAME = "generate-resume"

# Reported inside a 5xx body but not worth retrying
_PERMANENT_MESSAGE_ERRORS = (ServiceNotConfiguredError, AuthenticationError, ValidationError)


class HostedGenerationClient:
    """Calls the hosted generation function over HTTPS.

    Args:
        url: Function endpoint. Empty means not configured.
        api_key: Bearer credential. Empty means not configured.
        timeout: Request timeout in seconds.
        client: Shared AsyncClient; one is created per call when omitted.
    """

    DEFAULT_TIMEOUT = 120.0

    def __init__(
        self,
        url: Optional[str],
        api_key: Optional[str],
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._url = url or ""
        self._api_key = api_key or ""
        self._timeout = timeout
        self._client = client

    @property
    def is_configured(self) -> bool:
        return bool(self._url and self._api_key)

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        """POST the request payload and parse the result.

        Raises:
            GenerationError: Subclass matching the failure (see module doc).
        """
        if not self.is_configured:
            raise ServiceNotConfiguredError(
                "Generation service not configured: function URL or API key missing.",
                service=SERVICE_NAME,
            )

        try:
            if self._client is not None:
                response = await self._post(self._client, request)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await self._post(client, request)
        except httpx.TimeoutException:
            raise GenerationTimeoutError(timeout_seconds=self._timeout, service=SERVICE_NAME)
        except (httpx.ConnectError, httpx.NetworkError) as e:
            raise TransientError(f"Network error calling generator: {e}", service=SERVICE_NAME)
        except httpx.TransportError as e:
            raise TransientError(f"Transport error calling generator: {e}", service=SERVICE_NAME)

        self._handle_response_error(response)
        body = self._parse_json(response)
        if body.get("success") is False:
            raise classify_error_message(str(body.get("error") or "Resume generation failed"))

        return GenerationResult.from_dict(body, service=SERVICE_NAME)

    async def _post(self, client: httpx.AsyncClient, request: GenerationRequest) -> httpx.Response:
        return await client.post(
            self._url,
            json=request.to_payload(),
            headers=self._get_headers(),
            timeout=self._timeout,
        )

    def _get_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "apikey": self._api_key,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _handle_response_error(self, response: httpx.Response) -> None:
        if response.is_success:
            return

        message = _error_message(response)

        if response.status_code >= 500:
            # The function reports its own failures as 500 with a message
            classified = classify_error_message(message)
            if isinstance(classified, _PERMANENT_MESSAGE_ERRORS):
                raise classified
            raise TransientError(
                f"Server error {response.status_code}: {message}",
                service=SERVICE_NAME,
                status_code=response.status_code,
            )

        if response.status_code in (401, 403):
            log.error("generation_auth_error", status=response.status_code)
            raise AuthenticationError(f"Unauthorized: {message}", service=SERVICE_NAME)

        if response.status_code in (400, 422):
            raise ValidationError([message], service=SERVICE_NAME)

        raise GenerationError(
            f"Generation request failed ({response.status_code}): {message}",
            service=SERVICE_NAME,
        )

    def _parse_json(self, response: httpx.Response) -> Dict[str, Any]:
        try:
            body = response.json()
        except ValueError:
            raise ContractViolationError("response body is not JSON", service=SERVICE_NAME)
        if not isinstance(body, dict):
            raise ContractViolationError("response body is not a JSON object", service=SERVICE_NAME)
        return body


def classify_error_message(message: str) -> GenerationError:
    """Turn an error message reported by the function into a typed error."""
    lowered = message.lower()
    if "not configured" in lowered or "api key" in lowered:
        return ServiceNotConfiguredError(message, service=SERVICE_NAME)
    if any(m in lowered for m in ("timeout", "timed out", "network", "fetch", "connection", "502", "503", "504")):
        return TransientError(message, service=SERVICE_NAME)
    if "unauthorized" in lowered:
        return AuthenticationError(message, service=SERVICE_NAME)
    if "required" in lowered or "invalid" in lowered:
        return ValidationError([message], service=SERVICE_NAME)
    return GenerationError(message, service=SERVICE_NAME)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict):
            return str(error.get("message") or response.text)
        if error:
            return str(error)
    return response.text or response.reason_phrase
