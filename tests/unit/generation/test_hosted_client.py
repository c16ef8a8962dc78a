"""Unit tests for the hosted generation HTTP client."""

import json

import httpx
import pytest
import respx
from httpx import ConnectError, ReadTimeout, Response

from futureresume.core.exceptions import (
    AuthenticationError,
    ContractViolationError,
    GenerationError,
    GenerationTimeoutError,
    ServiceNotConfiguredError,
    TransientError,
    ValidationError,
)
from futureresume.generation import HostedGenerationClient
from futureresume.generation.client import SERVICE_NAME, classify_error_message

FUNCTION_URL = "https://functions.example.com/generate-resume"


@pytest.fixture
def client():
    return HostedGenerationClient(url=FUNCTION_URL, api_key="test-key", timeout=5.0)


@pytest.fixture
def success_body(sample_result):
    return {"success": True, **sample_result.to_dict()}


class TestConfiguration:
    @pytest.mark.parametrize("url, key", [(None, "k"), (FUNCTION_URL, None), ("", "")])
    def test_is_configured(self, url, key):
        assert not HostedGenerationClient(url=url, api_key=key).is_configured

    @pytest.mark.asyncio
    async def test_unconfigured_raises_without_request(self, sample_request):
        with respx.mock(assert_all_called=False) as router:
            route = router.post(FUNCTION_URL)
            with pytest.raises(ServiceNotConfiguredError):
                await HostedGenerationClient(url=None, api_key=None).generate(sample_request)
            assert not route.called


class TestSuccess:
    @pytest.mark.asyncio
    @respx.mock
    async def test_generate_posts_payload(self, client, sample_request, sample_result, success_body):
        route = respx.post(FUNCTION_URL).mock(return_value=Response(200, json=success_body))

        result = await client.generate(sample_request)

        assert result == sample_result
        sent = route.calls.last.request
        assert sent.headers["Authorization"] == "Bearer test-key"
        assert sent.headers["apikey"] == "test-key"
        assert json.loads(sent.content) == sample_request.to_payload()

    @pytest.mark.asyncio
    @respx.mock
    async def test_shared_client_is_used(self, sample_request, success_body):
        respx.post(FUNCTION_URL).mock(return_value=Response(200, json=success_body))
        async with httpx.AsyncClient() as shared:
            client = HostedGenerationClient(url=FUNCTION_URL, api_key="k", client=shared)
            result = await client.generate(sample_request)
        assert result.final_resume


class TestTransportFailures:
    @pytest.mark.asyncio
    @respx.mock
    async def test_timeout(self, client, sample_request):
        respx.post(FUNCTION_URL).mock(side_effect=ReadTimeout("slow"))
        with pytest.raises(GenerationTimeoutError) as exc_info:
            await client.generate(sample_request)
        assert exc_info.value.timeout_seconds == 5.0
        assert exc_info.value.service == SERVICE_NAME

    @pytest.mark.asyncio
    @respx.mock
    async def test_connect_error(self, client, sample_request):
        respx.post(FUNCTION_URL).mock(side_effect=ConnectError("refused"))
        with pytest.raises(TransientError, match="Network error"):
            await client.generate(sample_request)


class TestHttpErrors:
    @pytest.mark.asyncio
    @respx.mock
    async def test_server_error_is_transient(self, client, sample_request):
        respx.post(FUNCTION_URL).mock(return_value=Response(503, text="Service Unavailable"))
        with pytest.raises(TransientError) as exc_info:
            await client.generate(sample_request)
        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    @respx.mock
    async def test_server_error_reporting_missing_key(self, client, sample_request):
        respx.post(FUNCTION_URL).mock(
            return_value=Response(500, json={"success": False, "error": "API key not configured"})
        )
        with pytest.raises(ServiceNotConfiguredError):
            await client.generate(sample_request)

    @pytest.mark.asyncio
    @respx.mock
    async def test_server_error_reporting_validation(self, client, sample_request):
        respx.post(FUNCTION_URL).mock(
            return_value=Response(500, json={"error": "Job description is required"})
        )
        with pytest.raises(ValidationError):
            await client.generate(sample_request)

    @pytest.mark.parametrize("status", [401, 403])
    @pytest.mark.asyncio
    @respx.mock
    async def test_auth_errors(self, client, sample_request, status):
        respx.post(FUNCTION_URL).mock(return_value=Response(status, json={"error": "bad token"}))
        with pytest.raises(AuthenticationError):
            await client.generate(sample_request)

    @pytest.mark.asyncio
    @respx.mock
    async def test_bad_request_is_validation_error(self, client, sample_request):
        respx.post(FUNCTION_URL).mock(
            return_value=Response(400, json={"error": {"message": "mode missing"}})
        )
        with pytest.raises(ValidationError) as exc_info:
            await client.generate(sample_request)
        assert exc_info.value.errors == ["mode missing"]

    @pytest.mark.asyncio
    @respx.mock
    async def test_other_status_is_generation_error(self, client, sample_request):
        respx.post(FUNCTION_URL).mock(return_value=Response(404, text="Not Found"))
        with pytest.raises(GenerationError) as exc_info:
            await client.generate(sample_request)
        assert not isinstance(exc_info.value, TransientError)


class TestBodyErrors:
    @pytest.mark.asyncio
    @respx.mock
    async def test_non_json_body(self, client, sample_request):
        respx.post(FUNCTION_URL).mock(return_value=Response(200, text="<html>oops</html>"))
        with pytest.raises(ContractViolationError, match="not JSON"):
            await client.generate(sample_request)

    @pytest.mark.asyncio
    @respx.mock
    async def test_missing_resume(self, client, sample_request):
        respx.post(FUNCTION_URL).mock(return_value=Response(200, json={"success": True}))
        with pytest.raises(ContractViolationError):
            await client.generate(sample_request)

    @pytest.mark.asyncio
    @respx.mock
    async def test_success_false_is_classified(self, client, sample_request):
        respx.post(FUNCTION_URL).mock(
            return_value=Response(200, json={"success": False, "error": "network hiccup upstream"})
        )
        with pytest.raises(TransientError):
            await client.generate(sample_request)


class TestClassifyErrorMessage:
    @pytest.mark.parametrize(
        "message, error_type",
        [
            ("OpenAI API key not configured", ServiceNotConfiguredError),
            ("Request timed out", TransientError),
            ("Gateway 502", TransientError),
            ("Unauthorized", AuthenticationError),
            ("Resume content is required", ValidationError),
            ("Model refused", GenerationError),
        ],
    )
    def test_classification(self, message, error_type):
        error = classify_error_message(message)
        assert type(error) is error_type
        assert error.service == SERVICE_NAME
