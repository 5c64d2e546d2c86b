"""Tests for GeminiProvider using httpx.MockTransport."""

import json

import httpx
import pytest

from intellectory.config import reset_settings
from intellectory.core.exceptions import (
    CircuitBreakerOpenError,
    LLMUnavailableError,
    ModelNotFoundError,
)
from intellectory.infrastructure.llm.gemini import GeminiProvider


@pytest.fixture(autouse=True)
def llm_env(monkeypatch):
    monkeypatch.setenv("LLM_API_KEY", "test-key")
    monkeypatch.setenv("LLM_MODEL_NAME", "gemini-test")
    monkeypatch.setenv("LLM_MAX_RETRIES", "2")
    monkeypatch.setenv("LLM_RETRY_DELAY", "0.001")
    monkeypatch.setenv("LLM_FAILURE_THRESHOLD", "2")
    reset_settings()
    yield
    reset_settings()


def _reply(text: str) -> dict:
    return {
        "candidates": [{"content": {"parts": [{"text": text}]}, "finishReason": "STOP"}],
        "usageMetadata": {"promptTokenCount": 12, "candidatesTokenCount": 5, "totalTokenCount": 17},
    }


class TestGenerate:
    """Tests for GeminiProvider.generate."""

    async def test_payload_and_response(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["request"] = request
            return httpx.Response(200, json=_reply('{"action": "UNKNOWN"}'))

        provider = GeminiProvider(transport=httpx.MockTransport(handler))
        response = await provider.generate(
            "add boxes", system_prompt="be strict", temperature=0.2, json_mode=True
        )

        request = seen["request"]
        assert request.url.path == "/v1beta/models/gemini-test:generateContent"
        assert request.url.params["key"] == "test-key"
        body = json.loads(request.content)
        assert body["contents"][0]["parts"][0]["text"] == "add boxes"
        assert body["systemInstruction"]["parts"][0]["text"] == "be strict"
        assert body["generationConfig"]["temperature"] == 0.2
        assert body["generationConfig"]["responseMimeType"] == "application/json"

        assert response.text == '{"action": "UNKNOWN"}'
        assert response.done_reason == "STOP"
        assert response.total_tokens == 17

    async def test_missing_api_key(self, monkeypatch):
        monkeypatch.delenv("LLM_API_KEY")
        reset_settings()
        provider = GeminiProvider(transport=httpx.MockTransport(lambda r: httpx.Response(200)))

        with pytest.raises(LLMUnavailableError, match="LLM_API_KEY"):
            await provider.generate("hello")

    async def test_unknown_model(self):
        provider = GeminiProvider(transport=httpx.MockTransport(lambda r: httpx.Response(404)))

        with pytest.raises(ModelNotFoundError):
            await provider.generate("hello")

    async def test_server_errors_are_retried(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            if len(calls) == 1:
                return httpx.Response(503, text="overloaded")
            return httpx.Response(200, json=_reply("ok"))

        provider = GeminiProvider(transport=httpx.MockTransport(handler))
        response = await provider.generate("hello")

        assert response.text == "ok"
        assert len(calls) == 2

    async def test_breaker_opens_after_repeated_failures(self):
        provider = GeminiProvider(
            transport=httpx.MockTransport(lambda r: httpx.Response(503, text="down"))
        )

        for _ in range(2):
            with pytest.raises(LLMUnavailableError):
                await provider.generate("hello")

        assert provider.circuit_breaker.is_open
        with pytest.raises(CircuitBreakerOpenError):
            await provider.generate("hello")


class TestHealth:
    async def test_healthy(self):
        provider = GeminiProvider(transport=httpx.MockTransport(lambda r: httpx.Response(200, json={})))

        status = await provider.check_health()

        assert status.available is True
        assert status.model == "gemini-test"

    async def test_unreachable(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        status = await GeminiProvider(transport=httpx.MockTransport(handler)).check_health()

        assert status.available is False
        assert "Cannot reach" in status.error
