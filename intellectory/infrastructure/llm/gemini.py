"""
Gemini LLM provider over the Generative Language REST API.

Calls `{host}/v1beta/models/{model}:generateContent` with httpx. JSON mode
sets `responseMimeType` to `application/json`.
"""

import time
from typing import Any

import httpx

from intellectory.config import get_logger, get_settings
from intellectory.core.exceptions import LLMUnavailableError, ModelNotFoundError
from intellectory.core.interfaces import HealthStatus, LLMResponse
from intellectory.infrastructure.llm.base import BaseLLMProvider

logger = get_logger(__name__)

# Worth retrying: rate limited or server side
_RETRYABLE_STATUS = {429, 500, 502, 503, 504}


class GeminiProvider(BaseLLMProvider):
    """Gemini generateContent provider."""

    provider_name = "gemini"

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None):
        super().__init__()
        settings = get_settings()
        self.host = settings.llm.host.rstrip("/")
        self.model = settings.llm.model_name
        self.api_key = settings.llm.api_key
        self.timeout = settings.llm.timeout
        self.max_tokens = settings.llm.max_tokens
        self.temperature = settings.llm.temperature
        self._transport = transport

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=timeout, transport=self._transport)

    async def _post(self, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.host}/v1beta/models/{self.model}:generateContent"
        try:
            async with self._client(self.timeout + 5) as client:
                response = await client.post(
                    url, params={"key": self.api_key}, json=payload, timeout=self.timeout
                )
        except httpx.TimeoutException as e:
            raise TimeoutError(str(e)) from e
        except httpx.TransportError as e:
            raise ConnectionError(str(e)) from e

        if response.status_code == 404:
            raise ModelNotFoundError(self.model, "gemini")
        if response.status_code in _RETRYABLE_STATUS:
            raise ConnectionError(f"HTTP {response.status_code}: {response.text[:200]}")
        if response.status_code != 200:
            raise LLMUnavailableError("gemini", f"HTTP {response.status_code}: {response.text[:200]}")

        return response.json()

    async def generate(
        self,
        prompt: str,
        system_prompt: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        json_mode: bool = False,
    ) -> LLMResponse:
        if not self.api_key:
            raise LLMUnavailableError("gemini", "LLM_API_KEY is not set")

        generation_config: dict[str, Any] = {
            "temperature": temperature if temperature is not None else self.temperature,
            "maxOutputTokens": max_tokens or self.max_tokens,
        }
        if json_mode:
            generation_config["responseMimeType"] = "application/json"

        payload: dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": generation_config,
        }
        if system_prompt:
            payload["systemInstruction"] = {"parts": [{"text": system_prompt}]}

        async def _do_generate() -> LLMResponse:
            start_time = time.time()
            result = await self._post(payload)
            elapsed = time.time() - start_time

            candidates = result.get("candidates") or [{}]
            candidate = candidates[0]
            parts = candidate.get("content", {}).get("parts", [])
            text = "".join(part.get("text", "") for part in parts)
            usage = result.get("usageMetadata", {})

            logger.info(
                "gemini_generate",
                model=self.model,
                prompt_len=len(prompt),
                response_len=len(text),
                finish_reason=candidate.get("finishReason"),
                elapsed_ms=int(elapsed * 1000),
            )

            return LLMResponse(
                text=text,
                model=self.model,
                done_reason=candidate.get("finishReason"),
                prompt_tokens=usage.get("promptTokenCount", 0),
                completion_tokens=usage.get("candidatesTokenCount", 0),
                total_tokens=usage.get("totalTokenCount", 0),
            )

        return await self._with_resilience(_do_generate)

    async def check_health(self) -> HealthStatus:
        if not self.api_key:
            return HealthStatus(
                available=False,
                provider="gemini",
                model=self.model,
                error="LLM_API_KEY is not set",
            )

        start_time = time.time()
        try:
            async with self._client(10) as client:
                response = await client.get(
                    f"{self.host}/v1beta/models/{self.model}", params={"key": self.api_key}
                )
        except httpx.HTTPError as e:
            return HealthStatus(
                available=False,
                provider="gemini",
                model=self.model,
                error=f"Cannot reach {self.host}: {e}",
            )

        if response.status_code != 200:
            return HealthStatus(
                available=False,
                provider="gemini",
                model=self.model,
                error=f"HTTP {response.status_code}",
            )
        return HealthStatus(
            available=True,
            provider="gemini",
            model=self.model,
            response_time_ms=(time.time() - start_time) * 1000,
        )


_gemini_provider: GeminiProvider | None = None


def get_gemini_provider() -> GeminiProvider:
    """Get or create the Gemini provider singleton."""
    global _gemini_provider
    if _gemini_provider is None:
        _gemini_provider = GeminiProvider()
    return _gemini_provider
