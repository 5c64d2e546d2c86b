"""
Ollama provider for running command interpretation against a local model.

Uses the non-streaming `/api/generate` endpoint; JSON mode maps to
Ollama's `format: "json"`. Health is read from `/api/tags`, which also
tells us whether the configured model has been pulled.
"""

import time
from typing import Any

import httpx

from intellectory.config import get_logger, get_settings
from intellectory.core.exceptions import LLMResponseError, LLMUnavailableError, ModelNotFoundError
from intellectory.core.interfaces import HealthStatus, LLMResponse
from intellectory.infrastructure.llm.base import BaseLLMProvider

logger = get_logger(__name__)

HEALTH_TIMEOUT = 10.0


def _model_installed(model: str, installed: list[str]) -> bool:
    # "llama3" matches "llama3:latest"
    return any(name == model or name.startswith(f"{model}:") or model in name for name in installed)


class OllamaProvider(BaseLLMProvider):
    provider_name = "ollama"

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None):
        super().__init__()
        llm = get_settings().llm
        self.host = llm.ollama_host.rstrip("/")
        self.model = llm.model_name
        self.timeout = llm.timeout
        self.max_tokens = llm.max_tokens
        self.temperature = llm.temperature
        self._transport = transport

    def _unhealthy(self, error: str) -> HealthStatus:
        return HealthStatus(available=False, provider=self.provider_name, model=self.model, error=error)

    async def _call_generate(self, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(
                    f"{self.host}/api/generate", json=payload, timeout=self.timeout
                )
        except httpx.TimeoutException as e:
            raise TimeoutError(str(e)) from e
        except httpx.TransportError as e:
            raise ConnectionError(str(e)) from e

        if response.status_code == 404:
            raise ModelNotFoundError(self.model, self.provider_name)
        if response.status_code >= 500:
            raise ConnectionError(f"HTTP {response.status_code}: {response.text[:200]}")
        if response.status_code != 200:
            raise LLMUnavailableError(
                self.provider_name, f"HTTP {response.status_code}: {response.text[:200]}"
            )
        return response.json()

    async def generate(
        self,
        prompt: str,
        system_prompt: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        json_mode: bool = False,
    ) -> LLMResponse:
        options = {
            "temperature": self.temperature if temperature is None else temperature,
            "num_predict": max_tokens or self.max_tokens,
        }
        payload: dict[str, Any] = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "options": options,
        }
        if system_prompt:
            payload["system"] = system_prompt
        if json_mode:
            payload["format"] = "json"

        async def attempt() -> LLMResponse:
            started = time.perf_counter()
            body = await self._call_generate(payload)
            text = body.get("response", "")
            if not text.strip():
                raise LLMResponseError(
                    f"Model returned no text (done_reason={body.get('done_reason')})", text
                )

            logger.info(
                "ollama_generate",
                model=self.model,
                prompt_len=len(prompt),
                response_len=len(text),
                elapsed_ms=int((time.perf_counter() - started) * 1000),
            )
            return LLMResponse(
                text=text,
                model=self.model,
                done=body.get("done", True),
                done_reason=body.get("done_reason"),
                prompt_tokens=body.get("prompt_eval_count", 0),
                completion_tokens=body.get("eval_count", 0),
            )

        return await self._with_resilience(attempt)

    async def check_health(self) -> HealthStatus:
        started = time.perf_counter()
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.get(f"{self.host}/api/tags", timeout=HEALTH_TIMEOUT)
        except httpx.ConnectError:
            return self._unhealthy(f"Cannot connect to Ollama at {self.host}; is `ollama serve` running?")
        except httpx.HTTPError as e:
            return self._unhealthy(str(e))

        if response.status_code != 200:
            return self._unhealthy(f"HTTP {response.status_code}")

        installed = [m.get("name", "") for m in response.json().get("models", [])]
        if not _model_installed(self.model, installed):
            return self._unhealthy(
                f"Model '{self.model}' is not installed. Run: ollama pull {self.model}"
            )

        return HealthStatus(
            available=True,
            provider=self.provider_name,
            model=self.model,
            response_time_ms=(time.perf_counter() - started) * 1000,
        )


_ollama_provider: OllamaProvider | None = None


def get_ollama_provider() -> OllamaProvider:
    """Get or create the Ollama provider singleton."""
    global _ollama_provider
    if _ollama_provider is None:
        _ollama_provider = OllamaProvider()
    return _ollama_provider
