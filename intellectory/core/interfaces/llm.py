"""Port for the language model that turns a typed command into structured JSON."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class LLMResponse:
    text: str
    model: str
    done: bool = True
    done_reason: str | None = None
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


@dataclass
class HealthStatus:
    """Result of probing a provider; `error` explains an unavailable one."""

    available: bool
    provider: str
    model: str | None = None
    error: str | None = None
    response_time_ms: float | None = None


class ILLMProvider(ABC):
    """A remote or local model that completes one prompt at a time."""

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        system_prompt: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        json_mode: bool = False,
    ) -> LLMResponse:
        """
        Complete `prompt` once.

        `temperature` and `max_tokens` fall back to the configured values.
        With `json_mode` the provider is asked to reply with a JSON object
        only; the caller still validates the reply.
        """

    @abstractmethod
    async def check_health(self) -> HealthStatus: ...
