"""LLM provider implementations."""

from intellectory.infrastructure.llm.base import BaseLLMProvider, CircuitBreaker
from intellectory.infrastructure.llm.factory import check_llm_health, get_llm_provider
from intellectory.infrastructure.llm.gemini import GeminiProvider, get_gemini_provider
from intellectory.infrastructure.llm.ollama import OllamaProvider, get_ollama_provider

__all__ = [
    "BaseLLMProvider",
    "CircuitBreaker",
    "GeminiProvider",
    "OllamaProvider",
    "get_llm_provider",
    "get_gemini_provider",
    "get_ollama_provider",
    "check_llm_health",
]
