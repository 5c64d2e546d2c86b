"""
LLM provider factory.

Creates the provider named by `LLM_PROVIDER`.
"""

from typing import Any

from intellectory.config import get_logger, get_settings
from intellectory.core.exceptions import LLMError
from intellectory.core.interfaces import ILLMProvider

logger = get_logger(__name__)


def get_llm_provider(provider_type: str | None = None) -> ILLMProvider:
    """
    Get an LLM provider instance.

    Args:
        provider_type: "gemini" or "ollama" (default from settings)
    """
    provider_type = provider_type or get_settings().llm.provider

    if provider_type == "gemini":
        from intellectory.infrastructure.llm.gemini import get_gemini_provider

        return get_gemini_provider()

    elif provider_type == "ollama":
        from intellectory.infrastructure.llm.ollama import get_ollama_provider

        return get_ollama_provider()

    else:
        raise ValueError(f"Unknown LLM provider: {provider_type}")


async def check_llm_health() -> dict[str, Any]:
    """Health of the configured provider, keyed "primary"."""
    settings = get_settings()
    try:
        health = await get_llm_provider().check_health()
        return {"primary": health.__dict__}
    except (LLMError, ValueError) as e:
        return {
            "primary": {
                "available": False,
                "provider": settings.llm.provider,
                "error": str(e),
            }
        }
