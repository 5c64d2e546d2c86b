"""Infrastructure layer implementations."""

from intellectory.infrastructure import llm, storage

__all__ = ["storage", "llm"]
