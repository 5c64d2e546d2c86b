"""
Domain exceptions for the Intellectory application.

Provides specific exception types for different error scenarios.
"""

from typing import Any


class IntellectoryError(Exception):
    """Base exception for all Intellectory errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Storage Exceptions
class StorageError(IntellectoryError):
    """Base exception for storage operations."""

    pass


class DatabaseError(StorageError):
    """Table operation failed."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Database error during {operation}: {error}",
            code="DATABASE_ERROR",
            details={"operation": operation, "error": error},
        )


class StoreUnavailableError(StorageError):
    """The backing store is not configured or cannot be reached."""

    def __init__(self, reason: str):
        super().__init__(
            f"Data store unavailable: {reason}",
            code="STORE_UNAVAILABLE",
            details={"reason": reason},
        )


class RecordNotFoundError(StorageError):
    """A referenced row does not exist for the current team."""

    def __init__(self, entity: str, key: str):
        super().__init__(
            f"{entity} not found: {key}",
            code=f"{entity.upper().replace(' ', '_')}_NOT_FOUND",
            details={"entity": entity, "key": key},
        )


class StockItemNotFoundError(RecordNotFoundError):
    """Stock item not found."""

    def __init__(self, key: str):
        super().__init__("Stock item", key)


class BinTypeNotFoundError(RecordNotFoundError):
    """Bin type not found."""

    def __init__(self, key: str):
        super().__init__("Bin type", key)


class PartyNotFoundError(RecordNotFoundError):
    """Bin party not found."""

    def __init__(self, key: str):
        super().__init__("Party", key)


# LLM Exceptions
class LLMError(IntellectoryError):
    """Base exception for LLM operations."""

    pass


class LLMUnavailableError(LLMError):
    """LLM provider is not available."""

    def __init__(self, provider: str, reason: str | None = None):
        super().__init__(
            f"LLM provider unavailable: {provider}" + (f" - {reason}" if reason else ""),
            code="LLM_UNAVAILABLE",
            details={"provider": provider, "reason": reason},
        )


class LLMTimeoutError(LLMError):
    """LLM request timed out."""

    def __init__(self, timeout: int, operation: str = "generation"):
        super().__init__(
            f"LLM {operation} timed out after {timeout} seconds",
            code="LLM_TIMEOUT",
            details={"timeout": timeout, "operation": operation},
        )


class LLMResponseError(LLMError):
    """LLM returned an empty, unparseable or off-contract response."""

    def __init__(self, reason: str, response: str | None = None):
        super().__init__(
            f"Invalid LLM response: {reason}",
            code="LLM_RESPONSE_ERROR",
            details={"reason": reason, "response_preview": (response or "")[:200]},
        )


class ModelNotFoundError(LLMError):
    """Requested model not found."""

    def __init__(self, model: str, provider: str):
        super().__init__(
            f"Model '{model}' not found on {provider}",
            code="MODEL_NOT_FOUND",
            details={"model": model, "provider": provider},
        )


class CircuitBreakerOpenError(LLMError):
    """Circuit breaker is open due to repeated failures."""

    def __init__(self, provider: str, cooldown_remaining: int):
        super().__init__(
            f"Circuit breaker open for {provider}, retry in {cooldown_remaining}s",
            code="CIRCUIT_BREAKER_OPEN",
            details={"provider": provider, "cooldown_remaining": cooldown_remaining},
        )


# Validation Exceptions
class ValidationError(IntellectoryError):
    """Input validation failed."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value is not None else None,
            },
        )


class ConfirmationRequiredError(IntellectoryError):
    """The operation needs an explicit confirmation before it is committed."""

    def __init__(
        self,
        prompt: str,
        reason: str,
        pending: dict[str, Any] | None = None,
        **extra: Any,
    ):
        super().__init__(
            prompt,
            code="CONFIRMATION_REQUIRED",
            details={"reason": reason, "pending": pending or {}, **extra},
        )
        self.reason = reason


# Session Exceptions
class AuthError(IntellectoryError):
    """Base exception for session resolution."""

    pass


class NotAuthenticatedError(AuthError):
    """No usable session for this request."""

    def __init__(self, reason: str = "No signed-in user"):
        super().__init__(reason, code="NOT_AUTHENTICATED", details={"reason": reason})


class TeamRequiredError(AuthError):
    """Signed-in user does not belong to a team yet."""

    def __init__(self, user_id: str):
        super().__init__(
            f"User {user_id} is not a member of any team",
            code="TEAM_REQUIRED",
            details={"user_id": user_id},
        )


class ConfigurationError(IntellectoryError):
    """Configuration error."""

    pass
