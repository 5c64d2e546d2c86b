"""Unit tests for domain exceptions."""

import pytest

from intellectory.core.exceptions import (
    AuthError,
    BinTypeNotFoundError,
    CircuitBreakerOpenError,
    ConfigurationError,
    ConfirmationRequiredError,
    DatabaseError,
    IntellectoryError,
    LLMError,
    LLMResponseError,
    LLMTimeoutError,
    LLMUnavailableError,
    ModelNotFoundError,
    NotAuthenticatedError,
    PartyNotFoundError,
    RecordNotFoundError,
    StockItemNotFoundError,
    StorageError,
    StoreUnavailableError,
    TeamRequiredError,
    ValidationError,
)


class TestIntellectoryError:
    """Tests for base IntellectoryError exception."""

    def test_basic_initialization(self):
        error = IntellectoryError("Something went wrong")
        assert str(error) == "Something went wrong"
        assert error.message == "Something went wrong"
        assert error.code == "IntellectoryError"
        assert error.details == {}

    def test_with_custom_code(self):
        error = IntellectoryError("Error message", code="CUSTOM_ERROR")
        assert error.code == "CUSTOM_ERROR"

    def test_to_dict(self):
        error = IntellectoryError("Test error", code="TEST_CODE", details={"extra": "info"})
        assert error.to_dict() == {
            "error": "TEST_CODE",
            "message": "Test error",
            "details": {"extra": "info"},
        }


class TestStorageErrors:
    """Tests for storage-related exceptions."""

    def test_database_error(self):
        error = DatabaseError(operation="insert stock_items", error="UNIQUE constraint failed")
        assert isinstance(error, StorageError)
        assert error.code == "DATABASE_ERROR"
        assert error.message == (
            "Database error during insert stock_items: UNIQUE constraint failed"
        )
        assert error.details["operation"] == "insert stock_items"

    def test_store_unavailable(self):
        error = StoreUnavailableError("STORAGE_REST_URL is not set")
        assert isinstance(error, StorageError)
        assert error.code == "STORE_UNAVAILABLE"
        assert "STORAGE_REST_URL" in error.message

    @pytest.mark.parametrize(
        ("error", "code"),
        [
            (StockItemNotFoundError("item-9"), "STOCK_ITEM_NOT_FOUND"),
            (BinTypeNotFoundError("chep"), "BIN_TYPE_NOT_FOUND"),
            (PartyNotFoundError("p1"), "PARTY_NOT_FOUND"),
        ],
    )
    def test_not_found_codes(self, error, code):
        assert isinstance(error, RecordNotFoundError)
        assert error.code == code
        assert error.details["key"] in error.message


class TestLLMErrors:
    """Tests for LLM-related exceptions."""

    def test_llm_unavailable_with_reason(self):
        error = LLMUnavailableError(provider="gemini", reason="LLM_API_KEY is not set")
        assert isinstance(error, LLMError)
        assert error.message == "LLM provider unavailable: gemini - LLM_API_KEY is not set"

    def test_llm_unavailable_without_reason(self):
        error = LLMUnavailableError(provider="ollama")
        assert error.message == "LLM provider unavailable: ollama"
        assert error.details["reason"] is None

    def test_llm_timeout(self):
        error = LLMTimeoutError(timeout=60)
        assert error.code == "LLM_TIMEOUT"
        assert error.details["operation"] == "generation"

    def test_response_preview_is_truncated(self):
        error = LLMResponseError(reason="not JSON", response="x" * 500)
        assert error.code == "LLM_RESPONSE_ERROR"
        assert len(error.details["response_preview"]) == 200

    def test_model_not_found(self):
        error = ModelNotFoundError(model="gemini-2.5-flash", provider="gemini")
        assert "gemini-2.5-flash" in error.message
        assert error.details["provider"] == "gemini"

    def test_circuit_breaker_open(self):
        error = CircuitBreakerOpenError(provider="gemini", cooldown_remaining=30)
        assert error.code == "CIRCUIT_BREAKER_OPEN"
        assert "30" in error.message


class TestValidationAndConfirmation:
    def test_validation_error(self):
        error = ValidationError(field="quantity", message="must be positive", value=-2)
        assert error.message == "Validation error for 'quantity': must be positive"
        assert error.details["value"] == "-2"

    def test_validation_error_without_value(self):
        error = ValidationError(field="name", message="is required")
        assert error.details["value"] is None

    def test_confirmation_carries_pending_request(self):
        error = ConfirmationRequiredError(
            "Update the price of Boxes to 3?",
            reason="price_change",
            pending={"name": "Boxes", "price": 3.0},
            current_price=2.5,
        )
        assert error.reason == "price_change"
        assert error.code == "CONFIRMATION_REQUIRED"
        assert error.details == {
            "reason": "price_change",
            "pending": {"name": "Boxes", "price": 3.0},
            "current_price": 2.5,
        }

    def test_confirmation_without_pending(self):
        error = ConfirmationRequiredError("Reset?", reason="reset_bins")
        assert error.details["pending"] == {}


class TestAuthErrors:
    def test_not_authenticated_default(self):
        error = NotAuthenticatedError()
        assert isinstance(error, AuthError)
        assert error.message == "No signed-in user"
        assert error.code == "NOT_AUTHENTICATED"

    def test_team_required(self):
        error = TeamRequiredError("user-1")
        assert error.code == "TEAM_REQUIRED"
        assert error.details["user_id"] == "user-1"

    def test_configuration_error(self):
        error = ConfigurationError("LLM_PROVIDER must be gemini or ollama")
        assert isinstance(error, IntellectoryError)
        assert error.code == "ConfigurationError"
