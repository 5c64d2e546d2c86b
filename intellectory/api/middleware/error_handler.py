"""
Error responses.

Every failure leaves the API as an `ErrorResponse` body: a stable
`error_code`, a message for the person at the counter and a `hint` on
what to do next. Confirmation prompts (409) and validation failures (400)
also carry `details`; for a confirmation these hold the pending change so
the client can resubmit it with the confirmation flag set.
"""

import traceback
from collections.abc import Awaitable, Callable

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from intellectory.application.dto.responses import ErrorResponse
from intellectory.config import get_logger
from intellectory.core.exceptions import (
    ConfigurationError,
    ConfirmationRequiredError,
    IntellectoryError,
    LLMError,
    LLMResponseError,
    NotAuthenticatedError,
    RecordNotFoundError,
    StorageError,
    StoreUnavailableError,
    TeamRequiredError,
    ValidationError,
)

logger = get_logger(__name__)

# Checked in order; subclasses must come before their bases
STATUS_RULES: list[tuple[type[Exception], int]] = [
    (NotAuthenticatedError, status.HTTP_401_UNAUTHORIZED),
    (TeamRequiredError, status.HTTP_403_FORBIDDEN),
    (ConfirmationRequiredError, status.HTTP_409_CONFLICT),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (RecordNotFoundError, status.HTTP_404_NOT_FOUND),
    (StoreUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (StorageError, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (LLMResponseError, status.HTTP_502_BAD_GATEWAY),
    (LLMError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (ConfigurationError, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (ValueError, status.HTTP_400_BAD_REQUEST),
]

CODE_HINTS: dict[str, str] = {
    "NOT_AUTHENTICATED": "Sign in again; the session could not be resolved.",
    "TEAM_REQUIRED": "Create a team with POST /api/teams first.",
    "CONFIRMATION_REQUIRED": "Resubmit the pending request from details with confirmation set.",
    "STOCK_ITEM_NOT_FOUND": "List items with GET /api/stock and check the item ID.",
    "BIN_TYPE_NOT_FOUND": "List bin types with GET /api/bins and check the ID.",
    "PARTY_NOT_FOUND": "List parties with GET /api/bins and check the ID.",
    "STORE_UNAVAILABLE": "No data store is configured. Set STORAGE_REST_URL and STORAGE_REST_KEY.",
    "DATABASE_ERROR": "The data store rejected the operation. Check server logs.",
    "LLM_UNAVAILABLE": "The command assistant is offline. Retry later or use the manual forms.",
    "LLM_TIMEOUT": "The command assistant took too long. Retry with a shorter command.",
    "LLM_RESPONSE_ERROR": "The command was not understood and nothing was changed. Try rephrasing.",
    "CIRCUIT_BREAKER_OPEN": "The command assistant failed repeatedly. Wait a minute before retrying.",
    "MODEL_NOT_FOUND": "Check LLM_MODEL_NAME against the models your provider serves.",
    "VALIDATION_ERROR": "Check the request body against the API schema.",
}

STATUS_HINTS: dict[int, str] = {
    400: "Check the request parameters and body.",
    401: "Sign in and retry.",
    403: "You do not have access to this resource.",
    404: "Nothing was found at this address.",
    405: "This endpoint does not accept that method.",
    409: "The request needs confirmation before it is applied.",
    422: "Check the input format.",
    500: "Something went wrong on our side. Check server logs.",
    502: "An upstream service returned an unusable reply.",
    503: "The service is temporarily unavailable. Retry later.",
}

HTTP_CODES = {400: "BAD_REQUEST", 404: "NOT_FOUND", 405: "METHOD_NOT_ALLOWED"}


def _hint(error_code: str, status_code: int) -> str:
    return CODE_HINTS.get(error_code) or STATUS_HINTS.get(status_code, "")


def _status_for(exc: Exception) -> int:
    return next(
        (code for exc_type, code in STATUS_RULES if isinstance(exc, exc_type)),
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def _error_json(status_code: int, body: ErrorResponse) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def build_error_response(request: Request, exc: Exception) -> JSONResponse:
    """Translate an exception raised while serving `request` into an error body."""
    status_code = _status_for(exc)
    if isinstance(exc, IntellectoryError):
        error_code, message = exc.code, exc.message
    else:
        error_code, message = type(exc).__name__, str(exc)

    log = logger.error if status_code >= 500 else logger.warning
    log(
        "request_error",
        request_id=getattr(request.state, "request_id", None),
        path=request.url.path,
        status=status_code,
        error_code=error_code,
        error=message,
        traceback=traceback.format_exc() if status_code == 500 else None,
    )

    details = exc.details if isinstance(exc, (ConfirmationRequiredError, ValidationError)) else None
    body = ErrorResponse(
        error_code=error_code,
        message=message,
        hint=_hint(error_code, status_code),
        details=details,
        path=request.url.path,
    )
    return _error_json(status_code, body)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Last resort for exceptions no handler claimed."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            return build_error_response(request, e)


async def _domain_error(request: Request, exc: Exception) -> JSONResponse:
    return build_error_response(request, exc)


async def _request_invalid(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, RequestValidationError)
    problems = [
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
    ]
    body = ErrorResponse(
        error_code="VALIDATION_ERROR",
        message="Request validation failed",
        hint="Check the request body fields and types.",
        detail="; ".join(problems),
        path=request.url.path,
    )
    return _error_json(422, body)


async def _http_error(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, HTTPException)
    error_code = HTTP_CODES.get(exc.status_code, "HTTP_ERROR")
    body = ErrorResponse(
        error_code=error_code,
        message=str(exc.detail) if exc.detail else "An error occurred",
        hint=_hint(error_code, exc.status_code),
        path=request.url.path,
    )
    return _error_json(exc.status_code, body)


def setup_exception_handlers(app: FastAPI) -> None:
    """Register the JSON error handlers on `app`."""
    app.add_exception_handler(IntellectoryError, _domain_error)
    app.add_exception_handler(RequestValidationError, _request_invalid)
    app.add_exception_handler(HTTPException, _http_error)
