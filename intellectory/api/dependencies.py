"""
Dependency injection container for FastAPI.

Provides service instances and the resolved session to route handlers.
Identity comes from the upstream auth provider as a user id header.
"""

from fastapi import Depends, Request

from intellectory.application.services import (
    get_bin_ledger_service,
    get_notes_debouncer,
    get_report_service,
    get_session_service,
    get_stock_service,
)
from intellectory.application.use_cases import (
    AddStockUseCase,
    GenerateReportUseCase,
    InterpretBinCommandUseCase,
    InterpretStockCommandUseCase,
    RecordBinMovementUseCase,
    SetupTeamUseCase,
)
from intellectory.config import bind_request_context, get_settings
from intellectory.core.entities.team import SessionContext
from intellectory.core.exceptions import NotAuthenticatedError
from intellectory.core.services import (
    BinLedgerService,
    NotesDebouncer,
    SessionService,
    StockService,
)


# Service dependencies
def get_stock() -> StockService:
    """Get stock service."""
    return get_stock_service()


def get_bin_ledger() -> BinLedgerService:
    """Get bin ledger service."""
    return get_bin_ledger_service()


def get_sessions() -> SessionService:
    """Get session service."""
    return get_session_service()


def get_debouncer() -> NotesDebouncer:
    """Get notes debouncer."""
    return get_notes_debouncer()


# Session dependencies
def get_user_id(request: Request) -> str:
    """User id asserted by the upstream auth provider."""
    user_id = request.headers.get(get_settings().auth.user_header, "").strip()
    if not user_id:
        raise NotAuthenticatedError()
    bind_request_context(user_id=user_id)
    return user_id


async def get_session(
    user_id: str = Depends(get_user_id),
    sessions: SessionService = Depends(get_sessions),
) -> SessionContext:
    """Resolve the caller's team; 401 on timeout, 403 without a team."""
    ctx = await sessions.resolve(user_id)
    bind_request_context(team_id=ctx.team_id)
    return ctx


# Use case dependencies
def get_setup_team_use_case() -> SetupTeamUseCase:
    """Get setup team use case."""
    return SetupTeamUseCase(get_session_service())


def get_add_stock_use_case() -> AddStockUseCase:
    """Get add stock use case."""
    return AddStockUseCase(get_stock_service())


def get_record_movement_use_case() -> RecordBinMovementUseCase:
    """Get record bin movement use case."""
    return RecordBinMovementUseCase(get_bin_ledger_service())


def get_stock_command_use_case() -> InterpretStockCommandUseCase:
    """Get stock command use case. The interpreter is built lazily."""
    return InterpretStockCommandUseCase()


def get_bin_command_use_case() -> InterpretBinCommandUseCase:
    """Get bin command use case. The interpreter is built lazily."""
    return InterpretBinCommandUseCase()


def get_report_use_case() -> GenerateReportUseCase:
    """Get report use case."""
    return GenerateReportUseCase(get_report_service())
