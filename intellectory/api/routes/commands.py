"""Free-text command endpoints."""

from fastapi import APIRouter, Depends

from intellectory.api.dependencies import (
    get_bin_command_use_case,
    get_session,
    get_stock_command_use_case,
)
from intellectory.application.dto.requests import CommandRequest
from intellectory.application.dto.responses import CommandResponse, ErrorResponse
from intellectory.application.use_cases import (
    InterpretBinCommandUseCase,
    InterpretStockCommandUseCase,
)
from intellectory.core.entities.team import SessionContext

router = APIRouter(prefix="/api/commands", tags=["commands"])


@router.post(
    "/stock",
    response_model=CommandResponse,
    responses={
        502: {"model": ErrorResponse, "description": "Model reply was not understood"},
        503: {"model": ErrorResponse, "description": "LLM unavailable"},
    },
)
async def stock_command(
    request: CommandRequest,
    ctx: SessionContext = Depends(get_session),
    use_case: InterpretStockCommandUseCase = Depends(get_stock_command_use_case),
) -> CommandResponse:
    """
    Interpret a stock command.

    Report phrases ("last 7 days", "from 2024-01-01 to 2024-01-31") are
    answered without the LLM. Supplier and price confirmations come back
    as outcomes carrying the pending request.
    """
    result = await use_case.execute(ctx, request)
    return use_case.to_response(result)


@router.post("/bins", response_model=CommandResponse)
async def bin_command(
    request: CommandRequest,
    ctx: SessionContext = Depends(get_session),
    use_case: InterpretBinCommandUseCase = Depends(get_bin_command_use_case),
) -> CommandResponse:
    """Interpret `send|receive|return <qty> <bin> to|from <party>`."""
    result = await use_case.execute(ctx, request)
    return use_case.to_response(result)
