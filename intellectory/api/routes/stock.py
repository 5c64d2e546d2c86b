"""Stock management endpoints."""

from fastapi import APIRouter, Depends, Query, status

from intellectory.api.dependencies import get_add_stock_use_case, get_session, get_stock
from intellectory.application.dto.requests import (
    AddStockRequest,
    EditStockDetailsRequest,
    ResetRequest,
    UpdateStockFieldRequest,
)
from intellectory.application.dto.responses import (
    ActivityLogEntryResponse,
    ErrorResponse,
    StockItemResponse,
    StockStateResponse,
    StockSummaryResponse,
)
from intellectory.application.use_cases import AddStockUseCase
from intellectory.core.entities.team import SessionContext
from intellectory.core.services import StockChange, StockService

router = APIRouter(prefix="/api/stock", tags=["stock"])


async def _reloaded(
    service: StockService, ctx: SessionContext, change: StockChange
) -> StockStateResponse:
    return StockStateResponse.build(
        await service.list_items(ctx),
        changed=change.changed,
        transaction=change.transaction,
        warnings=change.warnings,
    )


@router.get("", response_model=StockStateResponse)
async def list_stock(
    ctx: SessionContext = Depends(get_session),
    service: StockService = Depends(get_stock),
) -> StockStateResponse:
    """All stock items with derived figures and the summary."""
    return StockStateResponse.build(await service.list_items(ctx))


@router.post(
    "",
    response_model=StockStateResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        409: {"model": ErrorResponse, "description": "Price confirmation required"},
    },
)
async def add_stock(
    request: AddStockRequest,
    ctx: SessionContext = Depends(get_session),
    use_case: AddStockUseCase = Depends(get_add_stock_use_case),
) -> StockStateResponse:
    """Add stock by cash or on supplier credit."""
    result = await use_case.execute(ctx, request)
    return use_case.to_response(result)


@router.get("/summary", response_model=StockSummaryResponse)
async def stock_summary(
    ctx: SessionContext = Depends(get_session),
    service: StockService = Depends(get_stock),
) -> StockSummaryResponse:
    return StockSummaryResponse.from_entity(await service.summary(ctx))


@router.get("/low-stock", response_model=list[StockItemResponse])
async def low_stock(
    ctx: SessionContext = Depends(get_session),
    service: StockService = Depends(get_stock),
) -> list[StockItemResponse]:
    """Items whose remaining stock is at or below their alert level."""
    return [StockItemResponse.from_entity(item) for item in await service.low_stock(ctx)]


@router.get("/activity", response_model=list[ActivityLogEntryResponse])
async def activity_log(
    limit: int | None = Query(default=None, ge=1, le=1000),
    ctx: SessionContext = Depends(get_session),
    service: StockService = Depends(get_stock),
) -> list[ActivityLogEntryResponse]:
    """Activity log, newest first."""
    return [
        ActivityLogEntryResponse.from_entity(entry)
        for entry in await service.activity(ctx, limit=limit)
    ]


@router.post("/new-day", response_model=StockStateResponse)
async def new_day(
    ctx: SessionContext = Depends(get_session),
    service: StockService = Depends(get_stock),
) -> StockStateResponse:
    """Move remaining stock to opening stock and zero the day's counters."""
    return await _reloaded(service, ctx, await service.new_day(ctx))


@router.post(
    "/reset",
    response_model=StockStateResponse,
    responses={409: {"model": ErrorResponse}},
)
async def reset_stock(
    request: ResetRequest,
    ctx: SessionContext = Depends(get_session),
    service: StockService = Depends(get_stock),
) -> StockStateResponse:
    """Delete all items, activity, suppliers and credit transactions."""
    await service.reset(ctx, confirmed=request.confirmed)
    return StockStateResponse.build(await service.list_items(ctx))


@router.patch(
    "/{item_id}",
    response_model=StockStateResponse,
    responses={404: {"model": ErrorResponse}},
)
async def update_field(
    item_id: str,
    request: UpdateStockFieldRequest,
    ctx: SessionContext = Depends(get_session),
    service: StockService = Depends(get_stock),
) -> StockStateResponse:
    """Set one numeric field of an item."""
    change = await service.update_field(ctx, item_id, request.field, request.value)
    return await _reloaded(service, ctx, change)


@router.put(
    "/{item_id}",
    response_model=StockStateResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def edit_details(
    item_id: str,
    request: EditStockDetailsRequest,
    ctx: SessionContext = Depends(get_session),
    service: StockService = Depends(get_stock),
) -> StockStateResponse:
    change = await service.edit_details(
        ctx, item_id, request.name, request.category, request.color
    )
    return await _reloaded(service, ctx, change)


@router.delete(
    "/{item_id}",
    response_model=StockStateResponse,
    responses={404: {"model": ErrorResponse}},
)
async def delete_item(
    item_id: str,
    ctx: SessionContext = Depends(get_session),
    service: StockService = Depends(get_stock),
) -> StockStateResponse:
    return await _reloaded(service, ctx, await service.delete_item(ctx, item_id))
