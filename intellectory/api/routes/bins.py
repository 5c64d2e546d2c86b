"""Bin ledger endpoints.

Every write answers with the reloaded snapshot and any non-fatal
warnings, such as a history entry that could not be written.
"""

from datetime import date

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from intellectory.api.dependencies import (
    get_bin_ledger,
    get_debouncer,
    get_record_movement_use_case,
    get_session,
)
from intellectory.application.dto.requests import (
    AddBinTypeRequest,
    AddCustomTypeRequest,
    AddPartyRequest,
    DirectEditRequest,
    NotesRequest,
    OurBinsRequest,
    RecordMovementRequest,
    ResetRequest,
    RolloverRequest,
    StatusCountRequest,
    UpdateColorRequest,
)
from intellectory.application.dto.responses import (
    BinSnapshotResponse,
    ErrorResponse,
    NotesScheduledResponse,
)
from intellectory.application.use_cases import RecordBinMovementUseCase
from intellectory.config import get_settings
from intellectory.core.entities.team import SessionContext
from intellectory.core.services import BinLedgerService, LedgerResult, NotesDebouncer

router = APIRouter(prefix="/api/bins", tags=["bins"])

_CONFIRM = {409: {"model": ErrorResponse, "description": "Confirmation required"}}
_NOT_FOUND = {404: {"model": ErrorResponse}}


def _response(result: LedgerResult) -> BinSnapshotResponse:
    return BinSnapshotResponse.from_snapshot(result.snapshot, result.warnings)


@router.get("", response_model=BinSnapshotResponse)
async def get_snapshot(
    totals_date: date | None = Query(default=None, description="Day of the daily totals"),
    q: str | None = Query(default=None, description="Only parties whose name contains this"),
    ctx: SessionContext = Depends(get_session),
    ledger: BinLedgerService = Depends(get_bin_ledger),
) -> BinSnapshotResponse:
    """Full bin ledger: types, statuses, partitioned balances, history, notes."""
    snapshot = await ledger.snapshot(ctx, totals_date=totals_date)
    return BinSnapshotResponse.from_snapshot(snapshot.matching_parties(q))


@router.post(
    "/movements",
    response_model=BinSnapshotResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, **_NOT_FOUND},
)
async def record_movement(
    request: RecordMovementRequest,
    ctx: SessionContext = Depends(get_session),
    use_case: RecordBinMovementUseCase = Depends(get_record_movement_use_case),
) -> BinSnapshotResponse:
    """Record bins sent to, received from or returned by a party."""
    result = await use_case.execute(ctx, request)
    return use_case.to_response(result)


@router.put("/balances", response_model=BinSnapshotResponse, responses={**_CONFIRM, **_NOT_FOUND})
async def edit_balance(
    request: DirectEditRequest,
    ctx: SessionContext = Depends(get_session),
    ledger: BinLedgerService = Depends(get_bin_ledger),
) -> BinSnapshotResponse:
    """Overwrite a displayed balance; needs `confirmed` after the 409 prompt."""
    result = await ledger.direct_edit(
        ctx,
        request.party_id,
        request.bin_type_id,
        request.new_value,
        confirmed=request.confirmed,
        partition=request.partition,
    )
    return _response(result)


@router.put(
    "/statuses",
    response_model=BinSnapshotResponse,
    responses={400: {"model": ErrorResponse}},
)
async def update_status(
    request: StatusCountRequest,
    ctx: SessionContext = Depends(get_session),
    ledger: BinLedgerService = Depends(get_bin_ledger),
) -> BinSnapshotResponse:
    """Set a full/inFridge/broken/dump count. The total row is derived."""
    result = await ledger.update_status_count(
        ctx, request.status, request.bin_type_id, request.quantity
    )
    return _response(result)


# Parties


@router.post("/parties", response_model=BinSnapshotResponse, status_code=status.HTTP_201_CREATED)
async def add_party(
    request: AddPartyRequest,
    ctx: SessionContext = Depends(get_session),
    ledger: BinLedgerService = Depends(get_bin_ledger),
) -> BinSnapshotResponse:
    return _response(await ledger.add_party(ctx, request.name))


@router.delete(
    "/parties/{party_id}",
    response_model=BinSnapshotResponse,
    responses={**_CONFIRM, **_NOT_FOUND},
)
async def remove_party(
    party_id: str,
    confirmed: bool = Query(default=False),
    ctx: SessionContext = Depends(get_session),
    ledger: BinLedgerService = Depends(get_bin_ledger),
) -> BinSnapshotResponse:
    """Remove a party and all its balances."""
    return _response(await ledger.remove_party(ctx, party_id, confirmed=confirmed))


# Bin types


@router.post("/types", response_model=BinSnapshotResponse, status_code=status.HTTP_201_CREATED)
async def add_bin_type(
    request: AddBinTypeRequest,
    ctx: SessionContext = Depends(get_session),
    ledger: BinLedgerService = Depends(get_bin_ledger),
) -> BinSnapshotResponse:
    result = await ledger.add_bin_type(
        ctx, request.name, request.color, request.category, request.sub_category
    )
    return _response(result)


@router.delete("/types/{bin_type_id}", response_model=BinSnapshotResponse, responses=_NOT_FOUND)
async def remove_bin_type(
    bin_type_id: str,
    ctx: SessionContext = Depends(get_session),
    ledger: BinLedgerService = Depends(get_bin_ledger),
) -> BinSnapshotResponse:
    """Remove a bin type. Outstanding balances are recorded in the history."""
    return _response(await ledger.remove_bin_type(ctx, bin_type_id))


@router.patch(
    "/types/{bin_type_id}/color",
    response_model=BinSnapshotResponse,
    responses=_NOT_FOUND,
)
async def update_color(
    bin_type_id: str,
    request: UpdateColorRequest,
    ctx: SessionContext = Depends(get_session),
    ledger: BinLedgerService = Depends(get_bin_ledger),
) -> BinSnapshotResponse:
    return _response(await ledger.update_color(ctx, bin_type_id, request.color))


@router.post(
    "/custom-types",
    response_model=BinSnapshotResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_custom_type(
    request: AddCustomTypeRequest,
    ctx: SessionContext = Depends(get_session),
    ledger: BinLedgerService = Depends(get_bin_ledger),
) -> BinSnapshotResponse:
    """Add a leaf type counted under Mixed Wood or Mixed Plastic."""
    result = await ledger.add_custom_type(ctx, request.name, request.sub_category, request.color)
    return _response(result)


@router.delete(
    "/custom-types/{bin_type_id}",
    response_model=BinSnapshotResponse,
    responses=_NOT_FOUND,
)
async def remove_custom_type(
    bin_type_id: str,
    ctx: SessionContext = Depends(get_session),
    ledger: BinLedgerService = Depends(get_bin_ledger),
) -> BinSnapshotResponse:
    return _response(await ledger.remove_bin_type(ctx, bin_type_id))


# Owned bins, notes, rollover, reset


@router.put("/our-bins", response_model=BinSnapshotResponse, responses=_NOT_FOUND)
async def set_our_bins(
    request: OurBinsRequest,
    ctx: SessionContext = Depends(get_session),
    ledger: BinLedgerService = Depends(get_bin_ledger),
) -> BinSnapshotResponse:
    return _response(await ledger.set_our_bins(ctx, request.bin_type_id, request.quantity))


@router.put(
    "/notes",
    response_model=BinSnapshotResponse | NotesScheduledResponse,
    responses={202: {"model": NotesScheduledResponse}},
)
async def update_notes(
    request: NotesRequest,
    ctx: SessionContext = Depends(get_session),
    ledger: BinLedgerService = Depends(get_bin_ledger),
    debouncer: NotesDebouncer = Depends(get_debouncer),
) -> BinSnapshotResponse | JSONResponse:
    """
    Save the notes text.

    By default the write is coalesced with edits that follow within the
    debounce delay (202). `immediate` writes now and returns the snapshot.
    """
    if request.immediate:
        # A pending debounced write would overwrite this one later
        await debouncer.flush(ctx.team_id)
        return _response(await ledger.update_notes(ctx, request.text))

    debouncer.submit(ctx, request.text)
    scheduled = NotesScheduledResponse(delay_seconds=get_settings().bins.notes_debounce_seconds)
    return JSONResponse(status_code=status.HTTP_202_ACCEPTED, content=scheduled.model_dump())


@router.post("/rollover", response_model=BinSnapshotResponse)
async def rollover(
    request: RolloverRequest,
    ctx: SessionContext = Depends(get_session),
    ledger: BinLedgerService = Depends(get_bin_ledger),
) -> BinSnapshotResponse:
    """Store the previous day's closing totals as `new_date`'s opening totals."""
    return _response(await ledger.rollover(ctx, request.new_date))


@router.post("/reset", response_model=BinSnapshotResponse, responses=_CONFIRM)
async def reset_bins(
    request: ResetRequest,
    ctx: SessionContext = Depends(get_session),
    ledger: BinLedgerService = Depends(get_bin_ledger),
) -> BinSnapshotResponse:
    """Delete parties, balances, statuses, history and totals. Bin types are kept."""
    return _response(await ledger.reset(ctx, confirmed=request.confirmed))
