"""Supplier and credit transaction endpoints."""

from fastapi import APIRouter, Depends

from intellectory.api.dependencies import get_session, get_stock
from intellectory.application.dto.responses import CreditTransactionResponse, SupplierResponse
from intellectory.core.entities.team import SessionContext
from intellectory.core.services import StockService

router = APIRouter(prefix="/api/suppliers", tags=["suppliers"])


@router.get("", response_model=list[SupplierResponse])
async def list_suppliers(
    ctx: SessionContext = Depends(get_session),
    service: StockService = Depends(get_stock),
) -> list[SupplierResponse]:
    """Suppliers with their outstanding credit balance."""
    return [SupplierResponse.from_entity(s) for s in await service.suppliers(ctx)]


@router.get("/transactions", response_model=list[CreditTransactionResponse])
async def list_transactions(
    ctx: SessionContext = Depends(get_session),
    service: StockService = Depends(get_stock),
) -> list[CreditTransactionResponse]:
    return [CreditTransactionResponse.from_entity(t) for t in await service.transactions(ctx)]
