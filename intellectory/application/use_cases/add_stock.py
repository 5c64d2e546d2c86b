"""Add Stock Use Case: cash or credit purchase with price confirmation."""

from dataclasses import dataclass

from intellectory.application.dto.requests import AddStockRequest
from intellectory.application.dto.responses import StockStateResponse
from intellectory.core.entities.stock import StockItem
from intellectory.core.entities.team import SessionContext
from intellectory.core.services import StockChange, StockService


@dataclass
class AddStockResult:
    """Result of adding stock."""

    change: StockChange
    items: list[StockItem]


class AddStockUseCase:
    """
    Add quantity to a stock item, creating it when needed.

    Raises ConfirmationRequiredError (409) when the item exists at a
    different price and no `price_decision` was given; the pending request
    is echoed in the error details for resubmission.
    """

    def __init__(self, stock_service: StockService | None = None):
        self._stock_service = stock_service

    def _get_stock_service(self) -> StockService:
        if self._stock_service is None:
            from intellectory.application.services import get_stock_service

            self._stock_service = get_stock_service()
        return self._stock_service

    async def execute(self, ctx: SessionContext, request: AddStockRequest) -> AddStockResult:
        service = self._get_stock_service()

        change = await service.add_stock(
            ctx,
            request.name,
            request.quantity,
            request.price,
            supplier=request.supplier,
            alert_level=request.alert_level,
            color=request.color,
            category=request.category,
            price_decision=request.price_decision,
        )

        # Reload so the response reflects the stored state
        items = await service.list_items(ctx)
        return AddStockResult(change=change, items=items)

    def to_response(self, result: AddStockResult) -> StockStateResponse:
        return StockStateResponse.build(
            result.items,
            changed=result.change.changed,
            transaction=result.change.transaction,
            warnings=result.change.warnings,
        )
