"""Tests for AddStockUseCase."""

from unittest.mock import AsyncMock

import pytest

from intellectory.application.dto.requests import AddStockRequest
from intellectory.application.use_cases.add_stock import AddStockUseCase
from intellectory.core.entities.stock import CreditTransaction, StockItem
from intellectory.core.exceptions import ConfirmationRequiredError
from intellectory.core.services.stock_service import PriceDecision, StockChange

TAPE = StockItem(id="item-2", team_id="team-1", name="Tape", added_today=10, price=2.5)


@pytest.fixture
def mock_stock_service():
    service = AsyncMock()
    service.list_items.return_value = [TAPE]
    return service


@pytest.fixture
def use_case(mock_stock_service):
    return AddStockUseCase(stock_service=mock_stock_service)


class TestAddStockUseCase:
    async def test_passes_request_through(self, use_case, mock_stock_service, ctx):
        mock_stock_service.add_stock.return_value = StockChange(item=TAPE)
        request = AddStockRequest(
            name="Tape", quantity=10, price=2.5, price_decision=PriceDecision.UPDATE
        )

        await use_case.execute(ctx, request)

        args = mock_stock_service.add_stock.await_args
        assert args.args == (ctx, "Tape", 10, 2.5)
        assert args.kwargs["supplier"] is None
        assert args.kwargs["price_decision"] is PriceDecision.UPDATE

    async def test_response_is_reloaded_state(self, use_case, mock_stock_service, ctx):
        """Response carries the reloaded list, the transaction and warnings."""
        transaction = CreditTransaction(
            id="tx-1",
            team_id="team-1",
            supplier_id="sup-1",
            stock_item_name="Tape",
            quantity=10,
            total_value=25,
        )
        mock_stock_service.add_stock.return_value = StockChange(
            item=TAPE, transaction=transaction, warnings=["audit failed"]
        )

        result = await use_case.execute(
            ctx, AddStockRequest(name="Tape", quantity=10, price=2.5, supplier="Deons")
        )
        response = use_case.to_response(result)

        mock_stock_service.list_items.assert_awaited_once_with(ctx)
        assert [item.name for item in response.items] == ["Tape"]
        assert response.summary.total_items == 1
        assert response.transaction.total_value == 25
        assert response.warnings == ["audit failed"]

    async def test_price_confirmation_propagates(self, use_case, mock_stock_service, ctx):
        mock_stock_service.add_stock.side_effect = ConfirmationRequiredError(
            "Price changed", reason="price_change"
        )

        with pytest.raises(ConfirmationRequiredError):
            await use_case.execute(ctx, AddStockRequest(name="Tape", quantity=1, price=3))
        mock_stock_service.list_items.assert_not_awaited()
