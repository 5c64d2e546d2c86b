"""
API tests for stock and supplier endpoints.

The StockService and AddStockUseCase are mocked; these tests check
routing, request validation and the shape of the reloaded state.
"""

from datetime import datetime
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from intellectory.api.dependencies import get_add_stock_use_case, get_session, get_stock
from intellectory.api.main import app
from intellectory.application.use_cases import AddStockUseCase
from intellectory.application.use_cases.add_stock import AddStockResult
from intellectory.core.entities.stock import (
    ActivityLogEntry,
    CreditTransaction,
    StockField,
    StockItem,
    StockSummary,
    Supplier,
)
from intellectory.core.exceptions import (
    ConfirmationRequiredError,
    StockItemNotFoundError,
    ValidationError,
)
from intellectory.core.services import StockChange

BOXES = StockItem(
    id="item-1",
    team_id="team-1",
    name="Boxes",
    opening_stock=100,
    added_today=20,
    packed=30,
    lost=5,
    alert_level=20,
    price=2.5,
)
TAPE = StockItem(id="item-2", team_id="team-1", name="Tape", opening_stock=3, alert_level=5, price=1)


@pytest.fixture
def stock():
    service = AsyncMock()
    service.list_items.return_value = [BOXES, TAPE]
    service.summary.return_value = StockSummary.from_items([BOXES, TAPE])
    service.low_stock.return_value = [TAPE]
    service.update_field.return_value = StockChange(item=BOXES)
    service.edit_details.return_value = StockChange(item=BOXES, changed=False)
    service.delete_item.return_value = StockChange(item=BOXES)
    service.new_day.return_value = StockChange(items=[BOXES])
    return service


@pytest.fixture
def add_uc():
    uc = AsyncMock(spec=AddStockUseCase)
    transaction = CreditTransaction(
        id="tx-1",
        team_id="team-1",
        supplier_id="sup-1",
        stock_item_name="Boxes",
        quantity=20,
        total_value=50,
    )
    result = AddStockResult(change=StockChange(item=BOXES, transaction=transaction), items=[BOXES])
    uc.execute.return_value = result
    uc.to_response.return_value = AddStockUseCase().to_response(result)
    return uc


@pytest.fixture
async def client(ctx, stock, add_uc):
    app.dependency_overrides[get_session] = lambda: ctx
    app.dependency_overrides[get_stock] = lambda: stock
    app.dependency_overrides[get_add_stock_use_case] = lambda: add_uc
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.pop(get_session, None)
    app.dependency_overrides.pop(get_stock, None)
    app.dependency_overrides.pop(get_add_stock_use_case, None)


class TestStockReadAPI:
    async def test_list_with_derived_figures(self, client):
        response = await client.get("/api/stock")

        assert response.status_code == 200
        data = response.json()
        boxes = data["items"][0]
        assert boxes["used"] == 35
        assert boxes["remaining"] == 85
        assert boxes["stock_value"] == 212.5
        assert boxes["is_low_stock"] is False
        assert data["items"][1]["is_low_stock"] is True
        assert data["summary"]["total_items"] == 2
        assert data["summary"]["low_stock_count"] == 1

    async def test_summary(self, client):
        response = await client.get("/api/stock/summary")

        assert response.json()["total_remaining"] == 88

    async def test_low_stock(self, client):
        response = await client.get("/api/stock/low-stock")

        assert [item["name"] for item in response.json()] == ["Tape"]

    async def test_activity_limit(self, client, stock, ctx):
        stock.activity.return_value = [
            ActivityLogEntry(
                id="a1",
                team_id="team-1",
                item_name="Boxes",
                change_description="Set 'Packed' to 30",
                timestamp=datetime(2024, 3, 1, 9, 30),
            )
        ]

        response = await client.get("/api/stock/activity", params={"limit": 5})

        assert response.json()[0]["change_description"] == "Set 'Packed' to 30"
        stock.activity.assert_awaited_once_with(ctx, limit=5)

    async def test_activity_limit_out_of_range(self, client):
        response = await client.get("/api/stock/activity", params={"limit": 0})

        assert response.status_code == 422


class TestAddStockAPI:
    async def test_add_on_credit(self, client, add_uc):
        response = await client.post(
            "/api/stock",
            json={"name": "Boxes", "quantity": 20, "price": 2.5, "supplier": "Deons"},
        )

        assert response.status_code == 201
        assert response.json()["transaction"]["total_value"] == 50
        request = add_uc.execute.await_args.args[1]
        assert request.supplier == "Deons"
        assert request.price_decision is None

    async def test_price_confirmation(self, client, add_uc):
        add_uc.execute.side_effect = ConfirmationRequiredError(
            "'Boxes' is priced at 2.5. Update the price to 3?",
            reason="price_change",
            pending={"name": "Boxes", "quantity": 10, "price": 3.0},
            current_price=2.5,
        )

        response = await client.post(
            "/api/stock", json={"name": "Boxes", "quantity": 10, "price": 3}
        )

        assert response.status_code == 409
        data = response.json()
        assert data["error_code"] == "CONFIRMATION_REQUIRED"
        assert data["details"]["reason"] == "price_change"
        assert data["details"]["pending"]["price"] == 3.0
        assert data["details"]["current_price"] == 2.5

    async def test_price_decision_is_passed_through(self, client, add_uc):
        await client.post(
            "/api/stock",
            json={"name": "Boxes", "quantity": 10, "price": 3, "price_decision": "update"},
        )

        assert add_uc.execute.await_args.args[1].price_decision.value == "update"

    async def test_invalid_quantity(self, client, add_uc):
        add_uc.execute.side_effect = ValidationError("quantity", "must be positive", 0)

        response = await client.post("/api/stock", json={"name": "Boxes", "quantity": 0, "price": 1})

        assert response.status_code == 400
        assert response.json()["details"]["field"] == "quantity"

    async def test_missing_fields(self, client):
        response = await client.post("/api/stock", json={"name": "Boxes"})

        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"


class TestStockWriteAPI:
    async def test_update_field(self, client, stock, ctx):
        response = await client.patch("/api/stock/item-1", json={"field": "packed", "value": 40})

        assert response.status_code == 200
        stock.update_field.assert_awaited_once_with(ctx, "item-1", StockField.PACKED, 40)

    async def test_update_unknown_field(self, client):
        response = await client.patch("/api/stock/item-1", json={"field": "color", "value": 4})

        assert response.status_code == 422

    async def test_update_missing_item(self, client, stock):
        stock.update_field.side_effect = StockItemNotFoundError("nope")

        response = await client.patch("/api/stock/nope", json={"field": "lost", "value": 1})

        assert response.status_code == 404
        assert response.json()["error_code"] == "STOCK_ITEM_NOT_FOUND"

    async def test_edit_without_changes(self, client):
        response = await client.put(
            "/api/stock/item-1", json={"name": "Boxes", "category": "", "color": "#3B82F6"}
        )

        assert response.json()["changed"] is False

    async def test_delete(self, client, stock, ctx):
        response = await client.delete("/api/stock/item-1")

        assert response.status_code == 200
        stock.delete_item.assert_awaited_once_with(ctx, "item-1")

    async def test_new_day(self, client, stock):
        response = await client.post("/api/stock/new-day")

        assert response.status_code == 200
        stock.new_day.assert_awaited_once()

    async def test_reset_needs_confirmation(self, client, stock, ctx):
        stock.reset.side_effect = ConfirmationRequiredError(
            "Delete all stock data?", reason="reset_stock"
        )

        response = await client.post("/api/stock/reset", json={})

        assert response.status_code == 409
        stock.reset.assert_awaited_once_with(ctx, confirmed=False)

    async def test_confirmed_reset(self, client, stock, ctx):
        stock.list_items.return_value = []

        response = await client.post("/api/stock/reset", json={"confirmed": True})

        assert response.json()["items"] == []
        stock.reset.assert_awaited_once_with(ctx, confirmed=True)


class TestSuppliersAPI:
    async def test_list_suppliers(self, client, stock):
        stock.suppliers.return_value = [
            Supplier(id="sup-1", team_id="team-1", name="Deons", balance=250)
        ]

        response = await client.get("/api/suppliers")

        assert response.json() == [{"id": "sup-1", "name": "Deons", "balance": 250}]

    async def test_list_transactions(self, client, stock):
        stock.transactions.return_value = [
            CreditTransaction(
                id="tx-1",
                team_id="team-1",
                supplier_id="sup-1",
                stock_item_name="Boxes",
                quantity=100,
                total_value=250,
            )
        ]

        response = await client.get("/api/suppliers/transactions")

        assert response.json()[0]["stock_item_name"] == "Boxes"
