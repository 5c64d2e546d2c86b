"""Tests for the command interpretation use cases."""

from datetime import date
from unittest.mock import AsyncMock

import pytest

from intellectory.application.dto.requests import CommandRequest
from intellectory.application.use_cases.interpret_command import (
    InterpretBinCommandUseCase,
    InterpretStockCommandUseCase,
)
from intellectory.core.entities.bins import BinStockSnapshot
from intellectory.core.entities.stock import StockItem
from intellectory.core.services.command_interpreter import CommandOutcome, OutcomeKind


@pytest.fixture
def mock_interpreter():
    return AsyncMock()


class TestInterpretStockCommandUseCase:
    async def test_delegates_with_today(self, mock_interpreter, ctx):
        mock_interpreter.interpret_stock.return_value = CommandOutcome(kind=OutcomeKind.UNKNOWN)
        use_case = InterpretStockCommandUseCase(interpreter=mock_interpreter)

        await use_case.execute(ctx, CommandRequest(command="hello"), today=date(2024, 3, 15))

        mock_interpreter.interpret_stock.assert_awaited_once_with(
            ctx, "hello", today=date(2024, 3, 15)
        )

    def test_response_for_pending_price_change(self, mock_interpreter):
        use_case = InterpretStockCommandUseCase(interpreter=mock_interpreter)
        outcome = CommandOutcome(
            kind=OutcomeKind.PRICE_CONFIRMATION,
            message="Price changed",
            pending={"name": "Boxes", "price": 3.0},
        )

        response = use_case.to_response(outcome)

        assert response.kind == "price_confirmation"
        assert response.pending == {"name": "Boxes", "price": 3.0}
        assert response.report is None
        assert response.snapshot is None

    def test_response_with_items(self, mock_interpreter):
        use_case = InterpretStockCommandUseCase(interpreter=mock_interpreter)
        item = StockItem(id="item-1", team_id="team-1", name="Boxes", opening_stock=10, packed=4)

        response = use_case.to_response(CommandOutcome(kind=OutcomeKind.UPDATED, items=[item]))

        assert response.items[0].remaining == 6


class TestInterpretBinCommandUseCase:
    async def test_movement_response_has_snapshot(self, mock_interpreter, ctx):
        mock_interpreter.interpret_bins.return_value = CommandOutcome(
            kind=OutcomeKind.BIN_MOVEMENT,
            message="Sent 10 Chep Plastic to Ziyard.",
            snapshot=BinStockSnapshot(notes="n"),
            warnings=["history not saved"],
        )
        use_case = InterpretBinCommandUseCase(interpreter=mock_interpreter)

        outcome = await use_case.execute(ctx, CommandRequest(command="send 10 chep plastic to Ziyard"))
        response = use_case.to_response(outcome)

        mock_interpreter.interpret_bins.assert_awaited_once_with(
            ctx, "send 10 chep plastic to Ziyard"
        )
        assert response.kind == "bin_movement"
        assert response.snapshot.notes == "n"
        assert response.warnings == ["history not saved"]
