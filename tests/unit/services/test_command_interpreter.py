"""
Unit tests for CommandInterpreter.

The LLM returns canned JSON; services are AsyncMocks.
"""

import json
from datetime import date, datetime
from unittest.mock import AsyncMock

import pytest

from intellectory.core.entities.bins import BinStockSnapshot, BinTypeDefinition, MovementType
from intellectory.core.entities.reports import ActivityReport
from intellectory.core.entities.stock import StockField, StockItem, Supplier
from intellectory.core.exceptions import ConfirmationRequiredError, LLMResponseError
from intellectory.core.interfaces.llm import LLMResponse
from intellectory.core.services.bin_ledger import LedgerResult
from intellectory.core.services.command_interpreter import (
    STOCK_SYSTEM_PROMPT,
    CommandInterpreter,
    OutcomeKind,
    build_stock_prompt,
)
from intellectory.core.services.command_parsing import BIN_COMMAND_HELP, UNKNOWN_COMMAND_MESSAGE
from intellectory.core.services.stock_service import StockChange

BOXES = StockItem(id="item-1", team_id="team-1", name="Boxes", opening_stock=100, packed=10, price=2.5)
DEONS = Supplier(id="sup-1", team_id="team-1", name="Deons", balance=0)


def _reply(payload: dict) -> LLMResponse:
    return LLMResponse(text=json.dumps(payload), model="test-model")


@pytest.fixture
def llm():
    return AsyncMock()


@pytest.fixture
def stock():
    service = AsyncMock()
    service.list_items.return_value = [BOXES]
    service.suppliers.return_value = [DEONS]
    service.find_item.return_value = BOXES
    service.add_stock.return_value = StockChange(item=BOXES)
    service.update_field.side_effect = lambda ctx, item_id, field, value: StockChange(
        item=BOXES.model_copy(update={field.value: value})
    )
    return service


@pytest.fixture
def bins():
    ledger = AsyncMock()
    ledger.find_bin_type_by_name.return_value = BinTypeDefinition(
        id="chep", team_id="team-1", name="Chep Plastic", color="#3B82F6"
    )
    ledger.record_movement.return_value = LedgerResult(snapshot=BinStockSnapshot())
    return ledger


@pytest.fixture
def reports():
    service = AsyncMock()
    service.generate.side_effect = lambda team_id, window: ActivityReport(
        title=window.title, start=window.start, end=window.end
    )
    return service


@pytest.fixture
def interpreter(llm, stock, bins, reports):
    return CommandInterpreter(llm, stock, bins, reports, supplier_match_distance=3, temperature=0.1)


class TestReports:
    async def test_report_phrase_skips_the_model(self, interpreter, llm, reports, ctx):
        outcome = await interpreter.interpret_stock(
            ctx, "show me a report for last 7 days", today=date(2024, 3, 15)
        )

        assert outcome.kind is OutcomeKind.REPORT
        assert outcome.report.start == datetime(2024, 3, 9)
        assert outcome.message == "Report for Last 7 Days"
        llm.generate.assert_not_awaited()
        assert reports.generate.await_args.args[0] == "team-1"


class TestStockCommands:
    """Model-backed stock commands."""

    async def test_prompt_and_model_options(self, interpreter, llm, ctx):
        llm.generate.return_value = _reply({"action": "UNKNOWN", "parameters": {}})

        await interpreter.interpret_stock(ctx, "  do the thing ")

        kwargs = llm.generate.await_args.kwargs
        assert kwargs["system_prompt"] == STOCK_SYSTEM_PROMPT
        assert kwargs["temperature"] == 0.1
        assert kwargs["json_mode"] is True
        prompt = llm.generate.await_args.args[0]
        assert '"do the thing"' in prompt
        assert '"Deons"' in prompt

    async def test_add_with_known_supplier(self, interpreter, llm, stock, ctx):
        llm.generate.return_value = _reply(
            {
                "action": "ADD",
                "parameters": {"name": "Boxes", "quantity": 100, "price": 2.5, "supplier": "deons"},
            }
        )

        outcome = await interpreter.interpret_stock(ctx, "add 100 boxes from deons on credit")

        assert outcome.kind is OutcomeKind.ADDED
        stock.add_stock.assert_awaited_once_with(ctx, "Boxes", 100, 2.5, supplier="Deons")
        assert outcome.items == [BOXES]

    async def test_add_with_misspelt_supplier_asks_first(self, interpreter, llm, stock, ctx):
        llm.generate.return_value = _reply(
            {
                "action": "ADD",
                "parameters": {"name": "Boxes", "quantity": 10, "price": 2.5, "supplier": "Deon"},
            }
        )

        outcome = await interpreter.interpret_stock(ctx, "add 10 boxes from deon")

        assert outcome.kind is OutcomeKind.SUPPLIER_CONFIRMATION
        assert outcome.suggestion == "Deons"
        assert outcome.pending["supplier"] == "Deons"
        stock.add_stock.assert_not_awaited()

    async def test_add_with_new_supplier(self, interpreter, llm, stock, ctx):
        llm.generate.return_value = _reply(
            {
                "action": "ADD",
                "parameters": {"name": "Tape", "quantity": 5, "price": 1, "supplier": "Hillside Paper"},
            }
        )

        outcome = await interpreter.interpret_stock(ctx, "add 5 tape from hillside paper")

        assert outcome.kind is OutcomeKind.ADDED
        assert stock.add_stock.await_args.kwargs["supplier"] == "Hillside Paper"

    async def test_add_with_price_change_becomes_pending(self, interpreter, llm, stock, ctx):
        llm.generate.return_value = _reply(
            {"action": "ADD", "parameters": {"name": "Boxes", "quantity": 10, "price": 3}}
        )
        stock.add_stock.side_effect = ConfirmationRequiredError(
            "Price changed", reason="price_change", pending={"name": "Boxes", "price": 3.0}
        )

        outcome = await interpreter.interpret_stock(ctx, "add 10 boxes at 3")

        assert outcome.kind is OutcomeKind.PRICE_CONFIRMATION
        assert outcome.pending == {"name": "Boxes", "price": 3.0}
        assert outcome.message == "Price changed"

    async def test_update_adds_deltas(self, interpreter, llm, stock, ctx):
        llm.generate.return_value = _reply(
            {"action": "UPDATE", "parameters": {"name": "Boxes", "packed": 50, "lost": 5}}
        )

        outcome = await interpreter.interpret_stock(ctx, "we packed 50 boxes and lost 5")

        assert outcome.kind is OutcomeKind.UPDATED
        calls = [call.args[1:] for call in stock.update_field.await_args_list]
        assert calls == [("item-1", StockField.PACKED, 60), ("item-1", StockField.LOST, 5)]

    async def test_update_missing_item(self, interpreter, llm, stock, ctx):
        llm.generate.return_value = _reply(
            {"action": "UPDATE", "parameters": {"name": "Crates", "packed": 1}}
        )
        stock.find_item.return_value = None

        outcome = await interpreter.interpret_stock(ctx, "packed 1 crate")

        assert outcome.kind is OutcomeKind.NOT_FOUND
        stock.update_field.assert_not_awaited()

    async def test_query_answer(self, interpreter, llm, ctx):
        llm.generate.return_value = _reply(
            {"action": "QUERY", "parameters": {}, "answer": "You have 90 boxes."}
        )

        outcome = await interpreter.interpret_stock(ctx, "how many boxes?")

        assert outcome.kind is OutcomeKind.ANSWER
        assert outcome.message == "You have 90 boxes."

    async def test_unknown(self, interpreter, llm, ctx):
        llm.generate.return_value = _reply({"action": "UNKNOWN", "parameters": {}})

        outcome = await interpreter.interpret_stock(ctx, "sing a song")

        assert outcome.kind is OutcomeKind.UNKNOWN
        assert outcome.message == UNKNOWN_COMMAND_MESSAGE

    async def test_off_contract_reply_changes_nothing(self, interpreter, llm, stock, ctx):
        llm.generate.return_value = LLMResponse(text="I think you want to add boxes", model="m")

        with pytest.raises(LLMResponseError):
            await interpreter.interpret_stock(ctx, "add boxes")

        stock.add_stock.assert_not_awaited()
        stock.update_field.assert_not_awaited()


class TestBinCommands:
    async def test_movement(self, interpreter, bins, llm, ctx):
        outcome = await interpreter.interpret_bins(ctx, "send 10 chep plastic to Ziyard")

        assert outcome.kind is OutcomeKind.BIN_MOVEMENT
        assert outcome.message == "Sent 10 Chep Plastic to Ziyard."
        bins.record_movement.assert_awaited_once_with(
            ctx, MovementType.SENT, 10, "chep", "Ziyard"
        )
        llm.generate.assert_not_awaited()

    async def test_unrecognised_command(self, interpreter, bins, ctx):
        outcome = await interpreter.interpret_bins(ctx, "move some bins")

        assert outcome.kind is OutcomeKind.UNKNOWN
        assert outcome.message == BIN_COMMAND_HELP
        bins.record_movement.assert_not_awaited()

    async def test_unknown_bin_type(self, interpreter, bins, ctx):
        bins.find_bin_type_by_name.return_value = None

        outcome = await interpreter.interpret_bins(ctx, "receive 3 pine to Deons")

        assert outcome.kind is OutcomeKind.NOT_FOUND
        assert "pine" in outcome.message


def test_prompt_leaves_out_ids():
    prompt = build_stock_prompt("add boxes", [BOXES], [DEONS])

    assert "item-1" not in prompt
    assert "team-1" not in prompt
    assert '"Boxes"' in prompt
