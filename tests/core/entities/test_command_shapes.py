"""Tests for the shapes a model reply must fit."""

from datetime import datetime

import pytest
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from intellectory.core.entities.bins import MovementType
from intellectory.core.entities.commands import (
    AddCommand,
    DateRange,
    InterpretedCommand,
    QueryCommand,
    UpdateCommand,
)

ADAPTER = TypeAdapter(InterpretedCommand)


class TestInterpretedCommand:
    def test_add(self):
        command = ADAPTER.validate_python(
            {"action": "ADD", "parameters": {"name": " Boxes ", "quantity": 5, "price": 2, "supplier": " "}}
        )
        assert isinstance(command, AddCommand)
        assert command.parameters.name == "Boxes"
        assert command.parameters.supplier is None

    def test_update_needs_a_counter(self):
        with pytest.raises(PydanticValidationError):
            ADAPTER.validate_python({"action": "UPDATE", "parameters": {"name": "Boxes"}})

    def test_update(self):
        command = ADAPTER.validate_python(
            {"action": "UPDATE", "parameters": {"name": "Boxes", "lost": 2}}
        )
        assert isinstance(command, UpdateCommand)
        assert command.parameters.packed is None

    def test_query_needs_an_answer(self):
        with pytest.raises(PydanticValidationError):
            ADAPTER.validate_python({"action": "QUERY", "parameters": {}})
        command = ADAPTER.validate_python({"action": "QUERY", "answer": "90 boxes"})
        assert isinstance(command, QueryCommand)

    @pytest.mark.parametrize(
        "payload",
        [
            {"action": "DELETE", "parameters": {}},
            {"action": "ADD", "parameters": {"name": "Boxes", "quantity": 0, "price": 1}},
            {"action": "ADD", "parameters": {"name": "Boxes", "quantity": 1, "price": -1}},
            {"parameters": {}},
        ],
    )
    def test_off_contract(self, payload):
        with pytest.raises(PydanticValidationError):
            ADAPTER.validate_python(payload)


def test_date_range_is_inclusive():
    window = DateRange(datetime(2024, 3, 1), datetime(2024, 3, 7, 23, 59, 59), "Week")
    assert window.contains(datetime(2024, 3, 1))
    assert window.contains(datetime(2024, 3, 7, 23, 59, 59))
    assert not window.contains(datetime(2024, 3, 8))


def test_movement_sign():
    assert MovementType.SENT.sign == 1
    assert MovementType.RECEIVED.sign == -1
    assert MovementType.RETURNED.preposition == "from"
