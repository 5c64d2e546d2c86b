"""Tests for stock entities."""

from intellectory.core.entities.stock import StockField, StockItem, StockSummary


class TestStockItem:
    """Tests for derived stock figures."""

    def test_defaults(self):
        item = StockItem(team_id="team-1", name="Boxes")
        assert item.id is None
        assert item.remaining == 0
        assert item.color == "#3B82F6"

    def test_derived_figures(self):
        item = StockItem(
            team_id="team-1",
            name="Boxes",
            opening_stock=100,
            added_today=20,
            packed=30,
            lost=5,
            price=2.5,
        )
        assert item.used == 35
        assert item.remaining == 85
        assert item.stock_value == 212.5

    def test_remaining_is_not_clamped(self):
        item = StockItem(team_id="team-1", name="Tape", opening_stock=2, packed=10, price=1)
        assert item.remaining == -8
        assert item.stock_value == -8

    def test_low_stock_is_inclusive(self):
        item = StockItem(team_id="team-1", name="Tape", opening_stock=20, alert_level=20)
        assert item.is_low_stock is True
        item.opening_stock = 21
        assert item.is_low_stock is False


def test_field_labels():
    assert StockField.ADDED_TODAY.label == "Added Today"
    assert StockField.ALERT_LEVEL.label == "Alert Level"


def test_summary_from_items():
    items = [
        StockItem(team_id="t", name="A", opening_stock=10, price=2, alert_level=5),
        StockItem(team_id="t", name="B", opening_stock=1, price=4, alert_level=5),
    ]

    summary = StockSummary.from_items(items)

    assert summary.total_remaining == 11
    assert summary.total_stock_value == 24
    assert summary.low_stock_count == 1
    assert summary.total_items == 2


def test_summary_of_nothing():
    assert StockSummary.from_items([]) == StockSummary()
