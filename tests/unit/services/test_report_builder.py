"""Unit tests for activity report generation."""

from datetime import date, datetime
from unittest.mock import AsyncMock

from intellectory.core.entities.stock import ActivityLogEntry
from intellectory.core.services.date_ranges import day_window
from intellectory.core.services.report_builder import ReportService, build_report

WINDOW = day_window(date(2024, 3, 1), date(2024, 3, 7), "Report for Last 7 Days")


def _entry(description: str, item: str, user: str | None, when: datetime) -> ActivityLogEntry:
    return ActivityLogEntry(
        team_id="team-1",
        user_id=user,
        item_name=item,
        change_description=description,
        timestamp=when,
    )


ENTRIES = [
    _entry("Added 100 units of 'Boxes' via cash.", "Boxes", "alice", datetime(2024, 3, 2, 9)),
    _entry("Added 20 units of 'Tape' via credit from Deons.", "Tape", "bob", datetime(2024, 3, 3)),
    _entry("Set 'Packed' to 40", "Boxes", "alice", datetime(2024, 3, 4, 12)),
    _entry("Set 'Lost' to 2.5", "Boxes", "bob", datetime(2024, 3, 7, 23, 59)),
    _entry("Added 999 units of 'Boxes' via cash.", "Boxes", "carol", datetime(2024, 3, 8, 0, 1)),
]


class TestBuildReport:
    """Tests for the report summary."""

    def test_only_entries_inside_window(self):
        report = build_report(ENTRIES, WINDOW)

        assert len(report.detailed_log) == 4
        assert report.title == "Report for Last 7 Days"
        assert report.date_range == "2024-03-01 - 2024-03-07"

    def test_summary_totals(self):
        summary = build_report(ENTRIES, WINDOW).summary

        assert summary.total_items_added == 120
        assert summary.total_items_packed == 40
        assert summary.total_items_lost == 2.5

    def test_most_active_item_and_top_user(self):
        summary = build_report(ENTRIES, WINDOW).summary

        assert summary.most_active_item == "Boxes"
        assert summary.top_user in {"alice", "bob"}

    def test_empty_window(self):
        report = build_report([], WINDOW)

        assert report.detailed_log == []
        assert report.summary.most_active_item == ""
        assert report.summary.top_user == ""


class TestReportService:
    async def test_generate_reads_team_log(self):
        store = AsyncMock()
        store.list_entries.return_value = ENTRIES
        service = ReportService(activity_store=store)

        report = await service.generate("team-1", WINDOW)

        store.list_entries.assert_awaited_once_with("team-1")
        assert report.summary.total_items_added == 120
