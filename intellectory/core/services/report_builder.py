"""Activity report generation over the stock audit trail."""

from collections import Counter
from datetime import datetime

from intellectory.config import get_logger
from intellectory.core.entities.commands import DateRange
from intellectory.core.entities.reports import ActivityReport, ReportSummary
from intellectory.core.entities.stock import ActivityLogEntry
from intellectory.core.interfaces.stores import IActivityLogStore

logger = get_logger(__name__)


def _as_local_naive(moment: datetime) -> datetime:
    if moment.tzinfo is not None:
        return moment.astimezone().replace(tzinfo=None)
    return moment


def _number(word: str) -> float:
    try:
        return float(word.strip(".,'"))
    except ValueError:
        return 0


def build_report(entries: list[ActivityLogEntry], date_range: DateRange) -> ActivityReport:
    """
    Summarise the entries that fall inside `date_range`.

    "Added N units ..." counts N as added. Entries mentioning Packed or
    Lost count their trailing number.
    """
    relevant = [e for e in entries if date_range.contains(_as_local_naive(e.timestamp))]

    summary = ReportSummary()
    item_counts: Counter[str] = Counter()
    user_counts: Counter[str] = Counter()

    for entry in relevant:
        words = entry.change_description.split(" ")
        if "Added" in entry.change_description:
            summary.total_items_added += _number(words[1]) if len(words) > 1 else 0
        elif "Packed" in entry.change_description:
            summary.total_items_packed += _number(words[-1])
        elif "Lost" in entry.change_description:
            summary.total_items_lost += _number(words[-1])

        item_counts[entry.item_name] += 1
        if entry.user_id:
            user_counts[entry.user_id] += 1

    if item_counts:
        summary.most_active_item = item_counts.most_common(1)[0][0]
    if user_counts:
        summary.top_user = user_counts.most_common(1)[0][0]

    return ActivityReport(
        title=date_range.title,
        start=date_range.start,
        end=date_range.end,
        summary=summary,
        detailed_log=relevant,
    )


class ReportService:
    """Builds reports from the stored activity log."""

    def __init__(self, activity_store: IActivityLogStore) -> None:
        self._activity_store = activity_store

    async def generate(self, team_id: str, date_range: DateRange) -> ActivityReport:
        entries = await self._activity_store.list_entries(team_id)
        report = build_report(entries, date_range)
        logger.info(
            "report_generated",
            team_id=team_id,
            title=report.title,
            entries=len(report.detailed_log),
        )
        return report
