"""Activity report entities."""

from datetime import datetime

from pydantic import BaseModel, Field

from intellectory.core.entities.stock import ActivityLogEntry


class ReportSummary(BaseModel):
    total_items_added: float = 0
    total_items_packed: float = 0
    total_items_lost: float = 0
    most_active_item: str = ""
    top_user: str = ""


class ActivityReport(BaseModel):
    """Summary and detail of the activity log inside a date window."""

    title: str
    start: datetime
    end: datetime
    summary: ReportSummary = Field(default_factory=ReportSummary)
    detailed_log: list[ActivityLogEntry] = Field(default_factory=list)

    @property
    def date_range(self) -> str:
        return f"{self.start.date().isoformat()} - {self.end.date().isoformat()}"
