"""Generate Report Use Case: activity report for an explicit date range."""

from datetime import date

from intellectory.application.dto.responses import ActivityReportResponse
from intellectory.core.entities.reports import ActivityReport
from intellectory.core.entities.team import SessionContext
from intellectory.core.exceptions import ValidationError
from intellectory.core.services import ReportService
from intellectory.core.services.date_ranges import day_window


class GenerateReportUseCase:
    """Summarise the activity log between two dates, both inclusive."""

    def __init__(self, report_service: ReportService | None = None):
        self._report_service = report_service

    def _get_report_service(self) -> ReportService:
        if self._report_service is None:
            from intellectory.application.services import get_report_service

            self._report_service = get_report_service()
        return self._report_service

    async def execute(self, ctx: SessionContext, start: date, end: date) -> ActivityReport:
        if end < start:
            raise ValidationError("end", "must not be before start", end.isoformat())

        window = day_window(
            start, end, f"Report from {start.isoformat()} to {end.isoformat()}"
        )
        return await self._get_report_service().generate(ctx.team_id, window)

    def to_response(self, result: ActivityReport) -> ActivityReportResponse:
        return ActivityReportResponse.from_report(result)
