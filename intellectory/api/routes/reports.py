"""Activity report endpoints."""

from datetime import date

from fastapi import APIRouter, Depends, Query

from intellectory.api.dependencies import get_report_use_case, get_session
from intellectory.application.dto.responses import ActivityReportResponse, ErrorResponse
from intellectory.application.use_cases import GenerateReportUseCase
from intellectory.core.entities.team import SessionContext

router = APIRouter(prefix="/api/reports", tags=["reports"])


@router.get("", response_model=ActivityReportResponse, responses={400: {"model": ErrorResponse}})
async def activity_report(
    start: date = Query(..., description="First day, inclusive"),
    end: date = Query(..., description="Last day, inclusive"),
    ctx: SessionContext = Depends(get_session),
    use_case: GenerateReportUseCase = Depends(get_report_use_case),
) -> ActivityReportResponse:
    """Summary and detailed activity log for a date range."""
    result = await use_case.execute(ctx, start, end)
    return use_case.to_response(result)
