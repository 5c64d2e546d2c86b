"""Team setup and settings endpoints."""

from fastapi import APIRouter, Depends, status

from intellectory.api.dependencies import (
    get_session,
    get_sessions,
    get_setup_team_use_case,
    get_user_id,
)
from intellectory.application.dto.requests import RenameTeamRequest, SetupTeamRequest
from intellectory.application.dto.responses import (
    ErrorResponse,
    SessionResponse,
    TeamMemberResponse,
    TeamResponse,
)
from intellectory.application.use_cases import SetupTeamUseCase
from intellectory.core.entities.team import SessionContext
from intellectory.core.services import SessionService

router = APIRouter(prefix="/api/teams", tags=["teams"])


@router.post(
    "",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)
async def setup_team(
    request: SetupTeamRequest,
    user_id: str = Depends(get_user_id),
    use_case: SetupTeamUseCase = Depends(get_setup_team_use_case),
) -> SessionResponse:
    """Create a team owned by the caller, seeded with the default bin types."""
    result = await use_case.execute(user_id, request)
    return use_case.to_response(result)


@router.get(
    "/session",
    response_model=SessionResponse,
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)
async def get_current_session(ctx: SessionContext = Depends(get_session)) -> SessionResponse:
    """Resolve the caller's session; 403 means team setup is still required."""
    return SessionResponse.from_context(ctx)


@router.get("/current", response_model=TeamResponse)
async def get_current_team(
    ctx: SessionContext = Depends(get_session),
    sessions: SessionService = Depends(get_sessions),
) -> TeamResponse:
    return TeamResponse.from_entity(await sessions.current_team(ctx))


@router.patch(
    "/current",
    response_model=TeamResponse,
    responses={400: {"model": ErrorResponse}},
)
async def rename_team(
    request: RenameTeamRequest,
    ctx: SessionContext = Depends(get_session),
    sessions: SessionService = Depends(get_sessions),
) -> TeamResponse:
    """Rename the team. Submitting the current name changes nothing."""
    return TeamResponse.from_entity(await sessions.rename_team(ctx, request.name))


@router.get("/members", response_model=list[TeamMemberResponse])
async def list_members(
    ctx: SessionContext = Depends(get_session),
    sessions: SessionService = Depends(get_sessions),
) -> list[TeamMemberResponse]:
    return [TeamMemberResponse.from_entity(m) for m in await sessions.members(ctx)]
