"""Setup Team Use Case: create a team, its Owner membership and default bin types."""

from dataclasses import dataclass

from intellectory.application.dto.requests import SetupTeamRequest
from intellectory.application.dto.responses import SessionResponse
from intellectory.config import get_logger
from intellectory.core.entities.team import SessionContext
from intellectory.core.services import SessionService

logger = get_logger(__name__)


@dataclass
class SetupTeamResult:
    """Result of team setup."""

    context: SessionContext


class SetupTeamUseCase:
    """First-login team creation for a signed-in user with no team."""

    def __init__(self, session_service: SessionService | None = None):
        self._session_service = session_service

    def _get_session_service(self) -> SessionService:
        if self._session_service is None:
            from intellectory.application.services import get_session_service

            self._session_service = get_session_service()
        return self._session_service

    async def execute(self, user_id: str, request: SetupTeamRequest) -> SetupTeamResult:
        logger.info("setup_team_started", user_id=user_id, team_name=request.name)

        context = await self._get_session_service().setup_team(user_id, request.name)

        logger.info("setup_team_complete", user_id=user_id, team_id=context.team_id)
        return SetupTeamResult(context=context)

    def to_response(self, result: SetupTeamResult) -> SessionResponse:
        return SessionResponse.from_context(result.context)
