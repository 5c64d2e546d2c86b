"""
Session resolution and team management.

Identity comes from the upstream auth provider; this service only maps a
user id to the team they act for.
"""

import asyncio

from intellectory.config import get_logger
from intellectory.core.entities.team import SessionContext, Team, TeamMember, TeamRole
from intellectory.core.exceptions import NotAuthenticatedError, TeamRequiredError, ValidationError
from intellectory.core.interfaces.stores import ITeamStore
from intellectory.core.services.bin_ledger import BinLedgerService

logger = get_logger(__name__)


class SessionService:
    """Resolves SessionContext and handles team setup, rename and members."""

    def __init__(
        self,
        team_store: ITeamStore,
        bin_ledger: BinLedgerService | None = None,
        check_timeout: float = 5.0,
        seed_default_types: bool = True,
    ):
        self._teams = team_store
        self._bin_ledger = bin_ledger
        self._check_timeout = check_timeout
        self._seed_default_types = seed_default_types

    async def resolve(self, user_id: str | None) -> SessionContext:
        """
        Look up the user's team with a bounded wait.

        Raises:
            NotAuthenticatedError: no user id, or the lookup timed out.
            TeamRequiredError: the user belongs to no team.
        """
        if not user_id or not user_id.strip():
            raise NotAuthenticatedError()
        user_id = user_id.strip()

        try:
            membership, team = await asyncio.wait_for(
                self._lookup(user_id), timeout=self._check_timeout
            )
        except asyncio.TimeoutError:
            logger.warning(
                "session_check_timed_out", user_id=user_id, timeout=self._check_timeout
            )
            raise NotAuthenticatedError("Session check timed out")

        if membership is None or team is None:
            raise TeamRequiredError(user_id)

        return SessionContext(
            user_id=user_id,
            team_id=team.id or "",
            team_name=team.name,
            role=membership.role,
        )

    async def _lookup(self, user_id: str) -> tuple[TeamMember | None, Team | None]:
        membership = await self._teams.get_membership(user_id)
        if membership is None:
            return None, None
        return membership, await self._teams.get_team(membership.team_id)

    async def setup_team(self, user_id: str, team_name: str) -> SessionContext:
        """Create a team owned by `user_id` and seed its default bin types."""
        team_name = team_name.strip()
        if not team_name:
            raise ValidationError("name", "team name is required")
        if await self._teams.get_membership(user_id) is not None:
            raise ValidationError("user_id", "user already belongs to a team", user_id)

        team = await self._teams.create_team(Team(name=team_name, owner_id=user_id))
        await self._teams.add_member(
            TeamMember(team_id=team.id or "", user_id=user_id, role=TeamRole.OWNER)
        )

        seeded = 0
        if self._seed_default_types and self._bin_ledger is not None:
            seeded = len(await self._bin_ledger.seed_default_types(team.id or ""))

        logger.info("team_created", team_id=team.id, owner_id=user_id, seeded_bin_types=seeded)
        return SessionContext(
            user_id=user_id,
            team_id=team.id or "",
            team_name=team.name,
            role=TeamRole.OWNER,
        )

    async def current_team(self, ctx: SessionContext) -> Team:
        team = await self._teams.get_team(ctx.team_id)
        if team is None:
            raise TeamRequiredError(ctx.user_id)
        return team

    async def rename_team(self, ctx: SessionContext, name: str) -> Team:
        name = name.strip()
        if not name:
            raise ValidationError("name", "team name is required")

        team = await self.current_team(ctx)
        if team.name == name:
            return team

        renamed = await self._teams.rename_team(ctx.team_id, name)
        logger.info("team_renamed", team_id=ctx.team_id, old_name=team.name, new_name=name)
        return renamed

    async def members(self, ctx: SessionContext) -> list[TeamMember]:
        return await self._teams.list_members(ctx.team_id)
