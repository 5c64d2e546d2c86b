"""Table-backed store for teams and memberships."""

from intellectory.core.entities.team import Team, TeamMember
from intellectory.core.exceptions import RecordNotFoundError
from intellectory.core.interfaces.stores import ITeamStore
from intellectory.infrastructure.storage.stores.base import TableStore, to_row


class TableTeamStore(TableStore, ITeamStore):
    async def create_team(self, team: Team) -> Team:
        rows = await self.client.insert("teams", to_row(team))
        return Team.model_validate(rows[0])

    async def get_team(self, team_id: str) -> Team | None:
        rows = await self.client.select("teams", {"id": team_id}, limit=1)
        return Team.model_validate(rows[0]) if rows else None

    async def rename_team(self, team_id: str, name: str) -> Team:
        rows = await self.client.update("teams", {"name": name}, {"id": team_id})
        if not rows:
            raise RecordNotFoundError("Team", team_id)
        return Team.model_validate(rows[0])

    async def add_member(self, member: TeamMember) -> TeamMember:
        rows = await self.client.insert("team_members", to_row(member))
        return TeamMember.model_validate(rows[0])

    async def get_membership(self, user_id: str) -> TeamMember | None:
        rows = await self.client.select("team_members", {"user_id": user_id}, limit=1)
        return TeamMember.model_validate(rows[0]) if rows else None

    async def list_members(self, team_id: str) -> list[TeamMember]:
        rows = await self.client.select("team_members", {"team_id": team_id})
        return [TeamMember.model_validate(row) for row in rows]
