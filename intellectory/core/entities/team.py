"""Team and session entities."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class TeamRole(str, Enum):
    OWNER = "Owner"
    MANAGER = "Manager"
    WORKER = "Worker"


class Team(BaseModel):
    id: str | None = None
    name: str
    owner_id: str
    created_at: datetime = Field(default_factory=datetime.now)


class TeamMember(BaseModel):
    id: str | None = None
    team_id: str
    user_id: str
    role: TeamRole = TeamRole.WORKER


@dataclass(frozen=True)
class SessionContext:
    """The acting user and their team; passed explicitly to every mutation."""

    user_id: str
    team_id: str
    team_name: str
    role: TeamRole = TeamRole.WORKER
