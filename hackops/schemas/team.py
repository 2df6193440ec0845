"""Team Pydantic schemas."""

from datetime import datetime
from typing import List, Optional

from hackops.schemas.base import CamelModel, HackathonScopedRequest
from hackops.services.team_registry import Member, TeamSnapshot


class TeamCreate(HackathonScopedRequest):
    team_name: str


class TeamCodeRequest(HackathonScopedRequest):
    team_code: str


class MemberOut(CamelModel):
    email: str
    name: str

    @classmethod
    def from_member(cls, member: Member) -> "MemberOut":
        return cls(email=member.email, name=member.name)


def members_out(members) -> List[MemberOut]:
    return [MemberOut.from_member(m) for m in members]


class TeamOut(CamelModel):
    team_id: str
    team_name: str
    leader: MemberOut
    members: List[MemberOut]
    submitted: bool
    is_leader: bool

    @classmethod
    def from_snapshot(cls, team: TeamSnapshot, viewer_email: str) -> "TeamOut":
        return cls(
            team_id=team.team_id,
            team_name=team.team_name,
            leader=MemberOut.from_member(team.leader),
            members=members_out(team.members),
            submitted=team.submitted,
            is_leader=team.is_leader(viewer_email),
        )


class CreateTeamResponse(CamelModel):
    message: str
    team_id: str
    team_name: str
    team_members: List[MemberOut]
    available_members: List[MemberOut]


class JoinTeamResponse(CamelModel):
    message: str
    status: str
    team_id: str
    team_members: List[MemberOut]


class SubmitTeamResponse(CamelModel):
    message: str
    team_id: str
    submitted_at: Optional[datetime] = None


class PresenceResponse(CamelModel):
    team: Optional[TeamOut] = None
    message: Optional[str] = None


class AvailableMembersResponse(CamelModel):
    available_members: List[MemberOut]


class SubmittedTeamOut(CamelModel):
    team_id: str
    team_name: str
    team_size: int
    leader_email: str
    members: List[MemberOut]
    submitted_at: Optional[datetime] = None


class SubmittedTeamsResponse(CamelModel):
    teams: List[SubmittedTeamOut]
