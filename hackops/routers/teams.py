"""Teams router – team formation, joining, submission, and roster reads."""

from fastapi import APIRouter, Depends, status

from hackops.dependencies import get_team_registry, get_principal_resolver
from hackops.schemas.team import (
    AvailableMembersResponse,
    CreateTeamResponse,
    HackathonScopedRequest,
    JoinTeamResponse,
    PresenceResponse,
    SubmitTeamResponse,
    SubmittedTeamOut,
    SubmittedTeamsResponse,
    TeamCodeRequest,
    TeamCreate,
    TeamOut,
    members_out,
)
from hackops.services.principal import PrincipalResolver
from hackops.services.team_registry import TeamRegistry

router = APIRouter(prefix="/teams", tags=["teams"])


# ═══════════════════════════════════════════════════════════════
#  Mutations
# ═══════════════════════════════════════════════════════════════

@router.post("/create", response_model=CreateTeamResponse, status_code=status.HTTP_201_CREATED)
async def create_team(
    payload: TeamCreate,
    resolver: PrincipalResolver = Depends(get_principal_resolver),
    registry: TeamRegistry = Depends(get_team_registry),
):
    """Create a team led by the caller; returns the join code."""
    principal = await resolver.resolve(payload.email, payload.auth_token)
    created = await registry.create_team(payload.hackathon_id, payload.team_name, principal.email)
    return CreateTeamResponse(
        message="Team created successfully.",
        team_id=created.team.team_id,
        team_name=created.team.team_name,
        team_members=members_out(created.team.members),
        available_members=members_out(created.available_members),
    )


@router.post("/join", response_model=JoinTeamResponse)
async def join_team(
    payload: TeamCodeRequest,
    resolver: PrincipalResolver = Depends(get_principal_resolver),
    registry: TeamRegistry = Depends(get_team_registry),
):
    """Join a team by its code."""
    principal = await resolver.resolve(payload.email, payload.auth_token)
    team = await registry.join_team(payload.hackathon_id, payload.team_code, principal.email)
    return JoinTeamResponse(
        message=f"Joined team {team.team_name} successfully.",
        status="joined",
        team_id=team.team_id,
        team_members=members_out(team.members),
    )


@router.post("/submit", response_model=SubmitTeamResponse)
async def submit_team(
    payload: TeamCodeRequest,
    resolver: PrincipalResolver = Depends(get_principal_resolver),
    registry: TeamRegistry = Depends(get_team_registry),
):
    """Leader submits the team. Irreversible."""
    principal = await resolver.resolve(payload.email, payload.auth_token)
    team = await registry.submit_team(payload.hackathon_id, payload.team_code, principal.email)
    return SubmitTeamResponse(
        message="Team submitted successfully.",
        team_id=team.team_id,
        submitted_at=team.submitted_at,
    )


# ═══════════════════════════════════════════════════════════════
#  Reads
# ═══════════════════════════════════════════════════════════════

@router.post("/presence", response_model=PresenceResponse)
async def check_team_presence(
    payload: HackathonScopedRequest,
    resolver: PrincipalResolver = Depends(get_principal_resolver),
    registry: TeamRegistry = Depends(get_team_registry),
):
    """Return the caller's team for the hackathon, or ``team: null``."""
    principal = await resolver.resolve(payload.email, payload.auth_token)
    team = await registry.check_presence(principal.email, payload.hackathon_id)
    if not team:
        return PresenceResponse(message="No team found for this user.")
    return PresenceResponse(team=TeamOut.from_snapshot(team, principal.email))


@router.post("/available", response_model=AvailableMembersResponse)
async def available_members(
    payload: HackathonScopedRequest,
    resolver: PrincipalResolver = Depends(get_principal_resolver),
    registry: TeamRegistry = Depends(get_team_registry),
):
    """Registered participants who are not on a team yet."""
    principal = await resolver.resolve(payload.email, payload.auth_token)
    members = await registry.available_members(payload.hackathon_id, principal.email)
    return AvailableMembersResponse(available_members=members_out(members))


@router.post("/submitted", response_model=SubmittedTeamsResponse)
async def submitted_teams(
    payload: HackathonScopedRequest,
    resolver: PrincipalResolver = Depends(get_principal_resolver),
    registry: TeamRegistry = Depends(get_team_registry),
):
    """Organizer export of submitted teams, the input of seat allocation."""
    principal = await resolver.resolve(payload.email, payload.auth_token)
    teams = await registry.submitted_teams(payload.hackathon_id, principal.email)
    return SubmittedTeamsResponse(
        teams=[
            SubmittedTeamOut(
                team_id=t.team_id,
                team_name=t.team_name,
                team_size=t.size,
                leader_email=t.leader_email,
                members=members_out(t.members),
                submitted_at=t.submitted_at,
            )
            for t in teams
        ]
    )
