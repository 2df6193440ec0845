"""
Team registry — team creation, membership, and the submission gate.

Per (hackathon, participant) the state machine is
``NoTeam → HasTeam{isLeader, submitted}``; ``submitted`` is terminal.

Join and submit on one team run under that team's lock and inside a single
transaction that re-reads the team ``FOR UPDATE``, so concurrent joins
always see each other's appends. The unique ``(hackathon_id, email)``
membership constraint keeps the one-team-per-hackathon rule even across
teams and processes.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from hackops.config import settings
from hackops.errors import Conflict, NotFound, PreconditionFailed, PermissionDenied, ValidationFailed
from hackops.models.team import Team
from hackops.models.team_membership import Role, TeamMembership
from hackops.services import directory
from hackops.services.locks import KeyedLock
from hackops.utils.codes import generate_team_code, normalize_team_code
from hackops.utils.emails import normalize_email

logger = logging.getLogger(__name__)

TEAM_NAME_MIN = 3
TEAM_NAME_MAX = 50
MIN_SUBMIT_SIZE = 2


@dataclass(frozen=True)
class Member:
    email: str
    name: str


@dataclass(frozen=True)
class TeamSnapshot:
    team_id: str
    hackathon_id: int
    team_name: str
    leader_email: str
    members: Tuple[Member, ...]
    submitted: bool
    submitted_at: Optional[datetime] = None

    @property
    def leader(self) -> Member:
        return next(m for m in self.members if m.email == self.leader_email)

    @property
    def size(self) -> int:
        return len(self.members)

    def is_leader(self, email: str) -> bool:
        return email == self.leader_email


@dataclass(frozen=True)
class CreatedTeam:
    team: TeamSnapshot
    available_members: Tuple[Member, ...]


def _normalize_team_name(raw: str) -> str:
    name = " ".join((raw or "").split())
    if not TEAM_NAME_MIN <= len(name) <= TEAM_NAME_MAX:
        raise ValidationFailed(
            "invalid_team_name",
            f"Team name must be between {TEAM_NAME_MIN} and {TEAM_NAME_MAX} characters.",
        )
    return name


def _snapshot(team: Team) -> TeamSnapshot:
    # Leader first, then join order.
    ordered = sorted(team.memberships, key=lambda m: (m.role != Role.Lead, m.id))
    return TeamSnapshot(
        team_id=team.code,
        hackathon_id=team.hackathon_id,
        team_name=team.name,
        leader_email=team.leader_email,
        members=tuple(Member(email=m.email, name=m.name) for m in ordered),
        submitted=team.submitted,
        submitted_at=team.submitted_at,
    )


class TeamRegistry:
    def __init__(self, session_factory: async_sessionmaker, locks: Optional[KeyedLock] = None):
        self._session_factory = session_factory
        self._locks = locks or KeyedLock()

    # ═══════════════════════════════════════════════════════════════
    #  Helpers
    # ═══════════════════════════════════════════════════════════════

    async def _load_team(
        self, db: AsyncSession, hackathon_id: int, code: str, for_update: bool = False
    ) -> Team:
        stmt = select(Team).where(Team.hackathon_id == hackathon_id, Team.code == code)
        if for_update:
            stmt = stmt.with_for_update()
        team = (await db.execute(stmt)).scalar_one_or_none()
        if not team:
            raise NotFound("team_not_found", "No team found with this code.")
        # Make sure the roster reflects this transaction's view.
        await db.refresh(team, attribute_names=["memberships"])
        return team

    async def _membership_of(
        self, db: AsyncSession, hackathon_id: int, email: str
    ) -> Optional[TeamMembership]:
        result = await db.execute(
            select(TeamMembership).where(
                TeamMembership.hackathon_id == hackathon_id,
                TeamMembership.email == email,
            )
        )
        return result.scalar_one_or_none()

    async def _fresh_code(self, db: AsyncSession, hackathon_id: int) -> str:
        for _ in range(settings.CODE_GENERATION_ATTEMPTS):
            code = generate_team_code()
            taken = await db.execute(
                select(Team.id).where(Team.hackathon_id == hackathon_id, Team.code == code)
            )
            if taken.scalar_one_or_none() is None:
                return code
        raise Conflict("team_code_unavailable", "Could not allocate a team code, please retry.")

    # ═══════════════════════════════════════════════════════════════
    #  CreateTeam
    # ═══════════════════════════════════════════════════════════════

    async def create_team(self, hackathon_id: int, team_name: str, leader_email: str) -> CreatedTeam:
        name = _normalize_team_name(team_name)
        email = normalize_email(leader_email)

        # A lost race on the code, the name or the membership surfaces as an
        # IntegrityError; the next attempt's checks turn it into a Conflict.
        for attempt in range(settings.CODE_GENERATION_ATTEMPTS):
            try:
                created = await self._try_create(hackathon_id, name, email)
            except IntegrityError:
                logger.warning(
                    f"Team creation race in hackathon {hackathon_id} (attempt {attempt + 1})"
                )
                continue
            logger.info(
                f"Team {created.team.team_id} '{name}' created in hackathon {hackathon_id} by {email}"
            )
            return created
        raise Conflict("team_code_unavailable", "Could not allocate a team code, please retry.")

    async def _try_create(self, hackathon_id: int, name: str, email: str) -> CreatedTeam:
        async with self._session_factory() as db:
            async with db.begin():
                await directory.require_hackathon(db, hackathon_id)
                registration = await directory.require_registration(db, hackathon_id, email)

                if await self._membership_of(db, hackathon_id, email):
                    raise Conflict(
                        "already_in_team", "You already have a team for this hackathon."
                    )
                clash = await db.execute(
                    select(Team.id).where(
                        Team.hackathon_id == hackathon_id, Team.name_key == name.casefold()
                    )
                )
                if clash.scalar_one_or_none() is not None:
                    raise Conflict(
                        "team_name_taken", "A team with this name already exists in this hackathon."
                    )

                team = Team(
                    hackathon_id=hackathon_id,
                    code=await self._fresh_code(db, hackathon_id),
                    name=name,
                    name_key=name.casefold(),
                    leader_email=email,
                    submitted=False,
                )
                db.add(team)
                await db.flush()  # to get team.id

                db.add(
                    TeamMembership(
                        team_id=team.id,
                        hackathon_id=hackathon_id,
                        email=email,
                        name=registration.full_name,
                        role=Role.Lead,
                    )
                )
                await db.flush()
                await db.refresh(team, attribute_names=["memberships"])

                available = await directory.list_unteamed_registrations(db, hackathon_id)
                return CreatedTeam(
                    team=_snapshot(team),
                    available_members=tuple(Member(email=r.email, name=r.full_name) for r in available),
                )

    # ═══════════════════════════════════════════════════════════════
    #  JoinTeam
    # ═══════════════════════════════════════════════════════════════

    async def join_team(self, hackathon_id: int, team_code: str, member_email: str) -> TeamSnapshot:
        code = normalize_team_code(team_code)
        email = normalize_email(member_email)

        async with self._locks.hold(("team", hackathon_id, code)):
            try:
                async with self._session_factory() as db:
                    async with db.begin():
                        snapshot = await self._join(db, hackathon_id, code, email)
            except IntegrityError as e:
                # Another request put this participant on a different team first.
                raise Conflict(
                    "already_in_team", "You already belong to a team in this hackathon."
                ) from e

        logger.info(f"{email} joined team {code} in hackathon {hackathon_id}")
        return snapshot

    async def _join(self, db: AsyncSession, hackathon_id: int, code: str, email: str) -> TeamSnapshot:
        hackathon = await directory.require_hackathon(db, hackathon_id)
        team = await self._load_team(db, hackathon_id, code, for_update=True)
        registration = await directory.require_registration(db, hackathon_id, email)

        if team.submitted:
            raise Conflict("team_submitted", "This team has already been submitted.")
        if any(m.email == email for m in team.memberships):
            raise Conflict("already_member", "You are already a member of this team.")
        if await self._membership_of(db, hackathon_id, email):
            raise Conflict("already_in_team", "You already belong to a team in this hackathon.")
        if hackathon.max_team_size is not None and len(team.memberships) >= hackathon.max_team_size:
            raise Conflict("team_full", "Team is already at maximum capacity.")

        db.add(
            TeamMembership(
                team_id=team.id,
                hackathon_id=hackathon_id,
                email=email,
                name=registration.full_name,
                role=Role.Member,
            )
        )
        await db.flush()
        await db.refresh(team, attribute_names=["memberships"])
        return _snapshot(team)

    # ═══════════════════════════════════════════════════════════════
    #  SubmitTeam
    # ═══════════════════════════════════════════════════════════════

    async def submit_team(self, hackathon_id: int, team_code: str, requester_email: str) -> TeamSnapshot:
        code = normalize_team_code(team_code)
        email = normalize_email(requester_email)

        async with self._locks.hold(("team", hackathon_id, code)):
            async with self._session_factory() as db:
                async with db.begin():
                    hackathon = await directory.require_hackathon(db, hackathon_id)
                    team = await self._load_team(db, hackathon_id, code, for_update=True)

                    if team.leader_email != email:
                        raise PermissionDenied(
                            "not_team_leader", "Only the team leader can submit the team."
                        )
                    if team.submitted:
                        raise PreconditionFailed(
                            "already_submitted", "This team has already been submitted."
                        )
                    minimum = max(MIN_SUBMIT_SIZE, hackathon.min_team_size or 0)
                    if len(team.memberships) < minimum:
                        raise PreconditionFailed(
                            "team_too_small", f"A team needs at least {minimum} members to be submitted."
                        )

                    team.submitted = True
                    team.submitted_at = datetime.now(timezone.utc)
                    await db.flush()
                    snapshot = _snapshot(team)

        logger.info(f"Team {code} submitted in hackathon {hackathon_id} with {snapshot.size} members")
        return snapshot

    # ═══════════════════════════════════════════════════════════════
    #  Reads
    # ═══════════════════════════════════════════════════════════════

    async def check_presence(self, participant_email: str, hackathon_id: int) -> Optional[TeamSnapshot]:
        """Return the participant's team in this hackathon, or None."""
        email = normalize_email(participant_email)
        async with self._session_factory() as db:
            membership = await self._membership_of(db, hackathon_id, email)
            if not membership:
                return None
            team = (await db.execute(select(Team).where(Team.id == membership.team_id))).scalar_one()
            await db.refresh(team, attribute_names=["memberships"])
            return _snapshot(team)

    async def available_members(self, hackathon_id: int, requester_email: str) -> List[Member]:
        """Registered participants without a team; for registrants and the organizer."""
        email = normalize_email(requester_email)
        async with self._session_factory() as db:
            hackathon = await directory.require_hackathon(db, hackathon_id)
            if not directory.is_organizer(hackathon, email):
                await directory.require_registration(db, hackathon_id, email)
            registrations = await directory.list_unteamed_registrations(db, hackathon_id)
            return [Member(email=r.email, name=r.full_name) for r in registrations]

    async def submitted_teams(self, hackathon_id: int, requester_email: str) -> List[TeamSnapshot]:
        """Organizer-only roster export of submitted teams, in submission order."""
        email = normalize_email(requester_email)
        async with self._session_factory() as db:
            hackathon = await directory.require_hackathon(db, hackathon_id)
            directory.require_organizer(hackathon, email)
            result = await db.execute(
                select(Team)
                .where(Team.hackathon_id == hackathon_id, Team.submitted.is_(True))
                .order_by(Team.submitted_at, Team.id)
            )
            teams = result.scalars().all()
            snapshots = []
            for team in teams:
                await db.refresh(team, attribute_names=["memberships"])
                snapshots.append(_snapshot(team))
            return snapshots
