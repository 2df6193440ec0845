"""Read-only lookups over hackathon facts: existence, organizer, registrations."""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hackops.errors import NotFound, PermissionDenied
from hackops.models.hackathon import Hackathon, HackathonRegistration
from hackops.models.team_membership import TeamMembership


async def require_hackathon(db: AsyncSession, hackathon_id: int) -> Hackathon:
    result = await db.execute(select(Hackathon).where(Hackathon.id == hackathon_id))
    hackathon = result.scalar_one_or_none()
    if not hackathon:
        raise NotFound("hackathon_not_found", "Hackathon not found.")
    return hackathon


def is_organizer(hackathon: Hackathon, email: str) -> bool:
    return hackathon.organizer_email.lower() == email


def require_organizer(hackathon: Hackathon, email: str) -> None:
    if not is_organizer(hackathon, email):
        raise PermissionDenied(
            "not_organizer", "Only the hackathon organizer can perform this action."
        )


async def get_registration(
    db: AsyncSession, hackathon_id: int, email: str
) -> Optional[HackathonRegistration]:
    result = await db.execute(
        select(HackathonRegistration).where(
            HackathonRegistration.hackathon_id == hackathon_id,
            HackathonRegistration.email == email,
        )
    )
    return result.scalar_one_or_none()


async def require_registration(
    db: AsyncSession, hackathon_id: int, email: str
) -> HackathonRegistration:
    registration = await get_registration(db, hackathon_id, email)
    if not registration:
        raise PermissionDenied(
            "not_registered", "You must be registered for this hackathon to manage teams."
        )
    return registration


async def list_unteamed_registrations(
    db: AsyncSession, hackathon_id: int
) -> List[HackathonRegistration]:
    """Registered participants of the hackathon who are not on any team yet."""
    teamed = select(TeamMembership.email).where(TeamMembership.hackathon_id == hackathon_id)
    result = await db.execute(
        select(HackathonRegistration)
        .where(
            HackathonRegistration.hackathon_id == hackathon_id,
            HackathonRegistration.email.not_in(teamed),
        )
        .order_by(HackathonRegistration.id)
    )
    return list(result.scalars().all())
