"""Seed the hackathon directory: one hackathon, its organizer and registrants.

Usage:
    python seed_hackathons.py organizer@hack.io alice@hack.io:"Alice Doe" bob@hack.io
"""

import asyncio
import sys

from sqlalchemy import select

from hackops import models  # noqa: F401
from hackops.database import Base, async_session, engine
from hackops.models.hackathon import Hackathon, HackathonRegistration
from hackops.utils.emails import normalize_email


def _parse_registrant(arg: str):
    email, _, name = arg.partition(":")
    email = normalize_email(email)
    return email, (name.strip() or email.split("@")[0])


async def seed_hackathon(organizer: str, registrants, title: str = "Build For Bharat 2026"):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as db:
        hackathon = Hackathon(
            title=title,
            organizer_email=normalize_email(organizer),
            max_team_size=4,
            min_team_size=2,
        )
        db.add(hackathon)
        await db.flush()

        for email, name in registrants:
            exists = await db.execute(
                select(HackathonRegistration.id).where(
                    HackathonRegistration.hackathon_id == hackathon.id,
                    HackathonRegistration.email == email,
                )
            )
            if exists.scalar_one_or_none() is None:
                db.add(HackathonRegistration(hackathon_id=hackathon.id, email=email, full_name=name))

        await db.commit()
        print(f"Created hackathon {hackathon.id} '{title}' organised by {hackathon.organizer_email}")
        print(f"Registered {len(registrants)} participants.")

    await engine.dispose()


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)
    asyncio.run(seed_hackathon(sys.argv[1], [_parse_registrant(a) for a in sys.argv[2:]]))
