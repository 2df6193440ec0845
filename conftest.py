"""Shared fixtures: a throwaway SQLite database and a seeded hackathon."""

import os
import tempfile

_TMP_DIR = tempfile.mkdtemp(prefix="hackops-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_TMP_DIR, 'hackops.db')}"
os.environ["ENVIRONMENT"] = "test"
os.environ["DEBUG"] = "true"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest_asyncio  # noqa: E402
from sqlalchemy import select  # noqa: E402

from hackops import models  # noqa: E402,F401
from hackops.database import Base, async_session, engine  # noqa: E402
from hackops.models.hackathon import Hackathon, HackathonRegistration  # noqa: E402
from hackops.models.logistics import LogisticsItem, Redemption  # noqa: E402

ORGANIZER = "organizer@x.com"
LEADER = "lena@x.com"
MEMBER = "milo@x.com"
OTHER = "olga@x.com"
PARTICIPANTS = [
    (LEADER, "Lena Leader"),
    (MEMBER, "Milo Member"),
    (OTHER, "Olga Other"),
    ("pia@x.com", "Pia Participant"),
    ("quinn@x.com", "Quinn Participant"),
]


@pytest_asyncio.fixture
async def db_ready():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    await engine.dispose()


async def create_hackathon(participants=PARTICIPANTS, **fields) -> int:
    async with async_session() as db:
        hackathon = Hackathon(
            title=fields.pop("title", "Test Hack"),
            organizer_email=fields.pop("organizer_email", ORGANIZER),
            **fields,
        )
        db.add(hackathon)
        await db.flush()
        for email, name in participants:
            db.add(HackathonRegistration(hackathon_id=hackathon.id, email=email, full_name=name))
        await db.commit()
        return hackathon.id


@pytest_asyncio.fixture
async def hackathon_id(db_ready) -> int:
    return await create_hackathon()


async def ledger_state(logistics_id: str):
    """(given_away, recipient emails in order) straight from the tables."""
    async with async_session() as db:
        item = (
            await db.execute(select(LogisticsItem).where(LogisticsItem.logistics_id == logistics_id))
        ).scalar_one()
        emails = (
            await db.execute(
                select(Redemption.email).where(Redemption.item_id == item.id).order_by(Redemption.id)
            )
        ).scalars().all()
        return item.given_away, list(emails)
