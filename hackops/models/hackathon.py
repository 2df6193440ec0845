"""Hackathon directory models — the facts the coordination core reads.

Hackathon metadata and participant registrations are maintained by external
tooling (see ``seed_hackathons.py``); the core never writes these tables.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from hackops.database import Base


class Hackathon(Base):
    __tablename__ = "hackathons"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    organizer_email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    # ── Team constraints ──
    max_team_size: Mapped[Optional[int]] = mapped_column(Integer)
    min_team_size: Mapped[Optional[int]] = mapped_column(Integer, default=2)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


class HackathonRegistration(Base):
    __tablename__ = "hackathon_registrations"
    __table_args__ = (
        UniqueConstraint("hackathon_id", "email", name="uq_registration_hackathon_email"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    hackathon_id: Mapped[int] = mapped_column(
        ForeignKey("hackathons.id", ondelete="CASCADE"), nullable=False, index=True
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    full_name: Mapped[str] = mapped_column(String(200), nullable=False)

    registered_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
