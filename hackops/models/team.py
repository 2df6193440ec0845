"""Team model."""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hackops.database import Base


class Team(Base):
    __tablename__ = "teams"
    __table_args__ = (
        UniqueConstraint("hackathon_id", "code", name="uq_team_hackathon_code"),
        UniqueConstraint("hackathon_id", "name_key", name="uq_team_hackathon_name"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    hackathon_id: Mapped[int] = mapped_column(
        ForeignKey("hackathons.id"), nullable=False, index=True
    )

    # Public join code, stored upper-case.
    code: Mapped[str] = mapped_column(String(6), nullable=False)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    # Case-folded name, the uniqueness key.
    name_key: Mapped[str] = mapped_column(String(100), nullable=False)
    leader_email: Mapped[str] = mapped_column(String(255), nullable=False)

    submitted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    submitted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    memberships: Mapped[List["TeamMembership"]] = relationship(  # noqa: F821
        "TeamMembership",
        back_populates="team",
        order_by="TeamMembership.id",
        cascade="all, delete-orphan",
    )
