"""Team Membership model."""

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hackops.database import Base


class Role(str, enum.Enum):
    Lead = "Lead"
    Member = "Member"


class TeamMembership(Base):
    __tablename__ = "team_memberships"
    # One team per participant per hackathon, enforced by the database.
    __table_args__ = (
        UniqueConstraint("hackathon_id", "email", name="uq_membership_hackathon_email"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    team_id: Mapped[int] = mapped_column(
        ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True
    )
    hackathon_id: Mapped[int] = mapped_column(ForeignKey("hackathons.id"), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)

    role: Mapped[Role] = mapped_column(Enum(Role), default=Role.Member)

    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    team: Mapped["Team"] = relationship("Team", back_populates="memberships")  # noqa: F821
