"""Logistics models — inventory items and their append-only redemptions."""

from datetime import datetime
from typing import List

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hackops.database import Base


class LogisticsItem(Base):
    __tablename__ = "logistics_items"
    __table_args__ = (
        CheckConstraint("given_away >= 0", name="ck_logistics_given_away_nonneg"),
        CheckConstraint("given_away <= total_quantity", name="ck_logistics_given_away_le_total"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    logistics_id: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    hackathon_id: Mapped[int] = mapped_column(
        ForeignKey("hackathons.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    total_quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    given_away: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    secret_code: Mapped[str] = mapped_column(String(20), unique=True, nullable=False, index=True)

    created_by: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    redemptions: Mapped[List["Redemption"]] = relationship(
        "Redemption", back_populates="item", order_by="Redemption.id"
    )

    @property
    def remaining(self) -> int:
        return max(0, self.total_quantity - self.given_away)


class Redemption(Base):
    __tablename__ = "logistics_redemptions"
    __table_args__ = (
        UniqueConstraint("item_id", "email", name="uq_redemption_item_email"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    item_id: Mapped[int] = mapped_column(
        ForeignKey("logistics_items.id"), nullable=False, index=True
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    redeemed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    item: Mapped[LogisticsItem] = relationship("LogisticsItem", back_populates="redemptions")
