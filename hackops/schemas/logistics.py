"""Logistics and volunteer Pydantic schemas."""

from datetime import datetime
from typing import List, Optional

from hackops.schemas.base import CamelModel, HackathonScopedRequest
from hackops.services.logistics_ledger import ItemView, LogisticsSummary, RedemptionResult


class LogisticsCreate(HackathonScopedRequest):
    logistics_name: str
    total_quantity: int


class LogisticsFetch(HackathonScopedRequest):
    pass


class AddLogisticsResponse(CamelModel):
    message: str
    logistics_id: str
    secret_code: str


class RecipientOut(CamelModel):
    email: str
    redeemed_at: Optional[datetime] = None


class LogisticsItemOut(CamelModel):
    logistics_id: str
    hackathon_id: int
    logistics_name: str
    total_quantity: int
    given_away: int
    remaining: int
    secret_code: str
    participants: List[RecipientOut]
    created_by: str
    created_at: Optional[datetime] = None

    @classmethod
    def from_view(cls, item: ItemView) -> "LogisticsItemOut":
        return cls(
            logistics_id=item.logistics_id,
            hackathon_id=item.hackathon_id,
            logistics_name=item.name,
            total_quantity=item.total_quantity,
            given_away=item.given_away,
            remaining=item.remaining,
            secret_code=item.secret_code,
            participants=[RecipientOut(email=r.email, redeemed_at=r.redeemed_at) for r in item.recipients],
            created_by=item.created_by,
            created_at=item.created_at,
        )


class SummaryOut(CamelModel):
    total_items: int
    total_quantity: int
    total_given_away: int
    total_remaining: int

    @classmethod
    def from_summary(cls, summary: LogisticsSummary) -> "SummaryOut":
        return cls(
            total_items=summary.total_items,
            total_quantity=summary.total_quantity,
            total_given_away=summary.total_given_away,
            total_remaining=summary.total_remaining,
        )


class FetchLogisticsResponse(CamelModel):
    message: str
    logistics: List[LogisticsItemOut]
    summary: SummaryOut


# ── Redemption ──

class RedeemRequest(CamelModel):
    secret_code: str
    email: str


class DutyBindRequest(CamelModel):
    secret_code: str


class AssignRequest(CamelModel):
    email: str


class RedeemResponse(CamelModel):
    message: str
    logistics_id: str
    logistics_name: str
    email: str
    given_away: int
    remaining: int

    @classmethod
    def from_result(cls, result: RedemptionResult) -> "RedeemResponse":
        return cls(
            message=f"{result.item_name} assigned to {result.participant_email}.",
            logistics_id=result.logistics_id,
            logistics_name=result.item_name,
            email=result.participant_email,
            given_away=result.given_away,
            remaining=result.remaining,
        )


class DutyStatusResponse(CamelModel):
    message: str
    bound: bool
