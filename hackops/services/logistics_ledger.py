"""
Logistics ledger — per-hackathon inventory and exact-once redemptions.

``redeem`` is the hot path. For one item, the sequence

    already redeemed?  →  stock left?  →  append recipient + bump counter

runs under the item's lock, in one transaction holding the item row
``FOR UPDATE``. The ``(item_id, email)`` unique constraint and the
``given_away <= total_quantity`` check back this up at the database, so
``given_away == len(recipients)`` holds under any interleaving.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlalchemy.orm import selectinload

from hackops.config import settings
from hackops.errors import Conflict, Exhausted, NotFound, ValidationFailed
from hackops.models.logistics import LogisticsItem, Redemption
from hackops.services import directory
from hackops.services.locks import KeyedLock
from hackops.utils.codes import generate_secret_code, normalize_secret_code
from hackops.utils.emails import normalize_email

logger = logging.getLogger(__name__)

ITEM_NAME_MIN = 3
ITEM_NAME_MAX = 100
QUANTITY_MIN = 1
QUANTITY_MAX = 10000


@dataclass(frozen=True)
class Recipient:
    email: str
    redeemed_at: Optional[datetime]


@dataclass(frozen=True)
class ItemView:
    logistics_id: str
    hackathon_id: int
    name: str
    total_quantity: int
    given_away: int
    secret_code: str
    created_by: str
    created_at: Optional[datetime]
    recipients: Tuple[Recipient, ...]

    @property
    def remaining(self) -> int:
        return max(0, self.total_quantity - self.given_away)


@dataclass(frozen=True)
class LogisticsSummary:
    total_items: int
    total_quantity: int
    total_given_away: int

    @property
    def total_remaining(self) -> int:
        return self.total_quantity - self.total_given_away


@dataclass(frozen=True)
class RedemptionResult:
    logistics_id: str
    item_name: str
    participant_email: str
    given_away: int
    total_quantity: int

    @property
    def remaining(self) -> int:
        return self.total_quantity - self.given_away


def summarize(items: List[ItemView]) -> LogisticsSummary:
    return LogisticsSummary(
        total_items=len(items),
        total_quantity=sum(i.total_quantity for i in items),
        total_given_away=sum(i.given_away for i in items),
    )


def _validate_item(name: str, total_quantity) -> Tuple[str, int]:
    clean = (name or "").strip()
    if not ITEM_NAME_MIN <= len(clean) <= ITEM_NAME_MAX:
        raise ValidationFailed(
            "invalid_logistics_name",
            f"Logistics name must be between {ITEM_NAME_MIN} and {ITEM_NAME_MAX} characters.",
        )
    if isinstance(total_quantity, bool) or not isinstance(total_quantity, int):
        raise ValidationFailed("invalid_quantity", "Total quantity must be a whole number.")
    if not QUANTITY_MIN <= total_quantity <= QUANTITY_MAX:
        raise ValidationFailed(
            "invalid_quantity",
            f"Total quantity must be between {QUANTITY_MIN} and {QUANTITY_MAX:,}.",
        )
    return clean, total_quantity


def _view(item: LogisticsItem) -> ItemView:
    return ItemView(
        logistics_id=item.logistics_id,
        hackathon_id=item.hackathon_id,
        name=item.name,
        total_quantity=item.total_quantity,
        given_away=item.given_away,
        secret_code=item.secret_code,
        created_by=item.created_by,
        created_at=item.created_at,
        recipients=tuple(Recipient(email=r.email, redeemed_at=r.redeemed_at) for r in item.redemptions),
    )


class LogisticsLedger:
    def __init__(self, session_factory: async_sessionmaker, locks: Optional[KeyedLock] = None):
        self._session_factory = session_factory
        self._locks = locks or KeyedLock()

    # ═══════════════════════════════════════════════════════════════
    #  AddItem
    # ═══════════════════════════════════════════════════════════════

    async def add_item(self, hackathon_id: int, name: str, total_quantity: int, creator_email: str) -> ItemView:
        clean_name, quantity = _validate_item(name, total_quantity)
        email = normalize_email(creator_email)

        for attempt in range(settings.CODE_GENERATION_ATTEMPTS):
            try:
                async with self._session_factory() as db:
                    async with db.begin():
                        hackathon = await directory.require_hackathon(db, hackathon_id)
                        directory.require_organizer(hackathon, email)

                        item = LogisticsItem(
                            logistics_id=uuid.uuid4().hex,
                            hackathon_id=hackathon_id,
                            name=clean_name,
                            total_quantity=quantity,
                            given_away=0,
                            secret_code=generate_secret_code(),
                            created_by=email,
                        )
                        db.add(item)
                        await db.flush()
                        await db.refresh(item, attribute_names=["redemptions", "created_at"])
                        view = _view(item)
            except IntegrityError:
                # Secret code collision; codes are never reused, so draw again.
                logger.warning(f"Secret code collision adding logistics (attempt {attempt + 1})")
                continue
            logger.info(
                f"Logistics item {view.logistics_id} '{clean_name}' x{quantity} added to hackathon {hackathon_id}"
            )
            return view
        raise Conflict("secret_code_unavailable", "Could not allocate a secret code, please retry.")

    # ═══════════════════════════════════════════════════════════════
    #  ListItems
    # ═══════════════════════════════════════════════════════════════

    async def list_items(self, hackathon_id: int, requester_email: str) -> List[ItemView]:
        """All items of a hackathon, with counters and recipients. Organizer only."""
        email = normalize_email(requester_email)
        async with self._session_factory() as db:
            hackathon = await directory.require_hackathon(db, hackathon_id)
            directory.require_organizer(hackathon, email)
            result = await db.execute(
                select(LogisticsItem)
                .where(LogisticsItem.hackathon_id == hackathon_id)
                .options(selectinload(LogisticsItem.redemptions))
                .order_by(LogisticsItem.id)
            )
            return [_view(item) for item in result.scalars().all()]

    # ═══════════════════════════════════════════════════════════════
    #  Redeem
    # ═══════════════════════════════════════════════════════════════

    async def redeem(self, secret_code: str, participant_email: str) -> RedemptionResult:
        code = normalize_secret_code(secret_code)
        email = normalize_email(participant_email)

        async with self._locks.hold(("logistics", code)):
            try:
                async with self._session_factory() as db:
                    async with db.begin():
                        result = await self._redeem(db, code, email)
            except IntegrityError as e:
                # Only reachable when another process redeemed the same pair
                # between our check and our insert.
                logger.warning(f"Duplicate redemption for {email} caught by constraint")
                raise Conflict(
                    "already_redeemed", "This participant has already received this item."
                ) from e

        logger.info(
            f"Redeemed '{result.item_name}' for {email}: {result.remaining}/{result.total_quantity} left"
        )
        return result

    async def _already_redeemed(self, db, item_id: int, email: str) -> bool:
        result = await db.execute(
            select(Redemption.id).where(Redemption.item_id == item_id, Redemption.email == email)
        )
        return result.scalar_one_or_none() is not None

    async def _redeem(self, db, code: str, email: str) -> RedemptionResult:
        item = (
            await db.execute(
                select(LogisticsItem).where(LogisticsItem.secret_code == code).with_for_update()
            )
        ).scalar_one_or_none()
        if not item:
            raise NotFound("logistics_not_found", "Invalid secret code.")

        if await self._already_redeemed(db, item.id, email):
            logger.warning(f"{email} already redeemed '{item.name}'")
            raise Conflict("already_redeemed", "This participant has already received this item.")

        if item.given_away >= item.total_quantity:
            logger.warning(f"'{item.name}' is exhausted, refused {email}")
            raise Exhausted("item_exhausted", "No more units of this item are available.")

        db.add(Redemption(item_id=item.id, email=email))
        item.given_away += 1
        await db.flush()

        return RedemptionResult(
            logistics_id=item.logistics_id,
            item_name=item.name,
            participant_email=email,
            given_away=item.given_away,
            total_quantity=item.total_quantity,
        )
