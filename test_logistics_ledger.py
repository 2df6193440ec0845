"""
Tests for the logistics ledger

Verifies:
- organizer-only item creation and listing, input validation
- exact-once redemption: Conflict on repeats, Exhausted at zero stock
- given_away == len(recipients) under concurrent redemption
"""

import asyncio
import re

import pytest

from conftest import LEADER, MEMBER, ORGANIZER, ledger_state
from hackops.database import async_session
from hackops.errors import Conflict, Exhausted, NotFound, PermissionDenied, ValidationFailed
from hackops.services.logistics_ledger import LogisticsLedger, summarize


@pytest.fixture
def ledger():
    return LogisticsLedger(async_session)


# ═══════════════════════════════════════════════════════════════
#  AddItem / ListItems
# ═══════════════════════════════════════════════════════════════

@pytest.mark.asyncio
async def test_add_item(ledger, hackathon_id):
    item = await ledger.add_item(hackathon_id, " T-Shirts ", 100, ORGANIZER)

    assert item.name == "T-Shirts"
    assert item.total_quantity == 100
    assert item.given_away == 0
    assert item.remaining == 100
    assert item.recipients == ()
    assert re.fullmatch(r"[2-9A-HJKMNP-Z]{4}-[2-9A-HJKMNP-Z]{4}-[2-9A-HJKMNP-Z]{4}", item.secret_code)


@pytest.mark.asyncio
async def test_secret_codes_are_unique(ledger, hackathon_id):
    items = [await ledger.add_item(hackathon_id, f"Item {i}", 5, ORGANIZER) for i in range(20)]
    assert len({i.secret_code for i in items}) == 20
    assert len({i.logistics_id for i in items}) == 20


@pytest.mark.asyncio
async def test_add_item_is_organizer_only(ledger, hackathon_id):
    with pytest.raises(PermissionDenied) as exc:
        await ledger.add_item(hackathon_id, "Stickers", 10, LEADER)
    assert exc.value.reason == "not_organizer"


@pytest.mark.asyncio
async def test_add_item_unknown_hackathon(ledger, hackathon_id):
    with pytest.raises(NotFound):
        await ledger.add_item(hackathon_id + 1, "Stickers", 10, ORGANIZER)


@pytest.mark.parametrize(
    "name, quantity",
    [("ab", 10), ("x" * 101, 10), ("Stickers", 0), ("Stickers", 10001), ("Stickers", True), ("Stickers", 2.5)],
)
@pytest.mark.asyncio
async def test_add_item_validation(ledger, hackathon_id, name, quantity):
    with pytest.raises(ValidationFailed):
        await ledger.add_item(hackathon_id, name, quantity, ORGANIZER)


@pytest.mark.asyncio
async def test_list_items(ledger, hackathon_id):
    assert await ledger.list_items(hackathon_id, ORGANIZER) == []

    shirts = await ledger.add_item(hackathon_id, "T-Shirts", 3, ORGANIZER)
    await ledger.add_item(hackathon_id, "Stickers", 10, ORGANIZER)
    await ledger.redeem(shirts.secret_code, LEADER)
    await ledger.redeem(shirts.secret_code, MEMBER)

    items = await ledger.list_items(hackathon_id, ORGANIZER)
    assert [i.name for i in items] == ["T-Shirts", "Stickers"]
    assert items[0].given_away == 2
    assert items[0].remaining == 1
    assert [r.email for r in items[0].recipients] == [LEADER, MEMBER]

    summary = summarize(items)
    assert (summary.total_items, summary.total_quantity, summary.total_given_away) == (2, 13, 2)
    assert summary.total_remaining == 11

    with pytest.raises(PermissionDenied):
        await ledger.list_items(hackathon_id, LEADER)


# ═══════════════════════════════════════════════════════════════
#  Redeem
# ═══════════════════════════════════════════════════════════════

@pytest.mark.asyncio
async def test_redemption_scenario(ledger, hackathon_id):
    item = await ledger.add_item(hackathon_id, "Swag Bags", 2, ORGANIZER)

    assert (await ledger.redeem(item.secret_code, "a@x.com")).remaining == 1
    assert (await ledger.redeem(item.secret_code, "b@x.com")).remaining == 0

    with pytest.raises(Exhausted):
        await ledger.redeem(item.secret_code, "c@x.com")
    with pytest.raises(Conflict) as exc:
        await ledger.redeem(item.secret_code, "a@x.com")
    assert exc.value.reason == "already_redeemed"

    assert await ledger_state(item.logistics_id) == (2, ["a@x.com", "b@x.com"])


@pytest.mark.asyncio
async def test_exhausted_leaves_state_unchanged(ledger, hackathon_id):
    item = await ledger.add_item(hackathon_id, "Badges", 1, ORGANIZER)
    await ledger.redeem(item.secret_code, "a@x.com")

    for email in ("b@x.com", "c@x.com", "d@x.com"):
        with pytest.raises(Exhausted) as exc:
            await ledger.redeem(item.secret_code, email)
        assert exc.value.reason == "item_exhausted"

    assert await ledger_state(item.logistics_id) == (1, ["a@x.com"])


@pytest.mark.asyncio
async def test_redeem_unknown_code(ledger, hackathon_id):
    with pytest.raises(NotFound) as exc:
        await ledger.redeem("NOPE-NOPE-NOPE", "a@x.com")
    assert exc.value.reason == "logistics_not_found"


@pytest.mark.asyncio
async def test_redeem_normalises_code_and_email(ledger, hackathon_id):
    item = await ledger.add_item(hackathon_id, "Lanyards", 5, ORGANIZER)
    result = await ledger.redeem(f"  {item.secret_code.lower()} ", " A@X.com ")
    assert result.participant_email == "a@x.com"

    with pytest.raises(Conflict):
        await ledger.redeem(item.secret_code, "a@x.com")


@pytest.mark.parametrize("code, email", [("", "a@x.com"), ("ABCD-EFGH-JKMN", "not-an-email")])
@pytest.mark.asyncio
async def test_redeem_validation(ledger, hackathon_id, code, email):
    with pytest.raises(ValidationFailed):
        await ledger.redeem(code, email)


@pytest.mark.asyncio
async def test_items_are_independent(ledger, hackathon_id):
    shirts = await ledger.add_item(hackathon_id, "T-Shirts", 1, ORGANIZER)
    food = await ledger.add_item(hackathon_id, "Lunch", 1, ORGANIZER)

    await ledger.redeem(shirts.secret_code, "a@x.com")
    assert (await ledger.redeem(food.secret_code, "a@x.com")).remaining == 0


# ═══════════════════════════════════════════════════════════════
#  Concurrency
# ═══════════════════════════════════════════════════════════════

@pytest.mark.asyncio
async def test_fifty_redemptions_against_thirty_units(ledger, hackathon_id):
    item = await ledger.add_item(hackathon_id, "Hoodies", 30, ORGANIZER)
    emails = [f"p{i:02d}@x.com" for i in range(50)]

    results = await asyncio.gather(
        *(ledger.redeem(item.secret_code, e) for e in emails), return_exceptions=True
    )

    successes = [r for r in results if not isinstance(r, Exception)]
    failures = [r for r in results if isinstance(r, Exception)]
    assert len(successes) == 30
    assert len(failures) == 20
    assert all(isinstance(f, Exhausted) for f in failures)

    given_away, recipients = await ledger_state(item.logistics_id)
    assert given_away == 30
    assert len(recipients) == len(set(recipients)) == 30
    assert sorted(r.remaining for r in successes) == list(range(30))


@pytest.mark.asyncio
async def test_concurrent_repeats_for_one_participant(ledger, hackathon_id):
    item = await ledger.add_item(hackathon_id, "Mugs", 10, ORGANIZER)

    results = await asyncio.gather(
        *(ledger.redeem(item.secret_code, "a@x.com") for _ in range(8)), return_exceptions=True
    )

    assert sum(not isinstance(r, Exception) for r in results) == 1
    assert all(isinstance(r, Conflict) for r in results if isinstance(r, Exception))
    assert await ledger_state(item.logistics_id) == (1, ["a@x.com"])


@pytest.mark.asyncio
async def test_concurrent_redemptions_across_items(ledger, hackathon_id):
    items = [await ledger.add_item(hackathon_id, f"Item {i}", 5, ORGANIZER) for i in range(3)]
    attempts = [(item, f"p{n}@x.com") for item in items for n in range(7)]

    results = await asyncio.gather(
        *(ledger.redeem(item.secret_code, email) for item, email in attempts), return_exceptions=True
    )

    assert sum(isinstance(r, Exhausted) for r in results) == 6
    for item in items:
        given_away, recipients = await ledger_state(item.logistics_id)
        assert given_away == len(recipients) == 5


# ═══════════════════════════════════════════════════════════════
#  Separate ledger instances (no shared in-process lock)
# ═══════════════════════════════════════════════════════════════

@pytest.mark.asyncio
async def test_thirty_units_hold_across_ledger_instances(ledger, hackathon_id):
    item = await ledger.add_item(hackathon_id, "Hoodies", 30, ORGANIZER)
    ledgers = [LogisticsLedger(async_session) for _ in range(5)]

    results = await asyncio.gather(
        *(ledgers[i % 5].redeem(item.secret_code, f"p{i:02d}@x.com") for i in range(50)),
        return_exceptions=True,
    )

    assert sum(not isinstance(r, Exception) for r in results) == 30
    assert sum(isinstance(r, Exhausted) for r in results) == 20
    given_away, recipients = await ledger_state(item.logistics_id)
    assert given_away == 30
    assert len(set(recipients)) == 30


@pytest.mark.asyncio
async def test_one_unit_per_participant_across_ledger_instances(ledger, hackathon_id):
    item = await ledger.add_item(hackathon_id, "Mugs", 10, ORGANIZER)
    ledgers = [LogisticsLedger(async_session) for _ in range(8)]

    results = await asyncio.gather(
        *(other.redeem(item.secret_code, "a@x.com") for other in ledgers), return_exceptions=True
    )

    assert sum(not isinstance(r, Exception) for r in results) == 1
    assert sum(isinstance(r, Conflict) for r in results) == 7
    assert await ledger_state(item.logistics_id) == (1, ["a@x.com"])


@pytest.mark.asyncio
async def test_unique_constraint_rejects_a_missed_duplicate(ledger, hackathon_id, monkeypatch):
    item = await ledger.add_item(hackathon_id, "Badges", 5, ORGANIZER)
    await ledger.redeem(item.secret_code, "a@x.com")

    async def never_redeemed(db, item_id, email):
        return False

    monkeypatch.setattr(ledger, "_already_redeemed", never_redeemed)

    with pytest.raises(Conflict) as exc:
        await ledger.redeem(item.secret_code, "a@x.com")
    assert exc.value.reason == "already_redeemed"
    assert await ledger_state(item.logistics_id) == (1, ["a@x.com"])
