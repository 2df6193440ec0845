import asyncio

import pytest

from hackops.services.locks import KeyedLock


@pytest.mark.asyncio
async def test_same_key_is_serialised():
    locks = KeyedLock()
    events = []

    async def worker(n):
        async with locks.hold("item"):
            events.append(("in", n))
            await asyncio.sleep(0.01)
            events.append(("out", n))

    await asyncio.gather(*(worker(n) for n in range(4)))

    # Every "in" is immediately followed by its own "out".
    for i in range(0, len(events), 2):
        assert events[i][0] == "in"
        assert events[i + 1] == ("out", events[i][1])


@pytest.mark.asyncio
async def test_different_keys_run_together():
    locks = KeyedLock()
    inside = set()
    overlap = []

    async def worker(key):
        async with locks.hold(key):
            inside.add(key)
            await asyncio.sleep(0.01)
            overlap.append(len(inside))
            inside.discard(key)

    await asyncio.gather(worker("a"), worker("b"))
    assert max(overlap) == 2


@pytest.mark.asyncio
async def test_idle_keys_are_dropped():
    locks = KeyedLock()

    async with locks.hold(("team", 1, "ABC123")):
        assert len(locks) == 1
    assert len(locks) == 0

    with pytest.raises(RuntimeError):
        async with locks.hold("x"):
            raise RuntimeError("boom")
    assert len(locks) == 0
