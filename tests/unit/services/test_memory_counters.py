import pytest

from src.adapter.services.memory_counters import InMemoryFailureCounter, InMemoryRateWindowStore


@pytest.mark.asyncio
async def test_recent_only_returns_timestamps_after_since():
    store = InMemoryRateWindowStore()
    for ts in (10.0, 20.0, 30.0):
        await store.append("k", ts)

    assert await store.recent("k", since=15.0) == [20.0, 30.0]


@pytest.mark.asyncio
async def test_prune_respects_prefix():
    store = InMemoryRateWindowStore()
    await store.append("admin:a", 1.0)
    await store.append("export:a", 1.0)

    removed = await store.prune(since=5.0, prefix="admin:")

    assert removed == 1
    assert await store.recent("export:a", since=0) == [1.0]


@pytest.mark.asyncio
async def test_failure_streak_counts_within_window():
    counter = InMemoryFailureCounter()

    counts = [await counter.increment("ip", now, 60) for now in (0, 10, 59)]

    assert counts == [1, 2, 3]
    assert await counter.get("ip", 59) == 3


@pytest.mark.asyncio
async def test_failure_streak_expires_from_its_start():
    """The window is anchored at the first failure, later failures do not extend it"""
    counter = InMemoryFailureCounter()
    await counter.increment("ip", 0, 60)
    await counter.increment("ip", 50, 60)

    assert await counter.get("ip", 60) == 0
    assert await counter.increment("ip", 61, 60) == 1


@pytest.mark.asyncio
async def test_reset_clears_streak():
    counter = InMemoryFailureCounter()
    await counter.increment("ip", 0, 60)

    await counter.reset("ip")
    await counter.reset("unknown")

    assert await counter.get("ip", 1) == 0
