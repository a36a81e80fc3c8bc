import pytest

from src.adapter.services.memory_counters import InMemoryRateWindowStore
from src.app.services.rate_limiter import RateLimiter, RateLimitPolicy


def make_limiter(policy, clock, store=None, prune_probability=0.0):
    return RateLimiter(
        store or InMemoryRateWindowStore(),
        policy,
        clock=clock,
        prune_probability=prune_probability,
        rng=lambda: 0.5,
    )


@pytest.mark.asyncio
async def test_allows_up_to_max_actions(small_policy, clock):
    limiter = make_limiter(small_policy, clock)

    decisions = [await limiter.check("admin-1") for _ in range(3)]

    assert all(d.allowed for d in decisions)
    assert [d.remaining for d in decisions] == [2, 1, 0]


@pytest.mark.asyncio
async def test_denies_next_action_with_retry_after(small_policy, clock):
    limiter = make_limiter(small_policy, clock)
    for _ in range(3):
        await limiter.check("admin-1")
        clock.advance(10)

    decision = await limiter.check("admin-1")

    assert decision.allowed is False
    # oldest action at t=1000, window 60s, now t=1030
    assert decision.retry_after == 30


@pytest.mark.asyncio
async def test_denied_action_is_not_recorded(small_policy, clock):
    store = InMemoryRateWindowStore()
    limiter = make_limiter(small_policy, clock, store)
    for _ in range(5):
        await limiter.check("admin-1")

    assert len(await store.recent("admin:admin-1", since=0)) == 3


@pytest.mark.asyncio
async def test_window_slides(small_policy, clock):
    limiter = make_limiter(small_policy, clock)
    for _ in range(3):
        await limiter.check("admin-1")

    clock.advance(60)

    assert (await limiter.check("admin-1")).allowed is True


@pytest.mark.asyncio
async def test_actors_are_counted_separately(small_policy, clock):
    limiter = make_limiter(small_policy, clock)
    for _ in range(3):
        await limiter.check("admin-1")

    assert (await limiter.check("admin-1")).allowed is False
    assert (await limiter.check("admin-2")).allowed is True


@pytest.mark.asyncio
async def test_scopes_do_not_share_windows(clock):
    store = InMemoryRateWindowStore()
    exports = make_limiter(RateLimitPolicy(1, 1, scope="export"), clock, store)
    general = make_limiter(RateLimitPolicy(1, 1), clock, store)

    assert (await exports.check("admin-1")).allowed is True
    assert (await general.check("admin-1")).allowed is True
    assert (await exports.check("admin-1")).allowed is False


@pytest.mark.asyncio
async def test_prune_drops_idle_windows(small_policy, clock):
    store = InMemoryRateWindowStore()
    await store.append("admin:idle", clock() - 600)
    limiter = make_limiter(small_policy, clock, store, prune_probability=1.0)

    await limiter.check("admin-1")

    assert await store.recent("admin:idle", since=0) == []
    assert len(await store.recent("admin:admin-1", since=0)) == 1
