"""
Cache Tests - TTL Snapshot Cache and Single-Flight

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- tokenstats.application.cache (TTLCache, SingleFlight)
"""
import asyncio
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from conftest import FakeClock
from tokenstats.application.cache import SingleFlight, TTLCache
from tokenstats.domain.models import TokenStats


def snapshot(price="1"):
    return TokenStats.build(
        price=Decimal(price),
        total_supply=Decimal(100),
        founder_balance=Decimal(10),
        burned_balance=Decimal(5),
        holder_count=3,
        last_updated=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


class TestTTLCache:
    def test_empty(self):
        cache = TTLCache(60, clock=FakeClock())
        assert cache.get() is None
        assert cache.last() is None

    def test_fresh_entry_and_age(self):
        clock = FakeClock()
        cache = TTLCache(60, clock=clock)
        value = snapshot()
        cache.set(value)

        clock.advance(15)
        cached, age = cache.get()
        assert cached is value
        assert age == 15

    def test_expiry_keeps_last(self):
        clock = FakeClock()
        cache = TTLCache(60, clock=clock)
        cache.set(snapshot())

        clock.advance(60)
        assert cache.get() is not None
        clock.advance(1)
        assert cache.get() is None
        assert cache.last().value.price == Decimal("1")

    def test_set_replaces_and_resets_age(self):
        clock = FakeClock()
        cache = TTLCache(60, clock=clock)
        cache.set(snapshot("1"))
        clock.advance(30)
        cache.set(snapshot("2"))

        cached, age = cache.get()
        assert cached.price == Decimal("2")
        assert age == 0

    def test_clear(self):
        cache = TTLCache(60, clock=FakeClock())
        cache.set(snapshot())
        cache.clear()
        assert cache.last() is None

    def test_invalid_ttl(self):
        with pytest.raises(ValueError):
            TTLCache(0)


class TestSingleFlight:
    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_run(self):
        flight = SingleFlight()
        started = []

        async def work():
            started.append(1)
            await asyncio.sleep(0.01)
            return "result"

        results = await asyncio.gather(*(flight.do(work) for _ in range(10)))

        assert results == ["result"] * 10
        assert len(started) == 1
        assert flight.runs == 1
        assert not flight.in_flight

    @pytest.mark.asyncio
    async def test_error_shared_and_next_call_runs_again(self):
        flight = SingleFlight()

        async def fail():
            await asyncio.sleep(0)
            raise RuntimeError("upstream down")

        results = await asyncio.gather(flight.do(fail), flight.do(fail), return_exceptions=True)
        assert all(isinstance(r, RuntimeError) for r in results)
        assert flight.runs == 1

        with pytest.raises(RuntimeError):
            await flight.do(fail)
        assert flight.runs == 2

    @pytest.mark.asyncio
    async def test_cancelled_caller_does_not_cancel_shared_run(self):
        flight = SingleFlight()
        release = asyncio.Event()

        async def work():
            await release.wait()
            return "done"

        first = asyncio.ensure_future(flight.do(work))
        second = asyncio.ensure_future(flight.do(work))
        await asyncio.sleep(0)
        first.cancel()
        release.set()

        assert await second == "done"
        with pytest.raises(asyncio.CancelledError):
            await first
