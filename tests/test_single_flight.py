"""Tests for the single-flight resource holder."""

import asyncio

import pytest

from repo_onboarding.infrastructure.single_flight import SingleFlight


@pytest.mark.asyncio
async def test_concurrent_callers_share_one_attempt():
    calls = 0

    async def factory():
        nonlocal calls
        calls += 1
        await asyncio.sleep(0.01)
        return object()

    flight = SingleFlight(factory)
    results = await asyncio.gather(*(flight.get() for _ in range(5)))

    assert calls == 1
    assert all(r is results[0] for r in results)
    assert flight.ready
    assert flight.peek() is results[0]


@pytest.mark.asyncio
async def test_failure_is_retried_by_next_caller():
    attempts = []

    async def factory():
        attempts.append(1)
        if len(attempts) == 1:
            raise ConnectionError("down")
        return "conn"

    flight = SingleFlight(factory)
    with pytest.raises(ConnectionError):
        await flight.get()
    assert not flight.ready
    assert flight.peek() is None

    assert await flight.get() == "conn"
    assert len(attempts) == 2


@pytest.mark.asyncio
async def test_concurrent_failure_reaches_every_waiter():
    async def factory():
        await asyncio.sleep(0.01)
        raise ConnectionError("down")

    flight = SingleFlight(factory)
    results = await asyncio.gather(flight.get(), flight.get(), return_exceptions=True)
    assert all(isinstance(r, ConnectionError) for r in results)
    assert not flight.ready


@pytest.mark.asyncio
async def test_reset_forces_new_attempt():
    values = iter(["first", "second"])

    async def factory():
        return next(values)

    flight = SingleFlight(factory)
    assert await flight.get() == "first"
    flight.reset()
    assert await flight.get() == "second"
