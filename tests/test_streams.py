"""Tests for subscriptions and broadcasting."""

import asyncio

import pytest

from parkover.errors import NoCapacity
from parkover.results import Failure, Success
from parkover.streams import Broadcaster, Subscription


@pytest.mark.asyncio
async def test_subscription_yields_pushed_values():
    subscription = Subscription()
    subscription.push(1)
    subscription.push(2)

    assert await subscription.next() == 1
    assert await subscription.next() == 2


@pytest.mark.asyncio
async def test_subscription_iteration_ends_on_cancel():
    detached = []
    subscription = Subscription(on_cancel=lambda: detached.append(True))
    subscription.push("a")

    received = []

    async def consume():
        async for value in subscription:
            received.append(value)

    task = asyncio.create_task(consume())
    await asyncio.sleep(0)
    subscription.cancel()
    await asyncio.wait_for(task, timeout=1)

    assert detached == [True]
    assert received == ["a"]

    subscription.push("b")
    subscription.cancel()
    assert detached == [True]


@pytest.mark.asyncio
async def test_subscription_next_timeout():
    subscription = Subscription()
    with pytest.raises(asyncio.TimeoutError):
        await subscription.next(timeout=0.01)


@pytest.mark.asyncio
async def test_broadcaster_fans_out_and_closes():
    broadcaster = Broadcaster()
    first = broadcaster.subscribe(initial="now")
    second = broadcaster.subscribe()
    assert len(broadcaster) == 2

    broadcaster.publish("next")
    assert await first.next() == "now"
    assert await first.next() == "next"
    assert await second.next() == "next"

    second.cancel()
    assert len(broadcaster) == 1

    broadcaster.close()
    assert first.cancelled
    assert len(broadcaster) == 0


def test_results():
    success = Success(3)
    failure = Failure(NoCapacity())

    assert success.ok and success.unwrap() == 3 and success.error is None
    assert not failure.ok
    assert failure.code == "no_capacity"
    assert failure.error.status_code == 409
    with pytest.raises(NoCapacity):
        failure.unwrap()
