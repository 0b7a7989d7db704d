from __future__ import annotations

import asyncio

import pytest

from larder.domain.concurrency import gather_bounded
from larder.domain.errors import RemoteTransportError


def test_gather_bounded_preserves_input_order() -> None:
    async def slow_echo(value: int) -> int:
        await asyncio.sleep(0.001 * (5 - value))
        return value * 10

    outcomes = asyncio.run(gather_bounded([1, 2, 3, 4], slow_echo, limit=4))

    assert [outcome.item for outcome in outcomes] == [1, 2, 3, 4]
    assert [outcome.value for outcome in outcomes] == [10, 20, 30, 40]
    assert all(outcome.ok for outcome in outcomes)


def test_gather_bounded_caps_calls_in_flight() -> None:
    in_flight = 0
    peak = 0

    async def track(_: int) -> None:
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.001)
        in_flight -= 1

    asyncio.run(gather_bounded(range(20), track, limit=3))

    assert peak == 3


def test_gather_bounded_captures_remote_errors_per_item() -> None:
    async def flaky(value: int) -> int:
        if value % 2:
            raise RemoteTransportError(f"boom {value}")
        return value

    outcomes = asyncio.run(gather_bounded([0, 1, 2], flaky))

    assert [outcome.ok for outcome in outcomes] == [True, False, True]
    assert outcomes[1].value is None
    assert str(outcomes[1].error) == "boom 1"


def test_gather_bounded_propagates_programming_errors() -> None:
    async def broken(_: int) -> int:
        raise KeyError("bug")

    with pytest.raises(KeyError):
        asyncio.run(gather_bounded([1], broken))


def test_gather_bounded_rejects_non_positive_limit() -> None:
    async def noop(_: int) -> None:
        return None

    with pytest.raises(ValueError, match="limit"):
        asyncio.run(gather_bounded([1], noop, limit=0))
