"""Bounded scatter-gather over remote calls."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING

from larder.domain.errors import RemoteError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable

DEFAULT_MAX_IN_FLIGHT = 16


@dataclass(frozen=True, slots=True)
class Outcome[TItem, TValue]:
    """Result of one fan-out member, correlated with its input item."""

    item: TItem
    value: TValue | None = None
    error: RemoteError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def gather_bounded[TItem, TValue](
    items: Iterable[TItem],
    func: Callable[[TItem], Awaitable[TValue]],
    *,
    limit: int = DEFAULT_MAX_IN_FLIGHT,
) -> list[Outcome[TItem, TValue]]:
    """Run ``func`` over ``items`` concurrently with at most ``limit`` calls in flight.

    Outcomes come back in input order. Only ``RemoteError`` is captured per item;
    anything else propagates to the caller while calls already started keep
    running until the event loop shuts down.
    """

    if limit < 1:
        raise ValueError("limit must be at least 1")
    semaphore = asyncio.Semaphore(limit)

    async def run(item: TItem) -> Outcome[TItem, TValue]:
        async with semaphore:
            try:
                value = await func(item)
            except RemoteError as exc:
                return Outcome(item=item, error=exc)
        return Outcome(item=item, value=value)

    return list(await asyncio.gather(*(run(item) for item in items)))
