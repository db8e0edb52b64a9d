"""Fixed-interval polling until a probe succeeds."""

from __future__ import annotations

import asyncio
import inspect
import time
from collections.abc import Awaitable, Callable

from opaclient.errors import RetryTimeoutError

__all__ = ["Probe", "retry_until_successful"]

Probe = Callable[[], bool | Awaitable[bool]]


async def _call(probe: Probe) -> bool:
    result = probe()
    if inspect.isawaitable(result):
        result = await result
    return bool(result)


async def retry_until_successful(duration: float, interval: float, probe: Probe) -> None:
    """Call ``probe`` until it returns True or ``duration`` seconds pass.

    The probe runs once immediately, then on every ``interval`` tick.
    Ticks are anchored to the start time, so a slow probe does not shift
    later ticks.

    Raises:
        ValueError: ``interval`` is not positive or ``duration`` is negative.
        RetryTimeoutError: the deadline passed without a successful probe.
    """
    if interval <= 0:
        msg = f"Retry interval must be positive, got {interval}"
        raise ValueError(msg)
    if duration < 0:
        msg = f"Retry duration must not be negative, got {duration}"
        raise ValueError(msg)

    start = time.monotonic()
    deadline = start + duration

    if await _call(probe):
        return

    tick = 1
    while True:
        next_tick = start + tick * interval
        now = time.monotonic()
        if now >= deadline or next_tick >= deadline:
            await asyncio.sleep(max(deadline - now, 0))
            raise RetryTimeoutError()
        await asyncio.sleep(max(next_tick - now, 0))
        tick += 1
        if await _call(probe):
            return
