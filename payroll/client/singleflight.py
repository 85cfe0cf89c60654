# payroll/client/singleflight.py
from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Generic, Optional, TypeVar

T = TypeVar("T")


class SingleFlight(Generic[T]):
    """
    Coalesce concurrent calls into one in-flight task.

    While a call is running, every other caller awaits that same task and gets
    the identical result (or exception). The slot is cleared as the task
    settles, so the next call after that starts a fresh one.
    """

    def __init__(self) -> None:
        self._task: Optional[asyncio.Task[T]] = None

    @property
    def in_flight(self) -> bool:
        return self._task is not None

    async def _run(self, fn: Callable[[], Awaitable[T]]) -> T:
        try:
            return await fn()
        finally:
            self._task = None

    async def do(self, fn: Callable[[], Awaitable[T]]) -> T:
        task = self._task
        if task is None:
            task = asyncio.ensure_future(self._run(fn))
            self._task = task
        # one waiter being cancelled must not cancel the shared call
        return await asyncio.shield(task)
