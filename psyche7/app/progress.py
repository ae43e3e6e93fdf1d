from __future__ import annotations

"""Simulated progress for outstanding gateway calls.

The value is purely cosmetic: it creeps up by a random step on every tick,
never passes the ceiling on its own, and only reaches 100 when the caller
reports completion.
"""

import asyncio
import random
from contextlib import asynccontextmanager, suppress
from typing import AsyncIterator, Callable, Optional


class ProgressSimulator:
    def __init__(
        self,
        interval: float,
        max_step: float,
        *,
        ceiling: float = 90.0,
        rng: Callable[[], float] = random.random,
        on_change: Optional[Callable[[float], None]] = None,
    ) -> None:
        self.interval = interval
        self.max_step = max_step
        self.ceiling = ceiling
        self._rng = rng
        self._on_change = on_change
        self._task: Optional[asyncio.Task] = None
        self._completed = False
        self.value = 0.0

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def completed(self) -> bool:
        return self._completed

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change(self.value)

    def reset(self) -> None:
        self.value = 0.0
        self._completed = False
        self._notify()

    def tick(self) -> float:
        if self._completed:
            return self.value
        step = self._rng() * self.max_step
        new_value = min(self.value + step, self.ceiling)
        if new_value > self.value:
            self.value = new_value
            self._notify()
        return self.value

    def complete(self) -> None:
        """Force 100%. Only the first call has an effect."""
        if self._completed:
            return
        self._completed = True
        self.value = 100.0
        self._notify()

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            self.tick()

    @asynccontextmanager
    async def running(self) -> AsyncIterator["ProgressSimulator"]:
        """Tick in the background for the duration of the block.

        The ticker is cancelled on every exit path; the value is left as it
        was when the block ended.
        """
        if self.active:
            raise RuntimeError("progress simulator is already running")
        self.reset()
        self._task = asyncio.ensure_future(self._run())
        try:
            yield self
        finally:
            task, self._task = self._task, None
            task.cancel()
            with suppress(asyncio.CancelledError):
                await task
