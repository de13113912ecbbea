from __future__ import annotations

import asyncio
from typing import Any, Callable, Optional, Protocol, Sequence

BatchCallback = Callable[[Sequence[Any]], None]
DoneCallback = Callable[[], None]


class BatchScheduler(Protocol):
    def schedule_batch(
        self,
        items: Sequence[Any],
        batch_size: int,
        on_batch: BatchCallback,
        on_done: DoneCallback,
    ) -> None: ...


class SyncScheduler:
    """Runs every batch inline. Handy for tests and non-interactive callers."""

    def schedule_batch(self, items, batch_size, on_batch, on_done) -> None:
        items = list(items)
        for start in range(0, len(items), batch_size):
            on_batch(items[start : start + batch_size])
        on_done()


class AsyncioScheduler:
    """
    Time-sliced batches on an asyncio event loop.

    Each batch runs as its own zero-delay callback, so other work queued on
    the loop gets a turn between batches. Suspension only ever happens at
    batch boundaries.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def schedule_batch(self, items, batch_size, on_batch, on_done) -> None:
        loop = self._loop or asyncio.get_running_loop()
        items = list(items)

        def step(start: int) -> None:
            on_batch(items[start : start + batch_size])
            next_start = start + batch_size
            if next_start < len(items):
                loop.call_soon(step, next_start)
            else:
                on_done()

        if not items:
            loop.call_soon(on_done)
            return
        loop.call_soon(step, 0)
