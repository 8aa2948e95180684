"""Fan-out helper shared by the upload and split steps."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Sequence, TypeVar

T = TypeVar("T")


async def gather_ordered(
    coros: Sequence[Awaitable[T]],
    limit: int | None = None,
) -> list[T]:
    """
    Run ``coros`` concurrently and return their results in input order.

    Each result is written to the slot of the coroutine that produced it,
    so completion order never leaks into the output.  The first failure
    cancels every sibling still running and is re-raised as-is.

    Args:
        coros: Awaitables to run.  Slot ``i`` of the result belongs to ``coros[i]``.
        limit: Optional cap on how many run at once.
    """
    semaphore = asyncio.Semaphore(limit) if limit else None
    results: list[T | None] = [None] * len(coros)

    async def _run_slot(index: int, coro: Awaitable[T]) -> None:
        try:
            if semaphore is None:
                results[index] = await coro
                return
            async with semaphore:
                results[index] = await coro
        finally:
            # Cancelled while queued on the semaphore: the coroutine never started
            if asyncio.iscoroutine(coro):
                coro.close()

    tasks = [asyncio.ensure_future(_run_slot(i, c)) for i, c in enumerate(coros)]
    if not tasks:
        return []

    try:
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
    except asyncio.CancelledError:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise

    failed = [t for t in tasks if t in done and not t.cancelled() and t.exception() is not None]
    if failed:
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        raise failed[0].exception()

    return results  # type: ignore[return-value]
