"""Fan-in helpers for composing deferred analysis results."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Iterable
from typing import TypeVar

T = TypeVar("T")


async def gather_first_failure(aws: Iterable[Awaitable[T]]) -> list[T]:
    """Await *aws* concurrently and return their results in input order.

    The first child to fail (in completion order) fails the whole gather:
    the remaining children are cancelled and that child's exception is
    re-raised unchanged.  Cancelling the gather cancels every child.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    if not tasks:
        return []
    try:
        pending = set(tasks)
        while pending:
            done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_EXCEPTION)
            failed = [t for t in tasks if t in done and not t.cancelled() and t.exception()]
            if failed:
                raise failed[0].exception()
        return [t.result() for t in tasks]
    finally:
        for task in tasks:
            if not task.done():
                task.cancel()
        # Let cancelled children unwind before the caller moves on.
        await asyncio.gather(*tasks, return_exceptions=True)
