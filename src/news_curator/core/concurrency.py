"""Fan-out helpers with explicit concurrency limits."""

import asyncio
from typing import Awaitable, Callable, Iterable, Optional, TypeVar, Union

T = TypeVar("T")
R = TypeVar("R")


class ConcurrencyLimiter:
    """Async context manager limiting in-flight work.

    ``limit=None`` means unbounded; the caller opts into that explicitly.
    """

    def __init__(self, limit: Optional[int]) -> None:
        if limit is not None and limit < 1:
            raise ValueError("Concurrency limit must be at least 1")
        self.limit = limit
        self._semaphore = asyncio.Semaphore(limit) if limit is not None else None

    async def __aenter__(self) -> "ConcurrencyLimiter":
        if self._semaphore is not None:
            await self._semaphore.acquire()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        if self._semaphore is not None:
            self._semaphore.release()


async def map_isolated(
    func: Callable[[T], Awaitable[R]],
    items: Iterable[T],
    limiter: ConcurrencyLimiter,
) -> list[Union[R, Exception]]:
    """Apply ``func`` to every item concurrently.

    Each call is isolated: a failure is returned in that item's slot instead
    of cancelling its siblings. Output order matches input order.
    """

    async def _run(item: T) -> R:
        async with limiter:
            return await func(item)

    return await asyncio.gather(*(_run(item) for item in items), return_exceptions=True)
