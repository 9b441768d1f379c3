"""Async utility functions and helpers."""

import asyncio
from collections.abc import Awaitable
from typing import Any, TypeVar

T = TypeVar("T")


async def gather_with_limit(
    *coroutines: Awaitable[T], limit: int = 10, return_exceptions: bool = False
) -> list[Any]:
    """Run coroutines concurrently with a concurrency limit.

    Results come back in the order the coroutines were given, and the call
    only returns once every coroutine has finished.
    """
    if limit < 1:
        raise ValueError(f"Concurrency limit must be at least 1, got {limit}")

    semaphore = asyncio.Semaphore(limit)

    async def limited_coro(coro: Awaitable[T]) -> T:
        async with semaphore:
            return await coro

    limited_coroutines = [limited_coro(coro) for coro in coroutines]

    return await asyncio.gather(
        *limited_coroutines, return_exceptions=return_exceptions
    )


class AsyncContextManager:
    """Base class for async context managers."""

    async def __aenter__(self):
        await self.setup()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.cleanup()

    async def setup(self) -> None:
        """Setup the context manager."""
        pass

    async def cleanup(self) -> None:
        """Cleanup the context manager."""
        pass
