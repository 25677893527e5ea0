import asyncio
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

T = TypeVar("T")
R = TypeVar("R")

DEFAULT_BATCH_SIZE = 5


async def gather_in_batches(
    items: Sequence[T],
    func: Callable[[T], Awaitable[R]],
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> list[R | BaseException]:
    """Run `func` over `items`, at most `batch_size` at a time, batch after batch.

    Results keep the order of `items`; a failed call leaves its exception in
    its slot instead of cancelling the rest of the batch.
    """
    batch_size = max(1, batch_size)
    results: list[R | BaseException] = []
    for start in range(0, len(items), batch_size):
        batch = items[start:start + batch_size]
        results.extend(await asyncio.gather(*(func(item) for item in batch), return_exceptions=True))
    return results
