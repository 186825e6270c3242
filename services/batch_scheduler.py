"""
Batch scheduler for rate-limited lookups.

Splits work into fixed-size batches, runs each batch concurrently,
and pauses between batches. Output order always equals input order,
whatever order the calls complete in.
"""

import asyncio
from typing import Awaitable, Callable, Sequence, TypeVar
import structlog

logger = structlog.get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")

DEFAULT_BATCH_SIZE = 3
DEFAULT_INTER_BATCH_DELAY_MS = 500


def chunk(items: Sequence[T], size: int) -> list[list[T]]:
    """
    Partition items into consecutive lists of at most size elements.

    Raises:
        ValueError: If size < 1
    """
    if size < 1:
        raise ValueError(f"Batch size must be at least 1, got {size}")
    return [list(items[i:i + size]) for i in range(0, len(items), size)]


async def run_batched(
    items: Sequence[T],
    work: Callable[[T], Awaitable[R]],
    batch_size: int = DEFAULT_BATCH_SIZE,
    inter_batch_delay_ms: int = DEFAULT_INTER_BATCH_DELAY_MS,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> list[R]:
    """
    Run work over items in batches.

    Every call in a batch must finish before the next batch starts,
    and the scheduler sleeps between batches (not after the last one).
    work is expected to handle its own errors; an exception escaping
    work propagates to the caller.

    Args:
        items: Inputs, in order
        work: Async function applied to each item
        batch_size: Maximum concurrent calls
        inter_batch_delay_ms: Pause between batches
        sleep: Sleep function (injectable for tests)

    Returns:
        Results, results[i] corresponding to items[i]
    """
    batches = chunk(items, batch_size)
    results: list[R] = []

    for index, batch in enumerate(batches):
        logger.debug(
            "batch_started",
            batch=index + 1,
            total_batches=len(batches),
            size=len(batch)
        )

        # gather preserves argument order
        batch_results = await asyncio.gather(*(work(item) for item in batch))
        results.extend(batch_results)

        if index < len(batches) - 1 and inter_batch_delay_ms > 0:
            await sleep(inter_batch_delay_ms / 1000)

    return results
